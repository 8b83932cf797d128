"""Taskwatch Retirement API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map TaskwatchError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager
    - The periodic sweep task (when enabled) is cancelled before the engine is disposed

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - In-process sweep loop as the default timer; deployments that prefer cron
      disable it and call POST /api/v1/retirement/sweep or `taskwatch-sweep`
"""

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskwatch.api.error_handlers import register_error_handlers
from taskwatch.infrastructure.database import init_db
from taskwatch.infrastructure.observability import setup_logging
from taskwatch.config import get_settings
from taskwatch.api.routes import health, history, repeating_exceptions, retirement
from taskwatch.services.retirement_sweep import RetirementSweep

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    sweep_task = None
    if settings.retirement_sweep_enabled:
        sweep_task = asyncio.create_task(
            RetirementSweep(manager.session).run_periodically(
                settings.retirement_sweep_interval_seconds,
            ),
        )
    logger.info("Taskwatch API started")
    yield
    logger.info("Taskwatch API shutting down")
    if sweep_task is not None:
        sweep_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweep_task
    await manager.dispose()


app = FastAPI(
    title="Taskwatch Retirement API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(history.router)
app.include_router(repeating_exceptions.router)
app.include_router(retirement.router)

register_error_handlers(app)
