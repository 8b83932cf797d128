"""Standalone Sweep Runner — one retirement pass for cron-style schedulers.

Invariants:
    - Exactly one sweep_all() pass per invocation, then the engine is disposed
    - Exit code 0 even when individual rules fail (failures are logged per rule)

Design Decisions:
    - Uses db/session.create_session_factory: no FastAPI app, no lifespan
"""

import asyncio
import logging

from taskwatch.config import get_settings
from taskwatch.db.session import create_session_factory
from taskwatch.infrastructure.observability import setup_logging
from taskwatch.services.retirement_sweep import RetirementSweep, SweepReport

logger = logging.getLogger(__name__)


async def run_once(database_url: str) -> SweepReport:
    engine, session_factory = create_session_factory(database_url)
    try:
        return await RetirementSweep(session_factory).sweep_all()
    finally:
        await engine.dispose()


def main() -> int:
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    asyncio.run(run_once(settings.database_url))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
