"""Async Session Factory — provides async DB sessions outside FastAPI.

Invariants:
    - Meant for scripts (the standalone sweep runner) and test fixtures
    - Sessions do not expire on commit, matching DatabaseSessionManager

Design Decisions:
    - Separate from infrastructure/database.py: cron-invoked sweeps need a
      session factory without the app lifespan
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker,
)


def create_session_factory(
    database_url: str,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Create an engine and async session factory for the given database URL."""
    engine = create_async_engine(database_url, echo=False)
    return engine, async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False,
    )
