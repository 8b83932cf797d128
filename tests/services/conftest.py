"""Service test fixtures — async DB, session manager, seeders, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched so background triggers and services share the test DB
    - Seeders commit before returning: rows are visible to every later session

Design Decisions:
    - SQLite in-memory: fast, no external dependency; FOR UPDATE is a no-op there,
      so concurrency is covered by sequential idempotency tests instead
"""

import uuid
from datetime import date, datetime

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from taskwatch.db.base import Base
from taskwatch.infrastructure.database import get_db, DatabaseSessionManager
import taskwatch.infrastructure.database as db_module
import taskwatch.models  # noqa: F401
from taskwatch.models.repeating_exception import RepeatingException
from taskwatch.models.repeating_session import RepeatingSession
from taskwatch.models.session_history import SessionHistoryEntry
from taskwatch.main import app


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def test_manager(test_engine, test_session_factory, monkeypatch):
    """DatabaseSessionManager bound to the test engine, installed as db_manager."""
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = test_engine
    manager._session_factory = test_session_factory
    monkeypatch.setattr(db_module, "db_manager", manager)
    return manager


@pytest.fixture
async def client(test_manager, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def owner_id():
    return uuid.uuid4()


@pytest.fixture
def seed_rule(test_db, owner_id):
    """Insert a rule; defaults to the daily 2025-01-01..03 09:00 UTC window."""
    async def _seed(**fields) -> RepeatingSession:
        values = {
            "user_id": owner_id,
            "frequency": "daily",
            "time_of_day_minutes": 9 * 60,
            "timezone": "UTC",
            "start_date": date(2025, 1, 1),
            "end_date": date(2025, 1, 3),
            "task_name": "Morning pages",
        }
        values.update(fields)
        rule = RepeatingSession(**values)
        test_db.add(rule)
        await test_db.commit()
        return rule
    return _seed


@pytest.fixture
def seed_confirmation(test_db):
    async def _seed(rule: RepeatingSession, instant: datetime, user_id=None):
        entry = SessionHistoryEntry(
            user_id=user_id or rule.user_id,
            task_name=rule.task_name,
            started_at=instant,
            ended_at=instant,
            repeating_session_id=rule.id,
            original_time=instant,
        )
        test_db.add(entry)
        await test_db.commit()
        return entry
    return _seed


@pytest.fixture
def seed_exception(test_db):
    async def _seed(rule: RepeatingSession, day: date, user_id=None):
        exception = RepeatingException(
            user_id=user_id or rule.user_id,
            routine_id=rule.id,
            occurrence_date=day,
            action="skipped",
        )
        test_db.add(exception)
        await test_db.commit()
        return exception
    return _seed


@pytest.fixture
def rule_exists(test_session_factory):
    """Check for a rule row with a fresh session (no identity-map caching)."""
    async def _exists(rule_id) -> bool:
        async with test_session_factory() as session:
            result = await session.execute(
                select(RepeatingSession.id).where(RepeatingSession.id == rule_id),
            )
            return result.scalar_one_or_none() is not None
    return _exists
