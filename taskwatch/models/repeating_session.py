"""RepeatingSession ORM — persists recurring schedule rules.

Invariants:
    - id is UUID primary key
    - frequency is one of: daily, weekly; weekly rows carry day_of_week (0=Sunday .. 6=Saturday)
    - time_of_day_minutes within 0..1439
    - start_date/end_date are local dates in `timezone` (both inclusive, both nullable)
    - A row is deleted exactly once, by the retirement evaluator, with no tombstone

Design Decisions:
    - Schedule fields are loose columns, not check constraints: malformed rows
      must be representable so a sweep can log and skip them
    - Labeling columns (task/goal/bucket, duration, is_active) belong to the
      authoring surface; retirement never reads them
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import Boolean, Date, DateTime, Integer, String, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from taskwatch.db.base import Base


class RepeatingSession(Base):
    """Recurring schedule rule — the unit retired by the evaluator."""
    __tablename__ = "repeating_sessions"
    __table_args__ = (
        Index("idx_repeating_sessions_end_date", "end_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
    frequency: Mapped[str] = mapped_column(
        String(10), nullable=False, default="daily",
    )
    day_of_week: Mapped[int | None] = mapped_column(Integer, nullable=True)
    time_of_day_minutes: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    duration_minutes: Mapped[int] = mapped_column(
        Integer, nullable=False, default=60,
    )
    task_name: Mapped[str] = mapped_column(
        String(200), nullable=False, default="",
    )
    goal_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    bucket_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    timezone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
