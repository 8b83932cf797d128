"""RepeatingException ORM — explicit skip/reschedule of one rule occurrence.

Invariants:
    - (user_id, routine_id, occurrence_date) identifies the excepted occurrence
    - occurrence_date is the LOCAL calendar date of the occurrence, not an instant
    - action is one of: skipped, rescheduled; rescheduled rows may carry new times

Design Decisions:
    - routine_id is NOT a foreign key: exceptions survive rule retirement
    - Date column over 'YYYY-MM-DD' text: exact date equality without parsing
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import Date, DateTime, String, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from taskwatch.core.domain_types import ExceptionAction
from taskwatch.db.base import Base


class RepeatingException(Base):
    """Exception record — covers an occurrence without logging it."""
    __tablename__ = "repeating_exceptions"
    __table_args__ = (
        Index(
            "idx_repeating_exceptions_lookup",
            "user_id", "routine_id", "occurrence_date",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False,
    )
    routine_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False,
    )
    occurrence_date: Mapped[date] = mapped_column(Date, nullable=False)
    action: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ExceptionAction.SKIPPED.value,
    )
    new_started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    new_ended_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
