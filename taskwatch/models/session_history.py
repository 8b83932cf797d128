"""SessionHistoryEntry ORM — logged stopwatch sessions, some confirming a rule occurrence.

Invariants:
    - A row confirms an occurrence iff repeating_session_id and original_time are both set
    - original_time holds the occurrence's scheduled instant, stored in UTC
    - repeating_session_id is NOT a foreign key: history outlives a retired rule

Design Decisions:
    - Confirmation is a role of the history row, not a separate table: one write
      path logs the session and accounts for the occurrence
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Index
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from taskwatch.db.base import Base


class SessionHistoryEntry(Base):
    """History entry — a confirmation record when linked to a rule."""
    __tablename__ = "session_history"
    __table_args__ = (
        Index(
            "idx_session_history_repeat_original",
            "user_id", "repeating_session_id", "original_time",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), nullable=False,
    )
    task_name: Mapped[str] = mapped_column(
        String(200), nullable=False, default="",
    )
    goal_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    bucket_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    ended_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    repeating_session_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), nullable=True,
    )
    original_time: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
