"""Coverage Schemas — Pydantic models for history entries and occurrence exceptions.

Invariants:
    - A history entry's ended_at >= started_at
    - original_time and repeating_session_id travel together (both or neither)
    - All datetimes must be tz-aware; they are normalized to UTC before storage
    - HistoryEntryUpdate may omit fields but never null out a NOT NULL column
    - RepeatingExceptionCreate.action is skipped | rescheduled; reschedules may carry new times

Design Decisions:
    - model_validator for cross-field rules — keeps route handlers free of checks
    - check_history_consistency shared by create and the merged PATCH state, so
      both write paths enforce one rule set
"""

from datetime import date, datetime, timezone
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from taskwatch.core.domain_types import ExceptionAction
from taskwatch.core.resolve_instant import normalize_instant


def _to_utc(v: datetime | None) -> datetime | None:
    if v is None:
        return None
    if v.tzinfo is None:
        raise ValueError("datetime must include a timezone offset")
    return v.astimezone(timezone.utc)


def check_history_consistency(
    started_at: datetime,
    ended_at: datetime,
    repeating_session_id: UUID | None,
    original_time: datetime | None,
) -> None:
    """Raise ValueError when a history entry's fields contradict each other."""
    if normalize_instant(ended_at) < normalize_instant(started_at):
        raise ValueError("ended_at must not precede started_at")
    if (repeating_session_id is None) != (original_time is None):
        raise ValueError(
            "repeating_session_id and original_time must be set together",
        )


class HistoryEntryCreate(BaseModel):
    """Logged session; a confirmation when linked to a rule occurrence."""
    user_id: UUID
    task_name: str = Field("", max_length=200)
    goal_name: str | None = Field(None, max_length=200)
    bucket_name: str | None = Field(None, max_length=200)
    started_at: datetime
    ended_at: datetime
    repeating_session_id: UUID | None = None
    original_time: datetime | None = None

    @field_validator("started_at", "ended_at", "original_time")
    @classmethod
    def normalize_utc(cls, v: datetime | None) -> datetime | None:
        return _to_utc(v)

    @model_validator(mode="after")
    def check_consistency(self):
        check_history_consistency(
            self.started_at, self.ended_at,
            self.repeating_session_id, self.original_time,
        )
        return self


class HistoryEntryUpdate(BaseModel):
    """Partial update — only fields present in the body are applied."""
    task_name: str | None = Field(None, max_length=200)
    started_at: datetime | None = None
    ended_at: datetime | None = None
    repeating_session_id: UUID | None = None
    original_time: datetime | None = None

    @field_validator("task_name", "started_at", "ended_at")
    @classmethod
    def reject_null(cls, v):
        # only runs for fields present in the body
        if v is None:
            raise ValueError("field cannot be null")
        return v

    @field_validator("started_at", "ended_at", "original_time")
    @classmethod
    def normalize_utc(cls, v: datetime | None) -> datetime | None:
        return _to_utc(v)


class HistoryEntryResponse(BaseModel):
    id: UUID
    user_id: UUID
    task_name: str
    started_at: datetime
    ended_at: datetime
    repeating_session_id: UUID | None
    original_time: datetime | None


class RepeatingExceptionCreate(BaseModel):
    """Explicit skip or reschedule of one occurrence, by local date."""
    user_id: UUID
    routine_id: UUID
    occurrence_date: date
    action: ExceptionAction = ExceptionAction.SKIPPED
    new_started_at: datetime | None = None
    new_ended_at: datetime | None = None

    @field_validator("new_started_at", "new_ended_at")
    @classmethod
    def normalize_utc(cls, v: datetime | None) -> datetime | None:
        return _to_utc(v)

    @model_validator(mode="after")
    def check_reschedule(self):
        if self.action is ExceptionAction.SKIPPED and (
            self.new_started_at or self.new_ended_at
        ):
            raise ValueError("skipped occurrences cannot carry new times")
        if (
            self.new_started_at and self.new_ended_at
            and self.new_ended_at < self.new_started_at
        ):
            raise ValueError("new_ended_at must not precede new_started_at")
        return self


class RepeatingExceptionResponse(BaseModel):
    id: UUID
    user_id: UUID
    routine_id: UUID
    occurrence_date: date
    action: ExceptionAction
