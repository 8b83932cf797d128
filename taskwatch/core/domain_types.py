"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - RuleId, UserId wrap UUIDs — never use bare UUID in domain logic
    - Weekday numbering is Sunday-based (0=Sunday .. 6=Saturday), matching stored rows
    - Occurrence is derived, immutable, and never persisted
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

RuleId = NewType("RuleId", UUID)
UserId = NewType("UserId", UUID)


# ─── Value Types ─────────────────────────────────────────────────

MinuteOfDay = NewType("MinuteOfDay", int)   # 0–1439

MINUTES_PER_DAY = 24 * 60
DEFAULT_TIMEZONE = "UTC"


# ─── Enums ───────────────────────────────────────────────────────

class Frequency(str, Enum):
    """Recurrence kinds — maps to DB `frequency` column."""
    DAILY = "daily"
    WEEKLY = "weekly"


class Weekday(int, Enum):
    """Sunday-based weekday numbers — maps to DB `day_of_week` column."""
    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6

    @classmethod
    def of(cls, day: date) -> "Weekday":
        # date.weekday() is Monday-based
        return cls((day.weekday() + 1) % 7)


class RuleState(str, Enum):
    """Retirement states — each evaluation classifies a rule into exactly one."""
    UNBOUNDED = "unbounded"
    DEGENERATE = "degenerate"
    EMPTY = "empty"
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"


class RetirementOutcome(str, Enum):
    """Result of a single evaluate() call."""
    DELETED = "deleted"
    KEPT = "kept"
    NOT_FOUND = "not_found"


class ExceptionAction(str, Enum):
    """What the user did with a skipped occurrence."""
    SKIPPED = "skipped"
    RESCHEDULED = "rescheduled"


# ─── Derived Values ──────────────────────────────────────────────

@dataclass(frozen=True)
class Occurrence:
    """One expected instance of a rule: local calendar date + absolute instant (UTC)."""
    local_date: date
    scheduled_instant: datetime
