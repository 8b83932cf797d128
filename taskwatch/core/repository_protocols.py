"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Core functions accept structural types, never ORM classes

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - The ORM model satisfies RuleLike as-is; tests pass plain dataclasses
"""

from datetime import date
from typing import Protocol

from taskwatch.core.domain_types import MinuteOfDay, RuleId, UserId


class RuleLike(Protocol):
    """Structural contract for the schedule fields of a recurring rule.

    Satisfied by the RepeatingSession ORM model and by plain test doubles,
    so pure core logic never couples to SQLAlchemy.
    """
    id: RuleId
    user_id: UserId
    frequency: str
    day_of_week: int | None
    time_of_day_minutes: MinuteOfDay
    timezone: str | None
    start_date: date | None
    end_date: date | None
