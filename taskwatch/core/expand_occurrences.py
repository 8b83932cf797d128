"""Recurrence Expansion — enumerate the occurrences of a bounded rule.

Invariants:
    - Output is ascending by local date, deterministic, and stateless
    - Daily: every date in [start_date, end_date]
    - Weekly: every date in the window whose weekday equals day_of_week;
      first candidate is start_date + (target - start_weekday + 7) % 7 days
    - end_date < start_date → empty list (the caller treats it as degenerate)
    - Unbounded rules are never expanded

Design Decisions:
    - Returns a list, not a generator: the evaluator needs len() and a second
      pass for coverage counting, and bounded windows are small
"""

from datetime import date, timedelta

from taskwatch.core.domain_types import Frequency, Occurrence, Weekday
from taskwatch.core.errors import MalformedRuleError, ErrorContext
from taskwatch.core.repository_protocols import RuleLike
from taskwatch.core.resolve_instant import load_zone, resolve_instant


def is_bounded(rule: RuleLike) -> bool:
    return rule.start_date is not None and rule.end_date is not None


def is_degenerate(rule: RuleLike) -> bool:
    return is_bounded(rule) and rule.end_date < rule.start_date


def candidate_dates(rule: RuleLike) -> list[date]:
    """Local calendar dates the rule is expected to fire on."""
    if not is_bounded(rule):
        raise MalformedRuleError(
            "Cannot expand an unbounded rule", "end_date", _context(rule),
        )
    start, end = rule.start_date, rule.end_date
    frequency = _frequency(rule)
    if end < start:
        return []

    if frequency is Frequency.DAILY:
        first, step = start, timedelta(days=1)
    else:
        target = _weekday(rule)
        offset = (target - Weekday.of(start) + 7) % 7
        first, step = start + timedelta(days=offset), timedelta(days=7)

    dates = []
    current = first
    while current <= end:
        dates.append(current)
        current += step
    return dates


def expand_occurrences(rule: RuleLike) -> list[Occurrence]:
    """Pair each candidate date with its resolved UTC instant."""
    dates = candidate_dates(rule)
    if not dates:
        return []
    context = _context(rule)
    load_zone(rule.timezone, context)  # fail fast before resolving every date
    return [
        Occurrence(
            local_date=d,
            scheduled_instant=resolve_instant(
                d, rule.time_of_day_minutes, rule.timezone, context,
            ),
        )
        for d in dates
    ]


def _frequency(rule: RuleLike) -> Frequency:
    try:
        return Frequency(rule.frequency)
    except ValueError as e:
        raise MalformedRuleError(
            f"Unknown frequency '{rule.frequency}'", "frequency", _context(rule),
        ) from e


def _weekday(rule: RuleLike) -> int:
    if rule.day_of_week is None:
        raise MalformedRuleError(
            "Weekly rule has no day_of_week", "day_of_week", _context(rule),
        )
    try:
        return Weekday(rule.day_of_week).value
    except ValueError as e:
        raise MalformedRuleError(
            f"day_of_week out of range: {rule.day_of_week}",
            "day_of_week", _context(rule),
        ) from e


def _context(rule: RuleLike) -> ErrorContext:
    rule_id = getattr(rule, "id", None)
    user_id = getattr(rule, "user_id", None)
    return ErrorContext(
        rule_id=str(rule_id) if rule_id is not None else None,
        user_id=str(user_id) if user_id is not None else None,
    )
