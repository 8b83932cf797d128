"""Instant Resolution — local calendar date + minute-of-day + zone → absolute UTC instant.

Invariants:
    - Returned datetimes are always tz-aware and normalized to UTC
    - minute_of_day must be within 0..1439
    - A missing (None/blank) zone name resolves as UTC
    - Unknown zone names raise MalformedRuleError (never silently fall back)

Design Decisions:
    - zoneinfo default disambiguation (fold=0): ambiguous wall times take the
      offset in effect before the transition; nonexistent wall times are read
      with the pre-transition offset too. No custom strategy layered on top.
    - normalize_instant lives here so every comparison site shares one rule for
      naive values read back from the store (they are UTC)
"""

from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from taskwatch.core.domain_types import DEFAULT_TIMEZONE, MINUTES_PER_DAY, MinuteOfDay
from taskwatch.core.errors import ErrorContext, MalformedRuleError


def load_zone(name: str | None, context: ErrorContext | None = None) -> ZoneInfo:
    """Resolve an IANA zone name, treating None/blank as UTC."""
    key = (name or "").strip() or DEFAULT_TIMEZONE
    try:
        return ZoneInfo(key)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise MalformedRuleError(
            f"Unknown timezone '{key}'", "timezone", context,
        ) from e


def resolve_instant(
    local_date: date,
    minute_of_day: MinuteOfDay,
    timezone_name: str | None,
    context: ErrorContext | None = None,
) -> datetime:
    """Combine a local date and minute offset under a named zone into a UTC instant.

    context, when given, is attached to any MalformedRuleError so the error
    envelope names the offending rule.
    """
    if not 0 <= minute_of_day < MINUTES_PER_DAY:
        raise MalformedRuleError(
            f"time_of_day_minutes out of range: {minute_of_day}",
            "time_of_day_minutes", context,
        )
    hour, minute = divmod(minute_of_day, 60)
    local = datetime.combine(
        local_date, time(hour, minute), tzinfo=load_zone(timezone_name, context),
    )
    return local.astimezone(timezone.utc)


def normalize_instant(value: datetime) -> datetime:
    """Normalize a stored instant to tz-aware UTC (naive values are UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
