"""Coverage Checking — pure matching of occurrences against a coverage snapshot.

Invariants:
    - An occurrence is covered iff its instant is in confirmed_instants
      OR its local date is in excepted_dates (exact equality, no tolerance)
    - A snapshot belongs to exactly one (user_id, rule_id) pair
    - Adding records to a snapshot never un-covers an occurrence

Design Decisions:
    - Two frozensets built once per evaluation: O(1) lookup per occurrence,
      the IO side fetches them in at most two queries (see coverage_repository)
    - Instants normalized on construction so callers can pass raw DB values
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable

from taskwatch.core.domain_types import Occurrence
from taskwatch.core.resolve_instant import normalize_instant


@dataclass(frozen=True)
class CoverageSnapshot:
    """Confirmation instants and exception dates recorded for one rule."""
    confirmed_instants: frozenset[datetime] = field(default_factory=frozenset)
    excepted_dates: frozenset[date] = field(default_factory=frozenset)

    @classmethod
    def build(
        cls, instants: Iterable[datetime | None], dates: Iterable[date | None],
    ) -> "CoverageSnapshot":
        return cls(
            confirmed_instants=frozenset(
                normalize_instant(i) for i in instants if i is not None
            ),
            excepted_dates=frozenset(d for d in dates if d is not None),
        )


def is_covered(occurrence: Occurrence, snapshot: CoverageSnapshot) -> bool:
    return (
        normalize_instant(occurrence.scheduled_instant) in snapshot.confirmed_instants
        or occurrence.local_date in snapshot.excepted_dates
    )


def count_covered(
    occurrences: Iterable[Occurrence], snapshot: CoverageSnapshot,
) -> int:
    """Count occurrences matched by either coverage source."""
    return sum(1 for o in occurrences if is_covered(o, snapshot))
