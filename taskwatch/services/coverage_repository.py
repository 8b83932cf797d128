"""Coverage Repository — loads confirmation and exception records for one rule.

Invariants:
    - load_snapshot() runs at most two queries regardless of window length
    - Records are matched on (user_id, rule_id): another user's rows never cover
    - Confirmations without original_time are ignored (not a scheduled occurrence)

Design Decisions:
    - Column-only selects (original_time, occurrence_date): no ORM identity map churn
      for long-running rules with hundreds of history rows
    - is_occurrence_covered() kept for single-occurrence probes; the evaluator
      always uses the batch snapshot
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskwatch.core.check_coverage import CoverageSnapshot, is_covered
from taskwatch.core.domain_types import Occurrence
from taskwatch.core.repository_protocols import RuleLike
from taskwatch.models.repeating_exception import RepeatingException
from taskwatch.models.session_history import SessionHistoryEntry


class SqlCoverageRepository:
    """Coverage lookups over an open AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def load_snapshot(self, rule: RuleLike) -> CoverageSnapshot:
        instants = await self.db.execute(
            select(SessionHistoryEntry.original_time).where(
                SessionHistoryEntry.user_id == rule.user_id,
                SessionHistoryEntry.repeating_session_id == rule.id,
                SessionHistoryEntry.original_time.is_not(None),
            ),
        )
        dates = await self.db.execute(
            select(RepeatingException.occurrence_date).where(
                RepeatingException.user_id == rule.user_id,
                RepeatingException.routine_id == rule.id,
            ),
        )
        return CoverageSnapshot.build(
            instants.scalars().all(), dates.scalars().all(),
        )

    async def is_occurrence_covered(
        self, rule: RuleLike, occurrence: Occurrence,
    ) -> bool:
        return is_covered(occurrence, await self.load_snapshot(rule))
