"""Rule Repository — SQL access to repeating_sessions for the retirement shell.

Invariants:
    - lock() issues SELECT ... FOR UPDATE: concurrent evaluators of one rule
      serialize on the row until the surrounding transaction ends (PostgreSQL)
    - delete() is conditional on the row still existing; False means another
      evaluator already retired it
    - list_bounded_ids() returns only rules with a non-null end_date

Design Decisions:
    - Repository bound to a caller-owned AsyncSession: the evaluator controls
      the transaction, the repository never commits
    - FOR UPDATE is silently dropped by SQLite; tests rely on sequential access
"""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskwatch.core.domain_types import RuleId
from taskwatch.models.repeating_session import RepeatingSession


class SqlRuleRepository:
    """Rule lookups, row locks, and conditional deletes over an open AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def lock(self, rule_id: RuleId) -> RepeatingSession | None:
        result = await self.db.execute(
            select(RepeatingSession)
            .where(RepeatingSession.id == rule_id)
            .with_for_update(),
        )
        return result.scalar_one_or_none()

    async def delete(self, rule_id: RuleId) -> bool:
        result = await self.db.execute(
            delete(RepeatingSession)
            .where(RepeatingSession.id == rule_id)
            .execution_options(synchronize_session=False),
        )
        return (result.rowcount or 0) > 0

    async def list_bounded_ids(self) -> list[RuleId]:
        result = await self.db.execute(
            select(RepeatingSession.id)
            .where(RepeatingSession.end_date.is_not(None))
            .order_by(RepeatingSession.created_at, RepeatingSession.id),
        )
        return [RuleId(rule_id) for rule_id in result.scalars().all()]
