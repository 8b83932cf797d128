"""Retirement Triggers — post-write callbacks that re-evaluate the affected rule.

Invariants:
    - Invoked only AFTER the coverage write committed; never part of its transaction
    - A null rule id is a no-op (history entries not linked to a rule)
    - Evaluator failures are logged and swallowed: a coverage write never fails
      because retirement failed; the periodic sweep picks up anything dropped
    - Disabled triggers do nothing; correctness then rests on the sweep alone

Design Decisions:
    - Explicit callbacks owned by the write path instead of database triggers:
      testable, and the write path decides when to dispatch
    - Dispatched through FastAPI BackgroundTasks by the routes (async dispatch)
"""

import logging
from uuid import UUID

from taskwatch.core.domain_types import RetirementOutcome, RuleId
from taskwatch.services.retirement_evaluator import RetirementEvaluator

logger = logging.getLogger(__name__)


class RetirementTriggers:
    """Reactive hooks fired after confirmation/exception writes."""

    def __init__(self, evaluator: RetirementEvaluator, enabled: bool = True):
        self._evaluator = evaluator
        self.enabled = enabled

    async def on_confirmation_written(
        self, rule_id: UUID | None,
    ) -> RetirementOutcome | None:
        return await self._dispatch(rule_id, "confirmation")

    async def on_exception_written(
        self, rule_id: UUID | None,
    ) -> RetirementOutcome | None:
        return await self._dispatch(rule_id, "exception")

    async def _dispatch(
        self, rule_id: UUID | None, trigger: str,
    ) -> RetirementOutcome | None:
        if rule_id is None or not self.enabled:
            return None
        try:
            return await self._evaluator.evaluate(RuleId(rule_id))
        except Exception as e:
            logger.error(
                f"Retirement trigger failed for rule {rule_id}: {e}",
                extra={
                    "rule_id": str(rule_id),
                    "trigger": trigger,
                    "error_code": getattr(e, "code", None),
                },
                exc_info=True,
            )
            return None
