"""Retirement Sweep — periodic batch re-evaluation of every bounded rule.

Invariants:
    - Visits every rule with a non-null end_date present when the pass starts
    - Each rule evaluated in its own transaction; one failure never aborts the pass
    - A failed rule is left in place, so it is reported as kept AND failed
    - Safe to overlap with triggers and with another sweep (row locks + conditional delete)
    - Cancellation between rules leaves no partial state

Design Decisions:
    - Fully redundant with triggers: a reconcile loop, not a scheduler of work
    - run_periodically() survives a failing pass (e.g. database down while
      listing rules) and retries on the next tick
"""

import asyncio
import logging
from dataclasses import dataclass, field

from taskwatch.core.domain_types import RetirementOutcome, RuleId
from taskwatch.services.retirement_evaluator import (
    RetirementEvaluator, SessionScope,
)
from taskwatch.services.rule_repository import SqlRuleRepository

logger = logging.getLogger(__name__)


@dataclass
class SweepReport:
    """Per-outcome rule ids for one sweep pass."""
    deleted: list[RuleId] = field(default_factory=list)
    kept: list[RuleId] = field(default_factory=list)
    not_found: list[RuleId] = field(default_factory=list)
    failed: list[RuleId] = field(default_factory=list)

    def record(self, rule_id: RuleId, outcome: RetirementOutcome) -> None:
        {
            RetirementOutcome.DELETED: self.deleted,
            RetirementOutcome.KEPT: self.kept,
            RetirementOutcome.NOT_FOUND: self.not_found,
        }[outcome].append(rule_id)

    def record_failure(self, rule_id: RuleId) -> None:
        self.failed.append(rule_id)
        self.kept.append(rule_id)

    def counts(self) -> dict[str, int]:
        return {
            "deleted": len(self.deleted),
            "kept": len(self.kept),
            "not_found": len(self.not_found),
            "failed": len(self.failed),
        }


class RetirementSweep:
    """Batch pass over all bounded rules — the consistency backstop for triggers."""

    def __init__(
        self,
        session_scope: SessionScope,
        evaluator: RetirementEvaluator | None = None,
    ):
        self._session_scope = session_scope
        self._evaluator = evaluator or RetirementEvaluator(session_scope)

    async def sweep_all(self) -> SweepReport:
        rule_ids = await self._list_bounded_ids()
        report = SweepReport()
        for rule_id in rule_ids:
            try:
                outcome = await self._evaluator.evaluate(rule_id)
            except Exception as e:
                logger.error(
                    f"Sweep failed to evaluate rule {rule_id}: {e}",
                    extra={
                        "rule_id": str(rule_id),
                        "error_code": getattr(e, "code", None),
                    },
                    exc_info=True,
                )
                report.record_failure(rule_id)
                continue
            report.record(rule_id, outcome)
        logger.info(
            f"Retirement sweep finished over {len(rule_ids)} rule(s)",
            extra=report.counts(),
        )
        return report

    async def run_periodically(self, interval_seconds: float) -> None:
        """Sweep forever, one pass per interval, until the task is cancelled."""
        while True:
            try:
                await self.sweep_all()
            except Exception as e:
                logger.error(f"Retirement sweep pass failed: {e}", exc_info=True)
            await asyncio.sleep(interval_seconds)

    async def _list_bounded_ids(self) -> list[RuleId]:
        async with self._session_scope() as db:
            return await SqlRuleRepository(db).list_bounded_ids()
