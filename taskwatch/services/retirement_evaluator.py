"""Retirement Evaluator — transactional shell around the pure retirement decision.

Invariants:
    - Every evaluate() call recomputes from current rows; nothing is cached or persisted
    - Rule load, coverage read, and delete run in ONE transaction, with the rule row
      locked (SELECT ... FOR UPDATE) before coverage is read
    - A missing rule → NOT_FOUND (a concurrent delete already happened, not an error)
    - A delete that affects zero rows → NOT_FOUND (another evaluator won the race)
    - MalformedRuleError propagates to the caller; the transaction rolls back and
      the rule is left in place

Design Decisions:
    - session_scope injected (db_manager.session or a bare sessionmaker): the same
      evaluator serves HTTP routes, post-write triggers, and the standalone sweep
    - Coverage queries skipped when the decision does not depend on them
      (unbounded and degenerate rules)
"""

import logging
from contextlib import AbstractAsyncContextManager
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from taskwatch.core.check_coverage import CoverageSnapshot
from taskwatch.core.decide_retirement import (
    RetirementDecision, decide_retirement, needs_coverage,
)
from taskwatch.core.domain_types import RetirementOutcome, RuleId
from taskwatch.services.coverage_repository import SqlCoverageRepository
from taskwatch.services.rule_repository import SqlRuleRepository

logger = logging.getLogger(__name__)

SessionScope = Callable[[], AbstractAsyncContextManager[AsyncSession]]


class RetirementEvaluator:
    """Decides whether a recurring rule is fully covered and retires it."""

    def __init__(self, session_scope: SessionScope):
        self._session_scope = session_scope

    async def evaluate(self, rule_id: RuleId) -> RetirementOutcome:
        async with self._session_scope() as db:
            async with db.begin():
                return await self._evaluate_locked(db, rule_id)

    async def _evaluate_locked(
        self, db: AsyncSession, rule_id: RuleId,
    ) -> RetirementOutcome:
        rules = SqlRuleRepository(db)
        rule = await rules.lock(rule_id)
        if rule is None:
            logger.debug(
                "Rule not found during evaluation",
                extra={"rule_id": str(rule_id), "outcome": "not_found"},
            )
            return RetirementOutcome.NOT_FOUND

        snapshot = CoverageSnapshot()
        if needs_coverage(rule):
            snapshot = await SqlCoverageRepository(db).load_snapshot(rule)
        decision = decide_retirement(rule, snapshot)

        if not decision.should_delete:
            self._log(rule_id, decision, RetirementOutcome.KEPT)
            return RetirementOutcome.KEPT

        if not await rules.delete(rule_id):
            self._log(rule_id, decision, RetirementOutcome.NOT_FOUND)
            return RetirementOutcome.NOT_FOUND
        self._log(rule_id, decision, RetirementOutcome.DELETED)
        return RetirementOutcome.DELETED

    @staticmethod
    def _log(
        rule_id: RuleId, decision: RetirementDecision, outcome: RetirementOutcome,
    ) -> None:
        level = (
            logging.INFO if outcome is RetirementOutcome.DELETED
            else logging.DEBUG
        )
        logger.log(
            level,
            f"Rule {rule_id} evaluated: {decision.state.value} -> {outcome.value}",
            extra={
                "rule_id": str(rule_id),
                "state": decision.state.value,
                "outcome": outcome.value,
                "expected": decision.expected,
                "covered": decision.covered,
            },
        )
