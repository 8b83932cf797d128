"""Retirement Decision — pure (rule, coverage snapshot) → keep/delete decision.

Invariants:
    - UNBOUNDED (start or end missing) → keep, regardless of coverage
    - DEGENERATE (end < start) → delete, regardless of coverage
    - EMPTY (valid window, zero occurrences) → delete (vacuous coverage)
    - COMPLETE (covered == expected > 0) → delete
    - INCOMPLETE otherwise → keep
    - No IO, no clock: same inputs always produce the same decision

Design Decisions:
    - Decision separated from the transactional delete (see services/retirement_evaluator):
      the whole state table is unit-testable without a database
    - needs_coverage() lets the shell skip both coverage queries when the
      answer does not depend on them
"""

from dataclasses import dataclass

from taskwatch.core.check_coverage import CoverageSnapshot, count_covered
from taskwatch.core.domain_types import RuleState
from taskwatch.core.expand_occurrences import (
    expand_occurrences, is_bounded, is_degenerate,
)
from taskwatch.core.repository_protocols import RuleLike

_DELETING_STATES = frozenset({
    RuleState.DEGENERATE, RuleState.EMPTY, RuleState.COMPLETE,
})


@dataclass(frozen=True)
class RetirementDecision:
    state: RuleState
    expected: int = 0
    covered: int = 0

    @property
    def should_delete(self) -> bool:
        return self.state in _DELETING_STATES


def needs_coverage(rule: RuleLike) -> bool:
    """True when the decision depends on coverage records."""
    return is_bounded(rule) and not is_degenerate(rule)


def decide_retirement(
    rule: RuleLike, snapshot: CoverageSnapshot | None = None,
) -> RetirementDecision:
    """Classify a rule into its retirement state.

    Raises MalformedRuleError when the schedule fields cannot be expanded.
    """
    if not is_bounded(rule):
        return RetirementDecision(RuleState.UNBOUNDED)
    if is_degenerate(rule):
        return RetirementDecision(RuleState.DEGENERATE)

    occurrences = expand_occurrences(rule)
    if not occurrences:
        return RetirementDecision(RuleState.EMPTY)

    covered = count_covered(occurrences, snapshot or CoverageSnapshot())
    state = (
        RuleState.COMPLETE if covered == len(occurrences)
        else RuleState.INCOMPLETE
    )
    return RetirementDecision(state, expected=len(occurrences), covered=covered)
