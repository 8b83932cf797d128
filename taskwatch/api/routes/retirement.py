"""Retirement — on-demand evaluation of one rule and the batch sweep surface.

Invariants:
    - POST /repeating-sessions/{id}/evaluate returns deleted | kept | not_found
      (not_found is a 200, not a 404: an already-retired rule is a success)
    - POST /retirement/sweep is parameterless and safe to invoke concurrently
    - MalformedRuleError from a single evaluation surfaces as a structured 422

Design Decisions:
    - Sweep runs inline (not BackgroundTasks) so an external scheduler sees counts
"""

from uuid import UUID

from fastapi import APIRouter, Depends

from taskwatch.api.dependencies import (
    get_retirement_evaluator, get_retirement_sweep,
)
from taskwatch.core.domain_types import RuleId
from taskwatch.schemas.retirement import EvaluationResponse, SweepResponse
from taskwatch.services.retirement_evaluator import RetirementEvaluator
from taskwatch.services.retirement_sweep import RetirementSweep

router = APIRouter(prefix="/api/v1", tags=["retirement"])


@router.post(
    "/repeating-sessions/{rule_id}/evaluate",
    response_model=EvaluationResponse,
)
async def evaluate_rule(
    rule_id: UUID,
    evaluator: RetirementEvaluator = Depends(get_retirement_evaluator),
):
    """Evaluate one rule and retire it when every occurrence is covered."""
    outcome = await evaluator.evaluate(RuleId(rule_id))
    return EvaluationResponse(rule_id=rule_id, outcome=outcome)


@router.post("/retirement/sweep", response_model=SweepResponse)
async def sweep_rules(
    sweep: RetirementSweep = Depends(get_retirement_sweep),
):
    """Re-evaluate every bounded rule (consistency backstop for triggers)."""
    report = await sweep.sweep_all()
    return SweepResponse(
        **report.counts(), failed_rule_ids=list(report.failed),
    )
