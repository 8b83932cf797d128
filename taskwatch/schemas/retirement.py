"""Retirement Schemas — responses for single evaluations and sweep passes."""

from uuid import UUID

from pydantic import BaseModel

from taskwatch.core.domain_types import RetirementOutcome


class EvaluationResponse(BaseModel):
    rule_id: UUID
    outcome: RetirementOutcome


class SweepResponse(BaseModel):
    deleted: int
    kept: int
    not_found: int
    failed: int
    failed_rule_ids: list[UUID]
