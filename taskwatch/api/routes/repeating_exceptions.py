"""Repeating Exceptions — write path for skipped/rescheduled occurrences.

Invariants:
    - The exception commits before any retirement work is scheduled
    - on_exception_written fires after every insert

Design Decisions:
    - Same post-write dispatch as history entries (BackgroundTasks)
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from taskwatch.api.dependencies import get_retirement_triggers
from taskwatch.infrastructure.database import get_db
from taskwatch.models.repeating_exception import RepeatingException
from taskwatch.schemas.coverage import (
    RepeatingExceptionCreate, RepeatingExceptionResponse,
)
from taskwatch.services.retirement_triggers import RetirementTriggers

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/v1/repeating-exceptions", tags=["repeating-exceptions"],
)


@router.post(
    "", response_model=RepeatingExceptionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_repeating_exception(
    body: RepeatingExceptionCreate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    triggers: RetirementTriggers = Depends(get_retirement_triggers),
):
    """Record a skip/reschedule and schedule a retirement check for its rule."""
    exception = RepeatingException(
        **body.model_dump(exclude={"action"}), action=body.action.value,
    )
    db.add(exception)
    await db.commit()
    await db.refresh(exception)
    logger.info(
        f"Occurrence {exception.occurrence_date} {exception.action}",
        extra={"rule_id": str(exception.routine_id)},
    )
    background_tasks.add_task(
        triggers.on_exception_written, exception.routine_id,
    )
    return RepeatingExceptionResponse(
        id=exception.id,
        user_id=exception.user_id,
        routine_id=exception.routine_id,
        occurrence_date=exception.occurrence_date,
        action=exception.action,
    )
