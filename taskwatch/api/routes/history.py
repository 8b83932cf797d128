"""Session History — write path for logged sessions and occurrence confirmations.

Invariants:
    - The entry commits before any retirement work is scheduled
    - on_confirmation_written fires after insert of a rule-linked entry, and after
      an update that changes repeating_session_id or original_time
    - Retirement failures never change the response of the write
    - PATCH validates the merged entry before writing; contradictions answer
      400 VALIDATION_ERROR like a malformed create body

Design Decisions:
    - Trigger dispatched via BackgroundTasks: the write path owns the callback,
      and evaluation runs with its own DB session after the response is built
"""

import logging
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from fastapi.exceptions import RequestValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskwatch.api.dependencies import get_retirement_triggers
from taskwatch.core.errors import ResourceNotFoundError
from taskwatch.core.resolve_instant import normalize_instant
from taskwatch.infrastructure.database import get_db
from taskwatch.models.session_history import SessionHistoryEntry
from taskwatch.schemas.coverage import (
    HistoryEntryCreate, HistoryEntryResponse, HistoryEntryUpdate,
    check_history_consistency,
)
from taskwatch.services.retirement_triggers import RetirementTriggers

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/history", tags=["history"])

_COVERAGE_FIELDS = ("repeating_session_id", "original_time")


def _differs(old, new) -> bool:
    if isinstance(old, datetime) and isinstance(new, datetime):
        return normalize_instant(old) != normalize_instant(new)
    return old != new


def _to_response(entry: SessionHistoryEntry) -> HistoryEntryResponse:
    return HistoryEntryResponse(
        id=entry.id,
        user_id=entry.user_id,
        task_name=entry.task_name,
        started_at=entry.started_at,
        ended_at=entry.ended_at,
        repeating_session_id=entry.repeating_session_id,
        original_time=entry.original_time,
    )


@router.post(
    "", response_model=HistoryEntryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_history_entry(
    body: HistoryEntryCreate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    triggers: RetirementTriggers = Depends(get_retirement_triggers),
):
    """Record a history entry; schedules a retirement check when it confirms an occurrence."""
    entry = SessionHistoryEntry(**body.model_dump())
    db.add(entry)
    await db.commit()
    await db.refresh(entry)
    if entry.repeating_session_id is not None:
        background_tasks.add_task(
            triggers.on_confirmation_written, entry.repeating_session_id,
        )
    return _to_response(entry)


@router.patch("/{entry_id}", response_model=HistoryEntryResponse)
async def update_history_entry(
    entry_id: UUID,
    body: HistoryEntryUpdate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    triggers: RetirementTriggers = Depends(get_retirement_triggers),
):
    """Apply a partial update; re-checks retirement when the confirmation link moved."""
    result = await db.execute(
        select(SessionHistoryEntry).where(SessionHistoryEntry.id == entry_id),
    )
    entry = result.scalar_one_or_none()
    if not entry:
        raise HTTPException(
            status.HTTP_404_NOT_FOUND,
            detail=ResourceNotFoundError(
                "History entry", str(entry_id),
            ).to_response(),
        )

    changes = body.model_dump(exclude_unset=True)
    merged = {
        field: changes.get(field, getattr(entry, field))
        for field in ("started_at", "ended_at", *_COVERAGE_FIELDS)
    }
    try:
        check_history_consistency(**merged)
    except ValueError as e:
        raise RequestValidationError([{
            "loc": ("body",), "msg": str(e), "type": "value_error",
        }]) from e

    coverage_changed = any(
        field in changes and _differs(getattr(entry, field), changes[field])
        for field in _COVERAGE_FIELDS
    )
    for field, value in changes.items():
        setattr(entry, field, value)
    await db.commit()
    await db.refresh(entry)

    if coverage_changed and entry.repeating_session_id is not None:
        background_tasks.add_task(
            triggers.on_confirmation_written, entry.repeating_session_id,
        )
    return _to_response(entry)
