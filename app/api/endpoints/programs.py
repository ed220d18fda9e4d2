from fastapi import APIRouter, Depends, Query, BackgroundTasks
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID

from app.api.deps import get_actor, get_db_session
from app.core.context import Actor
from app.schemas.program import (
    DecideMonthRequest,
    ProgramBatchRequest,
    ProgramBatchResult,
    ProgramDecisionRequest,
    ProgramEntryRead,
)
from app.services import program_service
from app.services.program_service import BatchOutcome, ProgramDraft
from app.services.dispatch_service import schedule

router = APIRouter(
    prefix="/api/programs",
    tags=["Advanced Program"]
)

MONTH_PATTERN = r"^\d{4}-\d{2}$"


def _drafts(payload: ProgramBatchRequest) -> List[ProgramDraft]:
    return [ProgramDraft(e.entry_date, e.program_name, e.place) for e in payload.entries]


def _batch_result(outcome: BatchOutcome) -> ProgramBatchResult:
    return ProgramBatchResult(
        saved=[ProgramEntryRead.model_validate(e) for e in outcome.saved],
        skipped=outcome.skipped,
        failed=outcome.failed,
    )


# ===================================================================
# OWNER (Field staff)
# ===================================================================
@router.get("/my", response_model=List[ProgramEntryRead])
async def my_program(
    month: str = Query(..., pattern=MONTH_PATTERN),
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await program_service.list_my_program(session, actor, month)


@router.post("/save", response_model=ProgramBatchResult)
async def save_program(
    payload: ProgramBatchRequest,
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_db_session),
):
    outcome = await program_service.save_program(session, actor, payload.month, _drafts(payload))
    return _batch_result(outcome)


@router.post("/submit", response_model=ProgramBatchResult)
async def submit_program(
    payload: ProgramBatchRequest,
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_db_session),
):
    outcome = await program_service.submit_program(session, actor, payload.month, _drafts(payload))
    return _batch_result(outcome)


# ===================================================================
# APPROVERS
# ===================================================================
@router.get("/approvals", response_model=List[ProgramEntryRead])
async def pending_approvals(
    month: str = Query(..., pattern=MONTH_PATTERN),
    division: Optional[str] = Query(None, description="HOD / Admin only"),
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await program_service.list_for_approval(session, actor, month, division)


@router.post("/decide-month", response_model=ProgramBatchResult)
async def decide_month(
    payload: DecideMonthRequest,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_db_session),
):
    outcome, result = await program_service.decide_month(
        session, actor, payload.user_id, payload.month, payload.decision
    )
    schedule(background_tasks, actor, result)
    return _batch_result(outcome)


@router.post("/{entry_id}/decision", response_model=ProgramEntryRead)
async def decide_entry(
    entry_id: UUID,
    payload: ProgramDecisionRequest,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_db_session),
):
    result = await program_service.decide_entry(session, actor, entry_id, payload.decision)
    schedule(background_tasks, actor, result)
    return result.record
