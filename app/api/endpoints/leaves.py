from fastapi import APIRouter, Depends, Query, status, BackgroundTasks
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID

from app.api.deps import get_actor, get_db_session
from app.core.context import Actor
from app.models.enums import LeaveStatus
from app.schemas.leave import ApproveRequest, EligibleOfficers, LeaveCreate, LeaveRead, RecommendRequest
from app.services import leave_service
from app.services.dispatch_service import schedule

router = APIRouter(
    prefix="/api/leaves",
    tags=["Leave Applications"]
)


# ------------------------------------------------------------
# SUBMIT
# ------------------------------------------------------------
@router.post("/", response_model=LeaveRead, status_code=status.HTTP_201_CREATED)
async def submit_leave(
    payload: LeaveCreate,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_db_session),
):
    result = await leave_service.submit_leave(
        session,
        actor,
        leave_type=payload.leave_type,
        start_date=payload.start_date,
        resume_date=payload.resume_date,
        reason=payload.reason,
        acting_officer_id=payload.acting_officer_id,
        recommender_id=payload.recommender_id,
        approver_id=payload.approver_id,
    )
    schedule(background_tasks, actor, result)
    return result.record


# ------------------------------------------------------------
# LISTS (scoped by role and division)
# ------------------------------------------------------------
@router.get("/my", response_model=List[LeaveRead])
async def my_leaves(
    status_filter: Optional[LeaveStatus] = Query(None, alias="status"),
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await leave_service.list_my_leaves(session, actor, status_filter)


@router.get("/officers", response_model=EligibleOfficers)
async def eligible_officers(
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await leave_service.list_eligible_officers(session, actor)


@router.get("/to-recommend", response_model=List[LeaveRead])
async def to_recommend(
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await leave_service.list_to_recommend(session, actor)


@router.get("/to-approve", response_model=List[LeaveRead])
async def to_approve(
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await leave_service.list_to_approve(session, actor)


@router.get("/approved", response_model=List[LeaveRead])
async def approved(
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await leave_service.list_approved(session, actor)


# ------------------------------------------------------------
# ONE APPLICATION
# ------------------------------------------------------------
@router.get("/{leave_id}", response_model=LeaveRead)
async def get_leave(
    leave_id: UUID,
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await leave_service.get_leave_for(session, actor, leave_id)


# ------------------------------------------------------------
# TRANSITIONS
# ------------------------------------------------------------
@router.post("/{leave_id}/recommend", response_model=LeaveRead)
async def recommend(
    leave_id: UUID,
    payload: RecommendRequest,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_db_session),
):
    result = await leave_service.recommend_leave(session, actor, leave_id, payload.decision, payload.comment)
    schedule(background_tasks, actor, result)
    return result.record


@router.post("/{leave_id}/approve", response_model=LeaveRead)
async def approve(
    leave_id: UUID,
    payload: ApproveRequest,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_db_session),
):
    result = await leave_service.approve_leave(session, actor, leave_id, payload.decision, payload.comment)
    schedule(background_tasks, actor, result)
    return result.record
