# app/api/endpoints/divisions.py

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.api.deps import get_actor, get_db_session
from app.core.context import Actor
from app.core.rbac import AllowRoles
from app.models.user import UserRole
from app.schemas.division import DivisionCreate, DivisionRead, DivisionRename, DivisionRenameResult
from app.services import division_service
from app.services.audit_service import AuditEntry
from app.services.dispatch_service import WorkflowResult, schedule

router = APIRouter(
    prefix="/api/divisions",
    tags=["Divisions"]
)

manage_divisions = AllowRoles(UserRole.HOD)


# 1️⃣ List divisions (any signed-in user; feeds the profile and user forms)
@router.get("/", response_model=List[DivisionRead])
async def list_divisions(
    _: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_db_session)
):
    return await division_service.list_divisions(session)


# 2️⃣ Create
@router.post("/", response_model=DivisionRead, status_code=status.HTTP_201_CREATED)
async def create_division(
    data: DivisionCreate,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(manage_divisions),
    session: AsyncSession = Depends(get_db_session)
):
    division = await division_service.create_division(session, data.name)
    schedule(background_tasks, actor, WorkflowResult(
        record=division,
        audit=[AuditEntry("division.created", "division", str(division.id), details={"name": division.name})],
    ))
    return division


# 3️⃣ Rename (cascades to users and workflow records)
@router.patch("/{division_id}", response_model=DivisionRenameResult)
async def rename_division(
    division_id: int,
    data: DivisionRename,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(manage_divisions),
    session: AsyncSession = Depends(get_db_session)
):
    old_name = (await division_service.get_division(session, division_id)).name
    division, moved = await division_service.rename_division(session, division_id, data.name)
    schedule(background_tasks, actor, WorkflowResult(
        record=division,
        audit=[AuditEntry(
            "division.renamed", "division", str(division.id),
            details={"from": old_name, "to": division.name, "usersUpdated": moved},
        )],
    ))
    return DivisionRenameResult(division=DivisionRead.model_validate(division), users_updated=moved)


# 4️⃣ Delete (refused while users are assigned)
@router.delete("/{division_id}")
async def delete_division(
    division_id: int,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(manage_divisions),
    session: AsyncSession = Depends(get_db_session)
):
    await division_service.delete_division(session, division_id)
    schedule(background_tasks, actor, WorkflowResult(
        record=None,
        audit=[AuditEntry("division.deleted", "division", str(division_id))],
    ))
    return {"detail": "Division deleted successfully"}
