# app/api/endpoints/users.py

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID

from app.api.deps import get_db_session, get_actor
from app.core.context import Actor
from app.core.rbac import AllowRoles
from app.models.user import UserRole
from app.schemas.user import UserCreate, UserRead, UserUpdate
from app.services import directory_service
from app.services.audit_service import AuditEntry
from app.services.dispatch_service import WorkflowResult, schedule

router = APIRouter(prefix="/api/users", tags=["Users"])

# Admin passes through AllowRoles; HOD manages users system-wide as well
manage_users = AllowRoles(UserRole.HOD)


# -------------------------------------------------------------------
# Staff directory (scoped by role)
# -------------------------------------------------------------------
@router.get("/directory", response_model=List[UserRead])
async def staff_directory(
    search: Optional[str] = Query(None, description="Match name, email or designation"),
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await directory_service.list_directory(session, actor, search)


# -------------------------------------------------------------------
# Create ANY user
# -------------------------------------------------------------------
@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_new_user(
    data: UserCreate,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(manage_users),
    session: AsyncSession = Depends(get_db_session),
):
    user = await directory_service.create_user(
        session,
        name=data.name,
        email=data.email,
        role=data.role,
        division=data.division,
        staff_type=data.staff_type,
        designation=data.designation,
        mobile=data.mobile,
        password=data.password,
    )
    schedule(background_tasks, actor, WorkflowResult(
        record=user,
        audit=[AuditEntry("user.created", "user", str(user.id), details={"role": user.role.value})],
    ))
    return user


# -------------------------------------------------------------------
# List all users
# -------------------------------------------------------------------
@router.get("/", response_model=List[UserRead])
async def list_users(
    session: AsyncSession = Depends(get_db_session),
    _: Actor = Depends(manage_users),
):
    return await directory_service.list_users(session)


# -------------------------------------------------------------------
# Update a user (role / division / staff type reassignment)
# -------------------------------------------------------------------
@router.patch("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: UUID,
    data: UserUpdate,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(manage_users),
    session: AsyncSession = Depends(get_db_session),
):
    changes = data.model_dump(mode="json", exclude_unset=True)
    user = await directory_service.update_user(session, user_id, changes)
    schedule(background_tasks, actor, WorkflowResult(
        record=user,
        audit=[AuditEntry(
            "user.updated", "user", str(user.id),
            details={k: v for k, v in changes.items() if k != "password"},
        )],
    ))
    return user


# -------------------------------------------------------------------
# Delete a user (Admin / HOD, never yourself)
# -------------------------------------------------------------------
@router.delete("/{user_id}")
async def delete_user(
    user_id: UUID,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_db_session),
):
    await directory_service.delete_user(session, actor, user_id)
    schedule(background_tasks, actor, WorkflowResult(
        record=None,
        audit=[AuditEntry("user.deleted", "user", str(user_id))],
    ))
    return {"detail": "User deleted successfully"}
