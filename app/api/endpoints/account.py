# app/api/endpoints/account.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from pydantic import BaseModel

from app.api.deps import get_actor, get_current_user, get_db_session
from app.core.context import Actor
from app.core.security import verify_password, hash_password
from app.models.user import User
from app.schemas.user import ProfileUpdate, UserRead
from app.services.directory_service import update_profile

router = APIRouter(prefix="/api/account", tags=["Account"])


class ChangePasswordRequest(BaseModel):
    old_password: str
    new_password: str


@router.get("/profile", response_model=UserRead)
async def get_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.patch("/profile", response_model=UserRead)
async def edit_profile(
    payload: ProfileUpdate,
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_db_session)
):
    # role / division / staffType are rejected by the service, not silently dropped
    changes = payload.model_dump(exclude_unset=True)
    return await update_profile(session, actor, changes)


@router.post("/change-password")
async def change_password(
    payload: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    # Verify old password
    if not verify_password(payload.old_password, current_user.password_hash):
        raise HTTPException(status_code=400, detail="Old password incorrect")

    # Prevent reusing old password
    if payload.old_password == payload.new_password:
        raise HTTPException(status_code=400, detail="New password must be different")

    current_user.password_hash = hash_password(payload.new_password)
    session.add(current_user)
    await session.commit()

    return {"detail": "Password changed successfully"}
