# app/api/endpoints/notifications.py

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from uuid import UUID

from app.api.deps import get_actor, get_db_session
from app.core.context import Actor
from app.schemas.notification import NotificationRead
from app.services import notification_service

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


@router.get("/", response_model=List[NotificationRead])
async def my_notifications(
    limit: int = Query(20, ge=1, le=100),
    unread_only: bool = Query(False, alias="unreadOnly"),
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await notification_service.list_notifications(session, actor, limit, unread_only)


@router.post("/read-all")
async def mark_all_read(
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_db_session),
):
    updated = await notification_service.mark_all_read(session, actor)
    return {"updated": updated}


@router.post("/{notification_id}/read", response_model=NotificationRead)
async def mark_read(
    notification_id: UUID,
    actor: Actor = Depends(get_actor),
    session: AsyncSession = Depends(get_db_session),
):
    return await notification_service.mark_read(session, actor, notification_id)
