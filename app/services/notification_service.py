# app/services/notification_service.py

from dataclasses import dataclass, field
from typing import Any, Dict, List
from uuid import UUID

from loguru import logger
from sqlmodel import select
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.context import Actor
from app.core.database import AsyncSessionLocal, store_errors
from app.core.exceptions import NotFoundError
from app.models.enums import NotificationKind
from app.models.notification import Notification


@dataclass
class NotificationRequest:
    kind: NotificationKind
    recipient_id: UUID
    payload: Dict[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------
# MESSAGE TEXT
# ---------------------------------------------------------
def render(kind: NotificationKind, payload: Dict[str, Any]) -> tuple[str, str]:
    applicant = payload.get("applicantName", "An applicant")

    if kind == NotificationKind.leave_submitted:
        if payload.get("stage") == "approver":
            return (
                "New Leave Application",
                f"{applicant} has submitted a leave application that may require your approval.",
            )
        return (
            "New Leave Application",
            f"{applicant} has submitted a leave application for your recommendation.",
        )

    if kind == NotificationKind.leave_recommended:
        return (
            "Leave Recommended",
            f"{applicant}'s leave application has been recommended and is now awaiting your approval.",
        )

    if kind == NotificationKind.leave_decided:
        if payload.get("status") == "approved":
            return "Leave Approved", "Your leave application has been approved."
        reason = payload.get("rejectionReason")
        message = "Your leave application has been rejected."
        if reason:
            message += f" Reason: {reason}"
        return "Leave Rejected", message

    if kind == NotificationKind.program_decided:
        status = payload.get("status", "decided")
        return (
            f"Advanced Program {status.capitalize()}",
            f"Your advanced program for {payload.get('date')} has been {status}.",
        )

    return "Notification", payload.get("message", "")


# ---------------------------------------------------------
# DISPATCH (fire-and-forget)
# ---------------------------------------------------------
async def notify(kind: NotificationKind, recipient_id: UUID, payload: Dict[str, Any] | None = None):
    """
    Stores an in-app notification in its own session.
    Runs after the transition has been committed; failures are logged and
    never propagate back to the workflow.
    """
    payload = payload or {}
    async with AsyncSessionLocal() as session:
        try:
            title, message = render(kind, payload)
            session.add(
                Notification(
                    user_id=recipient_id,
                    kind=kind,
                    title=title,
                    message=message,
                    data={k: str(v) for k, v in payload.items()},
                )
            )
            await session.commit()
        except Exception:
            logger.exception(f"Notification '{kind.value}' for {recipient_id} could not be stored")
            await session.rollback()


async def dispatch(requests: List[NotificationRequest]) -> None:
    for request in requests:
        await notify(request.kind, request.recipient_id, request.payload)


# ---------------------------------------------------------
# RECIPIENT SIDE
# ---------------------------------------------------------
async def list_notifications(
    session: AsyncSession, actor: Actor, limit: int = 20, unread_only: bool = False
) -> List[Notification]:
    query = select(Notification).where(Notification.user_id == actor.id)
    if unread_only:
        query = query.where(Notification.read == False)  # noqa: E712
    query = query.order_by(Notification.created_at.desc()).limit(limit)

    async with store_errors("load notifications"):
        result = await session.execute(query)
    return list(result.scalars().all())


async def mark_read(session: AsyncSession, actor: Actor, notification_id: UUID) -> Notification:
    async with store_errors("load the notification"):
        notification = await session.get(Notification, notification_id)
    if not notification or notification.user_id != actor.id:
        raise NotFoundError("Notification not found")

    notification.read = True
    session.add(notification)
    async with store_errors("update the notification"):
        await session.commit()
    await session.refresh(notification)
    return notification


async def mark_all_read(session: AsyncSession, actor: Actor) -> int:
    async with store_errors("update notifications"):
        result = await session.execute(
            update(Notification)
            .where(Notification.user_id == actor.id)
            .where(Notification.read == False)  # noqa: E712
            .values({Notification.read: True})
            .execution_options(synchronize_session=False)
        )
        await session.commit()
    return result.rowcount or 0
