# app/services/leave_store.py

from datetime import datetime
from typing import List
from uuid import UUID

from loguru import logger
from sqlmodel import select
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import store_errors
from app.core.exceptions import ConflictError, NotFoundError
from app.models.enums import LeaveStatus
from app.models.leave import LeaveApplication


async def create_leave(session: AsyncSession, leave: LeaveApplication) -> LeaveApplication:
    session.add(leave)
    async with store_errors("submit the leave application"):
        await session.commit()
    await session.refresh(leave)
    return leave


async def get_leave(session: AsyncSession, leave_id: UUID) -> LeaveApplication | None:
    async with store_errors("load the leave application"):
        return await session.get(LeaveApplication, leave_id)


async def require_leave(session: AsyncSession, leave_id: UUID) -> LeaveApplication:
    leave = await get_leave(session, leave_id)
    if not leave:
        raise NotFoundError("Leave application not found")
    return leave


async def update_leave(
    session: AsyncSession,
    leave_id: UUID,
    fields: dict,
    expected_status: LeaveStatus,
) -> LeaveApplication:
    """
    Apply ``fields`` only if the stored status still equals ``expected_status``.
    Zero rows matched means someone else decided first: ConflictError, no write.
    """
    values = {getattr(LeaveApplication, name): value for name, value in fields.items()}
    values[LeaveApplication.updated_at] = datetime.utcnow()

    stmt = (
        update(LeaveApplication)
        .where(LeaveApplication.id == leave_id)
        .where(LeaveApplication.status == expected_status)
        .values(values)
        .execution_options(synchronize_session=False)
    )

    async with store_errors("update the leave application"):
        result = await session.execute(stmt)
        if result.rowcount != 1:
            await session.rollback()
            logger.warning(f"Leave {leave_id}: status is no longer '{expected_status.value}', write discarded")
            raise ConflictError(
                "This leave application was already acted upon by someone else. Please refresh.",
                expected_status=expected_status.value,
            )
        await session.commit()

        refreshed = await session.get(LeaveApplication, leave_id, populate_existing=True)
    return refreshed


async def query_leaves(session: AsyncSession, predicate, limit: int | None = None) -> List[LeaveApplication]:
    query = select(LeaveApplication).where(predicate).order_by(LeaveApplication.created_at.desc())
    if limit:
        query = query.limit(limit)
    async with store_errors("load leave applications"):
        result = await session.execute(query)
    return list(result.scalars().all())
