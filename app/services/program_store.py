# app/services/program_store.py

from datetime import date, datetime
from typing import List
from uuid import UUID

from sqlmodel import select
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import store_errors
from app.core.exceptions import ConflictError, NotFoundError
from app.models.enums import ProgramStatus
from app.models.program import AdvancedProgramEntry


async def get_entry(session: AsyncSession, user_id: UUID, entry_date: date) -> AdvancedProgramEntry | None:
    async with store_errors("load the program entry"):
        result = await session.execute(
            select(AdvancedProgramEntry).where(
                (AdvancedProgramEntry.user_id == user_id)
                & (AdvancedProgramEntry.entry_date == entry_date)
            )
        )
    return result.scalar_one_or_none()


async def get_entry_by_id(session: AsyncSession, entry_id: UUID) -> AdvancedProgramEntry | None:
    async with store_errors("load the program entry"):
        return await session.get(AdvancedProgramEntry, entry_id)


async def require_entry(session: AsyncSession, entry_id: UUID) -> AdvancedProgramEntry:
    entry = await get_entry_by_id(session, entry_id)
    if not entry:
        raise NotFoundError("Program entry not found")
    return entry


async def insert_entry(session: AsyncSession, entry: AdvancedProgramEntry) -> AdvancedProgramEntry:
    """Insert a new (userId, date) row; the unique constraint rejects duplicates."""
    session.add(entry)
    async with store_errors("save the program entry"):
        await session.commit()
    await session.refresh(entry)
    return entry


async def upsert_entry(
    session: AsyncSession,
    user_id: UUID,
    entry_date: date,
    fields: dict,
    existing: AdvancedProgramEntry | None = None,
) -> AdvancedProgramEntry:
    """Create the (user, date) entry or update it in place while it is still a draft."""
    if existing is None:
        existing = await get_entry(session, user_id, entry_date)
    if existing is None:
        return await insert_entry(
            session, AdvancedProgramEntry(user_id=user_id, entry_date=entry_date, **fields)
        )
    return await update_entry(session, existing.id, fields, expected_status=ProgramStatus.draft)


async def update_entry(
    session: AsyncSession,
    entry_id: UUID,
    fields: dict,
    expected_status: ProgramStatus,
) -> AdvancedProgramEntry:
    values = {getattr(AdvancedProgramEntry, name): value for name, value in fields.items()}
    values[AdvancedProgramEntry.updated_at] = datetime.utcnow()

    stmt = (
        update(AdvancedProgramEntry)
        .where(AdvancedProgramEntry.id == entry_id)
        .where(AdvancedProgramEntry.status == expected_status)
        .values(values)
        .execution_options(synchronize_session=False)
    )

    async with store_errors("update the program entry"):
        result = await session.execute(stmt)
        if result.rowcount != 1:
            await session.rollback()
            raise ConflictError(
                "This program entry was already changed by someone else. Please refresh.",
                expected_status=expected_status.value,
            )
        await session.commit()
        refreshed = await session.get(AdvancedProgramEntry, entry_id, populate_existing=True)
    return refreshed


async def query_entries(session: AsyncSession, predicate) -> List[AdvancedProgramEntry]:
    async with store_errors("load program entries"):
        result = await session.execute(
            select(AdvancedProgramEntry)
            .where(predicate)
            .order_by(AdvancedProgramEntry.entry_date.asc(), AdvancedProgramEntry.user_name.asc())
        )
    return list(result.scalars().all())
