# app/services/division_service.py

from datetime import datetime
from typing import List

from loguru import logger
from sqlmodel import select
from sqlalchemy import update
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError

from app.core.constants import DIVISION_NAME_MIN_LENGTH
from app.core.database import store_errors
from app.core.exceptions import NotFoundError, ValidationError
from app.models.division import Division
from app.models.leave import LeaveApplication
from app.models.program import AdvancedProgramEntry
from app.models.user import User


def _clean_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if len(cleaned) < DIVISION_NAME_MIN_LENGTH:
        raise ValidationError(
            f"Division name must be at least {DIVISION_NAME_MIN_LENGTH} characters long."
        )
    return cleaned


async def _name_taken(session: AsyncSession, name: str, exclude_id: int | None = None) -> bool:
    query = select(Division).where(func.lower(Division.name) == name.lower())
    if exclude_id is not None:
        query = query.where(Division.id != exclude_id)
    result = await session.execute(query)
    return result.first() is not None


async def list_divisions(session: AsyncSession) -> List[Division]:
    async with store_errors("list divisions"):
        result = await session.execute(select(Division).order_by(Division.name))
    return list(result.scalars().all())


async def get_division(session: AsyncSession, division_id: int) -> Division:
    async with store_errors("load the division"):
        division = await session.get(Division, division_id)
    if not division:
        raise NotFoundError("Division not found.")
    return division


async def create_division(session: AsyncSession, name: str) -> Division:
    name = _clean_name(name)

    if await _name_taken(session, name):
        raise ValidationError(f'A division named "{name}" already exists.')

    division = Division(name=name)
    session.add(division)
    try:
        async with store_errors("create the division"):
            await session.commit()
        await session.refresh(division)
    except IntegrityError:
        await session.rollback()
        raise ValidationError(f'A division named "{name}" already exists.')

    logger.info(f"Division created: {name}")
    return division


async def rename_division(session: AsyncSession, division_id: int, new_name: str) -> tuple[Division, int]:
    """
    Rename a division and carry the new name to every record that stores it.
    Returns the division and the number of users moved along.
    """
    new_name = _clean_name(new_name)
    division = await get_division(session, division_id)
    old_name = division.name

    if await _name_taken(session, new_name, exclude_id=division_id):
        raise ValidationError(f'A division named "{new_name}" already exists.')

    if old_name == new_name:
        return division, 0

    now = datetime.utcnow()
    division.name = new_name
    division.updated_at = now
    session.add(division)

    async with store_errors("rename the division"):
        users = await session.execute(
            update(User)
            .where(User.division == old_name)
            .values({User.division: new_name, User.updated_at: now})
            .execution_options(synchronize_session=False)
        )
        # denormalized copies on workflow records, terminal ones included
        await session.execute(
            update(LeaveApplication)
            .where(LeaveApplication.division == old_name)
            .values({LeaveApplication.division: new_name})
            .execution_options(synchronize_session=False)
        )
        await session.execute(
            update(AdvancedProgramEntry)
            .where(AdvancedProgramEntry.division == old_name)
            .values({AdvancedProgramEntry.division: new_name})
            .execution_options(synchronize_session=False)
        )
        await session.commit()

    await session.refresh(division)
    moved = users.rowcount or 0
    logger.info(f"Division renamed: '{old_name}' -> '{new_name}' ({moved} user(s) updated)")
    return division, moved


async def delete_division(session: AsyncSession, division_id: int) -> None:
    division = await get_division(session, division_id)

    async with store_errors("check division members"):
        result = await session.execute(
            select(func.count()).select_from(User).where(User.division == division.name)
        )
    assigned = result.scalar_one()
    if assigned:
        raise ValidationError(
            f'Cannot delete "{division.name}" because {assigned} user(s) are assigned to this division. '
            "Please reassign or remove these users first.",
            details={"assigned_users": assigned},
        )

    await session.delete(division)
    async with store_errors("delete the division"):
        await session.commit()
    logger.info(f"Division deleted: {division.name}")
