# app/services/directory_service.py

from datetime import datetime
from typing import List, Optional
import uuid

from loguru import logger
from sqlmodel import select
from sqlalchemy import delete, func, or_, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError

from app.core import scoping
from app.core.context import Actor
from app.core.database import store_errors
from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.core.permissions import can_view_directory, require_user_delete
from app.core.security import hash_password
from app.models.audit import AuditLog
from app.models.division import Division
from app.models.leave import LeaveApplication
from app.models.notification import Notification
from app.models.program import AdvancedProgramEntry
from app.models.user import DIVISION_BOUND_ROLES, StaffType, User, UserRole

# fields a user may change on their own record
PROFILE_FIELDS = {"name", "designation", "mobile"}

# fields only an administrator may change
ADMIN_FIELDS = {"name", "email", "role", "staff_type", "division", "designation", "mobile"}


# ============================================================================
# LOOKUPS
# ============================================================================
async def find_user_by_email(session: AsyncSession, email: str) -> User | None:
    async with store_errors("look up the user"):
        result = await session.execute(select(User).where(User.email == email.strip().lower()))
    return result.scalar_one_or_none()


async def get_user_by_id(session: AsyncSession, user_id) -> User | None:
    if not isinstance(user_id, uuid.UUID):
        try:
            user_id = uuid.UUID(str(user_id))
        except ValueError:
            return None
    async with store_errors("look up the user"):
        return await session.get(User, user_id)


async def require_user(session: AsyncSession, user_id) -> User:
    user = await get_user_by_id(session, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


async def list_users_by_division(session: AsyncSession, division: str) -> List[User]:
    async with store_errors("list division users"):
        result = await session.execute(
            select(User).where(User.division == division).order_by(User.name)
        )
    return list(result.scalars().all())


async def list_users_by_role(session: AsyncSession, role: UserRole) -> List[User]:
    async with store_errors("list users"):
        result = await session.execute(
            select(User).where(User.role == role).order_by(User.name)
        )
    return list(result.scalars().all())


# ============================================================================
# VALIDATION
# ============================================================================
async def _validate_assignment(session: AsyncSession, role: UserRole, division: Optional[str]) -> Optional[str]:
    division = (division or "").strip() or None

    if role in DIVISION_BOUND_ROLES and not division:
        raise ValidationError(f"A user with role '{role.value}' must be assigned to a division")

    if division:
        result = await session.execute(select(Division).where(Division.name == division))
        if result.scalar_one_or_none() is None:
            raise NotFoundError(f"Division '{division}' does not exist")

    return division


# ============================================================================
# CREATE / PROVISION
# ============================================================================
async def create_user(
    session: AsyncSession,
    name: str,
    email: str,
    role: UserRole = UserRole.Staff,
    division: str | None = None,
    staff_type: StaffType = StaffType.Office,
    designation: str | None = None,
    mobile: str | None = None,
    password: str | None = None,
) -> User:
    if not name or len(name.strip()) < 2:
        raise ValidationError("Name must be at least 2 characters.")

    division = await _validate_assignment(session, role, division)

    user = User(
        id=uuid.uuid4(),
        name=name.strip(),
        email=email.strip().lower(),
        role=role,
        staff_type=staff_type,
        division=division,
        designation=designation,
        mobile=mobile,
        password_hash=hash_password(password) if password else None,
    )
    session.add(user)

    try:
        async with store_errors("create the user"):
            await session.commit()
        await session.refresh(user)
    except IntegrityError:
        await session.rollback()
        raise ValidationError(f"User with email {email} already exists in the system.")

    logger.info(f"User created: {user.email} ({user.role.value})")
    return user


async def get_or_provision_user(session: AsyncSession, email: str, name: str | None = None) -> User:
    """
    First sign-in of an unknown identity gets a basic Staff profile; an
    administrator assigns the real role and division afterwards.
    """
    user = await find_user_by_email(session, email)
    if user:
        return user

    display_name = (name or email.split("@")[0]).strip()
    user = User(
        id=uuid.uuid4(),
        name=display_name if len(display_name) >= 2 else email,
        email=email.strip().lower(),
        role=UserRole.Staff,
        staff_type=StaffType.Office,
        designation="N/A",
    )
    session.add(user)
    try:
        async with store_errors("provision the user"):
            await session.commit()
        await session.refresh(user)
    except IntegrityError:
        # provisioned concurrently by another request
        await session.rollback()
        user = await find_user_by_email(session, email)
        if user is None:
            raise

    logger.warning(f"Provisioned basic Staff profile for {user.email}; role and division pending")
    return user


# ============================================================================
# UPDATE
# ============================================================================
async def update_user(session: AsyncSession, user_id, changes: dict) -> User:
    """Administrative update: role, division and staff type reassignment."""
    user = await require_user(session, user_id)

    unknown = set(changes) - ADMIN_FIELDS - {"password"}
    if unknown:
        raise ValidationError(f"Unknown fields: {sorted(unknown)}")

    role = UserRole(changes.get("role", user.role))
    division = changes["division"] if "division" in changes else user.division
    division = await _validate_assignment(session, role, division)

    if "email" in changes and changes["email"]:
        new_email = changes["email"].strip().lower()
        other = await find_user_by_email(session, new_email)
        if other and other.id != user.id:
            raise ValidationError(f"Another user with email {new_email} already exists.")
        user.email = new_email

    if "name" in changes and changes["name"] is not None:
        if len(changes["name"].strip()) < 2:
            raise ValidationError("Name must be at least 2 characters.")
        user.name = changes["name"].strip()

    user.role = role
    user.division = division
    if changes.get("staff_type") is not None:
        user.staff_type = StaffType(changes["staff_type"])
    for field in ("designation", "mobile"):
        if field in changes:
            setattr(user, field, changes[field])
    if changes.get("password"):
        user.password_hash = hash_password(changes["password"])

    user.updated_at = datetime.utcnow()
    session.add(user)
    async with store_errors("update the user"):
        await session.commit()
    await session.refresh(user)

    logger.info(f"User updated: {user.email} role={user.role.value} division={user.division}")
    return user


async def update_profile(session: AsyncSession, actor: Actor, changes: dict) -> User:
    """Self-service edit; role, division and staff type stay untouched."""
    forbidden = set(changes) - PROFILE_FIELDS
    if forbidden:
        raise AuthorizationError(f"You cannot change {', '.join(sorted(forbidden))} on your own profile.")

    user = await require_user(session, actor.id)

    if changes.get("name") is not None:
        if len(changes["name"].strip()) < 2:
            raise ValidationError("Name must be at least 2 characters.")
        user.name = changes["name"].strip()
    for field in ("designation", "mobile"):
        if field in changes:
            setattr(user, field, changes[field])

    user.updated_at = datetime.utcnow()
    session.add(user)
    async with store_errors("update your profile"):
        await session.commit()
    await session.refresh(user)
    return user


# ============================================================================
# DELETE
# ============================================================================
async def _count_workflow_references(session: AsyncSession, user_id: uuid.UUID) -> dict:
    leave_refs = or_(
        LeaveApplication.applicant_id == user_id,
        LeaveApplication.acting_officer_id == user_id,
        LeaveApplication.recommender_id == user_id,
        LeaveApplication.approver_id == user_id,
        LeaveApplication.recommendation_by == user_id,
        LeaveApplication.approval_by == user_id,
    )
    program_refs = or_(
        AdvancedProgramEntry.user_id == user_id,
        AdvancedProgramEntry.decided_by == user_id,
    )
    async with store_errors("check user references"):
        leaves = await session.execute(select(func.count()).select_from(LeaveApplication).where(leave_refs))
        programs = await session.execute(select(func.count()).select_from(AdvancedProgramEntry).where(program_refs))
    return {"leave_applications": leaves.scalar_one(), "program_entries": programs.scalar_one()}


async def delete_user(session: AsyncSession, actor: Actor, user_id) -> None:
    user = await require_user(session, user_id)
    require_user_delete(actor, user.id)

    references = await _count_workflow_references(session, user.id)
    if any(references.values()):
        raise ValidationError(
            f"Cannot delete {user.name} because they appear on "
            f"{references['leave_applications']} leave application(s) and "
            f"{references['program_entries']} program entry(ies).",
            details=references,
        )

    # own inbox goes with the user; audit rows keep the name snapshot
    async with store_errors("clear user references"):
        await session.execute(
            delete(Notification)
            .where(Notification.user_id == user.id)
            .execution_options(synchronize_session=False)
        )
        await session.execute(
            update(AuditLog)
            .where(AuditLog.actor_id == user.id)
            .values({AuditLog.actor_id: None})
            .execution_options(synchronize_session=False)
        )
    await session.delete(user)
    try:
        async with store_errors("delete the user"):
            await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ValidationError(f"{user.name} is still referenced by other records and cannot be deleted.")
    logger.info(f"User deleted: {user.email} by {actor.email}")


# ============================================================================
# LISTINGS
# ============================================================================
async def list_users(session: AsyncSession) -> List[User]:
    async with store_errors("list users"):
        result = await session.execute(select(User).order_by(User.name))
    return list(result.scalars().all())


async def list_directory(session: AsyncSession, actor: Actor, search: str | None = None) -> List[User]:
    if not can_view_directory(actor):
        return []
    async with store_errors("load the staff directory"):
        result = await session.execute(
            select(User).where(scoping.directory(actor, search)).order_by(User.division, User.name)
        )
    return list(result.scalars().all())
