import os
from datetime import date
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# ------------------------------------------------------------------
# FORCE TESTING MODE
# Settings are read when app.core.config is first imported, so the
# environment must point at the test database BEFORE importing app.main.
# ------------------------------------------------------------------
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./.pytest_staffdesk.db"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["AUTO_PROVISION_USERS"] = "true"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ.pop("SUPER_ADMIN_EMAIL", None)

from sqlmodel import SQLModel

from app.main import app
from app.core.context import Actor
from app.core.database import engine, AsyncSessionLocal
from app.core.rate_limiter import limiter
from app.core.security import create_access_token
from app.models import audit, division, leave, notification, program, user as user_model  # noqa: F401
from app.models.user import StaffType, UserRole
from app.services import division_service, directory_service
from app.services.leave_service import submit_leave

limiter.enabled = False


@pytest_asyncio.fixture(autouse=True)
async def reset_db():
    """Fresh schema for every test."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
        await conn.run_sync(SQLModel.metadata.create_all)
    yield


@pytest_asyncio.fixture
async def db_session():
    async with AsyncSessionLocal() as session:
        yield session


@pytest_asyncio.fixture
async def client():
    """
    Correct fixture for httpx >= 0.27
    Uses ASGITransport() instead of app=...
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


# ------------------------------------------------------------------
# FACTORIES
# ------------------------------------------------------------------
def auth_headers(user) -> dict:
    token = create_access_token(subject=user.email, data={"name": user.name})
    return {"Authorization": f"Bearer {token}"}


async def ensure_division(session, name: str):
    for existing in await division_service.list_divisions(session):
        if existing.name == name:
            return existing
    return await division_service.create_division(session, name)


async def make_user(
    session,
    name: str,
    role: UserRole = UserRole.Staff,
    division: str | None = "North",
    staff_type: StaffType = StaffType.Office,
    password: str | None = None,
):
    if division:
        await ensure_division(session, division)
    email = f"{name.lower().replace(' ', '.')}@staffdesk.test"
    return await directory_service.create_user(
        session,
        name=name,
        email=email,
        role=role,
        division=division,
        staff_type=staff_type,
        designation="Officer",
        password=password,
    )


@pytest_asyncio.fixture
async def org(db_session):
    """
    Two divisions, each fully staffed, plus system-wide HOD and Admin:

        North: staff_a, staff_b (acting), cc, dh
        South: south_staff, south_dh
    """
    people = {
        "staff_a": await make_user(db_session, "Asha Staff", UserRole.Staff, "North"),
        "staff_b": await make_user(db_session, "Bala Staff", UserRole.Staff, "North"),
        "field": await make_user(db_session, "Faiz Field", UserRole.Staff, "North", StaffType.Field),
        "cc": await make_user(db_session, "Chitra CC", UserRole.DivisionCC, "North"),
        "dh": await make_user(db_session, "Dev Head", UserRole.DivisionalHead, "North"),
        "south_staff": await make_user(db_session, "Sana South", UserRole.Staff, "South"),
        "south_dh": await make_user(db_session, "Suresh Head", UserRole.DivisionalHead, "South"),
        "hod": await make_user(db_session, "Hema HOD", UserRole.HOD, None),
        "admin": await make_user(db_session, "Arun Admin", UserRole.Admin, None, password="admin-pass-123"),
    }
    return people


def actor(user) -> Actor:
    return Actor.from_user(user)


async def submit_sample_leave(session, org, applicant_key="staff_a", start=date(2025, 3, 10), resume=date(2025, 3, 13)):
    result = await submit_leave(
        session,
        actor(org[applicant_key]),
        leave_type="annual",
        start_date=start,
        resume_date=resume,
        reason="Family function",
        acting_officer_id=org["staff_b"].id,
        recommender_id=org["cc"].id,
        approver_id=org["dh"].id,
    )
    return result.record
