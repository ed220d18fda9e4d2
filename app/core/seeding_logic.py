from sqlmodel import select
from loguru import logger
from app.models.division import Division
from app.models.user import UserRole
from app.services.directory_service import find_user_by_email, create_user
from app.core.database import AsyncSessionLocal
from app.core.config import settings


# ----------------------------------------------------------------
# SEEDING FUNCTIONS
# ----------------------------------------------------------------

async def seed_all():
    """Master function to run all seeding logic."""
    async with AsyncSessionLocal() as session:
        await seed_divisions(session)
        await seed_admin_user(session)
    logger.success("Seeding complete.")


async def seed_divisions(session):
    """Creates DEFAULT_DIVISIONS only when no division exists yet."""
    existing = (await session.execute(select(Division.id).limit(1))).first()
    if existing or not settings.DEFAULT_DIVISIONS:
        return

    for name in settings.DEFAULT_DIVISIONS:
        name = name.strip()
        if len(name) >= 2:
            logger.info(f"Creating division: {name}")
            session.add(Division(name=name))
    await session.commit()


async def seed_admin_user(session):
    if not settings.SUPER_ADMIN_EMAIL or not settings.SUPER_ADMIN_PASSWORD:
        logger.warning("Missing Super Admin credentials in settings.")
        return

    existing = await find_user_by_email(session, settings.SUPER_ADMIN_EMAIL)
    if existing:
        logger.info("Super Admin already exists. Skipping.")
        return

    logger.info(f"Seeding Super Admin: {settings.SUPER_ADMIN_EMAIL}")
    await create_user(
        session=session,
        name=settings.SUPER_ADMIN_NAME or "Super Admin",
        email=settings.SUPER_ADMIN_EMAIL,
        role=UserRole.Admin,
        designation="Administrator",
        password=settings.SUPER_ADMIN_PASSWORD,
    )
    logger.success("Super Admin created successfully.")
