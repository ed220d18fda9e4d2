# app/core/database.py

import ssl
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from loguru import logger
from sqlmodel import SQLModel
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine
)
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.pool import NullPool
from sqlalchemy import text

from app.core.config import settings
from app.core.exceptions import DependencyError

DATABASE_URL = settings.DATABASE_URL


# ----------------------------------------------------
# SSL for hosted Postgres poolers
# ----------------------------------------------------
def make_ssl():
    ctx = ssl.create_default_context()
    if not settings.DB_SSL_VERIFY:
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
    return ctx


def build_connect_args(url: str) -> dict:
    if url.startswith("postgresql+asyncpg"):
        return {
            "ssl": make_ssl(),
            "timeout": settings.DB_TIMEOUT_SECONDS,          # connect timeout
            "command_timeout": settings.DB_TIMEOUT_SECONDS,  # per statement
            "statement_cache_size": 0,           # disable prepared statements
            "prepared_statement_name_func": None # prevent SQLAlchemy from naming statements
        }
    if url.startswith("sqlite"):
        return {"timeout": settings.DB_TIMEOUT_SECONDS}
    return {}


logger.info("Configuring database engine ({})", DATABASE_URL.split(":", 1)[0])


# ----------------------------------------------------
# Engine (NO POOLING → the pooler handles it)
# ----------------------------------------------------
engine = create_async_engine(
    DATABASE_URL,
    echo=False,
    future=True,
    connect_args=build_connect_args(DATABASE_URL),
    pool_pre_ping=True,
    poolclass=NullPool,
)


# ----------------------------------------------------
# Sessions
# ----------------------------------------------------
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session


# ----------------------------------------------------
# Store failures → DependencyError
# ----------------------------------------------------
@asynccontextmanager
async def store_errors(operation: str):
    """Translate connectivity failures into a caller-visible DependencyError."""
    try:
        yield
    except (OperationalError, InterfaceError, TimeoutError, ConnectionError) as e:
        logger.error(f"Store unavailable during '{operation}': {e}")
        raise DependencyError(f"Data store unavailable while trying to {operation}.") from e
    except DBAPIError as e:
        if e.connection_invalidated:
            logger.error(f"Store connection lost during '{operation}': {e}")
            raise DependencyError(f"Data store unavailable while trying to {operation}.") from e
        raise


# ----------------------------------------------------
# Create tables
# ----------------------------------------------------
async def init_db():
    # make sure every table is registered on the metadata
    from app.models import audit, division, leave, notification, program, user  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


# ----------------------------------------------------
# Test Connection (SAFE)
# ----------------------------------------------------
async def test_connection():
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    logger.debug("DB connection OK")
