# app/api/deps.py

from typing import AsyncGenerator
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import jwt
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.context import Actor
from app.core.security import decode_token
from app.core.database import get_session
from app.services.directory_service import find_user_by_email, get_or_provision_user
from app.models.user import User, UserRole


# ------------------------------------------------------------
# HTTP Bearer Authentication
# ------------------------------------------------------------
bearer_scheme = HTTPBearer(auto_error=True)


# ------------------------------------------------------------
# DB Session
# ------------------------------------------------------------
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_session():
        yield session


# ------------------------------------------------------------
# Get current logged-in user from JWT (subject = email)
# ------------------------------------------------------------
async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db_session),
) -> User:

    token = credentials.credentials

    try:
        payload = decode_token(token)
        email = payload.get("sub")

        if not email:
            raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid token payload")

    except jwt.InvalidTokenError:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Could not validate credentials")

    if settings.AUTO_PROVISION_USERS:
        return await get_or_provision_user(session, email, payload.get("name"))

    user = await find_user_by_email(session, email)
    if not user:
        logger.warning(f"Token for unknown user {email} rejected")
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "User not found")

    return user


async def get_actor(current_user: User = Depends(get_current_user)) -> Actor:
    return Actor.from_user(current_user)


# ------------------------------------------------------------
# Role-based access control (CASE-SAFE, enum-safe)
# ------------------------------------------------------------
def role_required(*allowed_roles: UserRole):
    """
    Enforces that the current user has one of the allowed roles.
    Resolves to the caller's Actor context.
    """

    def normalize_role(role):
        if isinstance(role, UserRole):
            return role.value.strip().lower()
        return str(role).strip().lower()

    normalized_allowed = set(normalize_role(r) for r in allowed_roles)

    async def checker(actor: Actor = Depends(get_actor)) -> Actor:
        if normalize_role(actor.role) not in normalized_allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied for role '{actor.role.value}'"
            )
        return actor

    return checker


# ------------------------------------------------------------
# Exposed dependencies for routers
# ------------------------------------------------------------

require_admin = role_required(UserRole.Admin)
