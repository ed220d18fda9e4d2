# app/services/auth_service.py

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.security import verify_password, create_access_token
from app.models.user import User
from app.schemas.auth import TokenWithUser
from app.schemas.user import UserRead
from app.services.directory_service import find_user_by_email


# ============================================================================
# AUTHENTICATE (locally managed accounts only)
# ============================================================================
async def authenticate_user(session: AsyncSession, email: str, password: str) -> User | None:
    user = await find_user_by_email(session, email)
    if not user:
        return None

    # provider-managed accounts have no local password
    if not verify_password(password, user.password_hash):
        logger.warning(f"Failed login for {email}")
        return None

    return user


# ============================================================================
# CREATE LOGIN RESPONSE
# ============================================================================
def create_login_response(user: User) -> TokenWithUser:
    # subject is the email, same as identity-provider tokens
    token = create_access_token(
        subject=user.email,
        data={
            "name": user.name,
            "role": user.role.value,
            "division": user.division,
        },
    )

    return TokenWithUser(
        access_token=token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=UserRead.model_validate(user),
    )
