# app/api/endpoints/auth.py

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db_session, get_current_user
from app.core.config import settings
from app.core.rate_limiter import limiter
from app.models.user import User
from app.schemas.auth import LoginRequest, TokenWithUser
from app.schemas.user import UserRead
from app.services.auth_service import authenticate_user, create_login_response

router = APIRouter(prefix="/api/auth", tags=["Auth"])


# -------------------------------------------------------------------
# LOGIN (locally managed accounts)
# -------------------------------------------------------------------
@router.post("/login", response_model=TokenWithUser)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    payload: LoginRequest,
    session: AsyncSession = Depends(get_db_session)
):
    user = await authenticate_user(session, payload.email, payload.password)

    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    return create_login_response(user)


# -------------------------------------------------------------------
# GET CURRENT USER (provisioned on first sight when enabled)
# -------------------------------------------------------------------
@router.get("/me", response_model=UserRead)
async def me(current_user: User = Depends(get_current_user)):
    return current_user
