"""Authentication endpoints."""

from datetime import UTC, datetime
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy import select

from app.api.deps import CurrentUser, DbSession
from app.core.exceptions import AuthenticationError
from app.core.middleware import login_limiter
from app.core.security import create_tokens, verify_password, verify_token
from app.models.user import User
from app.schemas.user import RefreshTokenRequest, TokenResponse, UserLogin, UserResponse

router = APIRouter()


@router.post(
    "/login",
    response_model=TokenResponse,
    dependencies=[Depends(login_limiter)],
)
async def login(
    credentials: UserLogin,
    db: DbSession,
) -> TokenResponse:
    """Login with email and password."""
    result = await db.execute(select(User).where(User.email == credentials.email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.password_hash):
        raise AuthenticationError("Invalid email or password")

    if not user.is_active:
        raise AuthenticationError("Account is deactivated")

    user.last_login_at = datetime.now(UTC)

    tokens = create_tokens(str(user.id), user.email, user.role)
    return TokenResponse(**tokens)


@router.get("/me", response_model=UserResponse)
async def me(current_user: CurrentUser) -> User:
    """Return the authenticated user."""
    return current_user


@router.post("/refresh", response_model=TokenResponse)
async def refresh(request: RefreshTokenRequest, db: DbSession) -> TokenResponse:
    """Exchange a refresh token for a new token pair."""
    payload = verify_token(request.refresh_token, token_type="refresh")
    try:
        user_id = UUID(payload.get("sub") or "")
    except ValueError:
        raise AuthenticationError("Invalid token payload")

    # The account may have been deactivated since the token was issued
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user or not user.is_active:
        raise AuthenticationError("User not found or inactive")

    tokens = create_tokens(str(user.id), user.email, user.role)
    return TokenResponse(**tokens)
