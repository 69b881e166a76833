"""API dependencies for authentication and role checks."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthenticationError, AuthorizationError
from app.core.security import verify_token
from app.database import get_db
from app.domain.enums import UserRole
from app.models.user import User

# Security scheme
security = HTTPBearer()


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Get the current authenticated user from JWT token."""
    payload = verify_token(credentials.credentials, token_type="access")
    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token payload")

    try:
        user_uuid = UUID(user_id)
    except ValueError:
        raise AuthenticationError("Invalid token payload")

    result = await db.execute(select(User).where(User.id == user_uuid))
    user = result.scalar_one_or_none()

    if not user:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise AuthenticationError("User account is deactivated")

    return user


class RoleChecker:
    """Allow only users holding one of the given roles."""

    def __init__(self, *roles: UserRole):
        self.roles = {role.value for role in roles}

    async def __call__(
        self,
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        if current_user.role not in self.roles:
            raise AuthorizationError("Insufficient permissions")
        return current_user


# Convenience instances
require_kitchen_staff = RoleChecker(UserRole.KITCHEN_ADMIN, UserRole.SUPER_ADMIN)

CurrentUser = Annotated[User, Depends(get_current_user)]
KitchenStaff = Annotated[User, Depends(require_kitchen_staff)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
