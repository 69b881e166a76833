"""User-related Pydantic schemas."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr

from app.domain.enums import UserRole


class UserLogin(BaseModel):
    """Schema for user login."""

    email: EmailStr
    password: str


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    role: UserRole
    first_name: str | None
    last_name: str | None
    department: str | None
