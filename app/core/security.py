"""Password hashing and JWT handling for the credentials login."""

from datetime import UTC, datetime, timedelta
from typing import Any, Literal

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.config import settings
from app.core.exceptions import AuthenticationError

TokenType = Literal["access", "refresh"]

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def _encode(claims: dict[str, Any], token_type: TokenType, lifetime: timedelta) -> str:
    payload = {**claims, "exp": datetime.now(UTC) + lifetime, "type": token_type}
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(claims: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """Create a short-lived access token."""
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    return _encode(claims, "access", lifetime)


def create_refresh_token(claims: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    lifetime = expires_delta or timedelta(days=settings.refresh_token_expire_days)
    return _encode(claims, "refresh", lifetime)


def verify_token(token: str, token_type: TokenType = "access") -> dict[str, Any]:
    """Decode a token and check its type.

    Raises:
        AuthenticationError: If the token is invalid, expired or of the wrong type
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as e:
        raise AuthenticationError(f"Token validation failed: {e}")

    if payload.get("type") != token_type:
        raise AuthenticationError("Invalid token type")
    return payload


def create_tokens(user_id: str, email: str, role: str) -> dict[str, str]:
    """Issue the access/refresh pair returned by the login endpoint."""
    claims = {"sub": user_id, "email": email, "role": role}
    return {
        "access_token": create_access_token(claims),
        "refresh_token": create_refresh_token(claims),
        "token_type": "bearer",
    }
