"""Pydantic schemas for API validation."""

from app.schemas.booking import (
    BookingCreate,
    BookingItemCreate,
    BookingListResponse,
    BookingResponse,
    BookingRulesResponse,
    BookingRulesUpdate,
    KitchenOrderListResponse,
    StatusUpdateRequest,
    StatusUpdateResponse,
)
from app.schemas.user import RefreshTokenRequest, TokenResponse, UserLogin, UserResponse

__all__ = [
    # User
    "UserLogin",
    "UserResponse",
    "TokenResponse",
    "RefreshTokenRequest",
    # Booking
    "BookingCreate",
    "BookingItemCreate",
    "BookingResponse",
    "BookingListResponse",
    "BookingRulesResponse",
    "BookingRulesUpdate",
    # Kitchen
    "KitchenOrderListResponse",
    "StatusUpdateRequest",
    "StatusUpdateResponse",
]
