"""Booking endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import CurrentUser, DbSession
from app.core.exceptions import AuthorizationError
from app.core.middleware import booking_limiter
from app.domain.booking_rules import get_booking_rules
from app.domain.enums import BookingStatus, MealType
from app.schemas.booking import (
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    BookingRulesResponse,
    CategoryRule,
)
from app.services.booking_rule_service import booking_rule_service
from app.services.booking_service import booking_service

router = APIRouter()


@router.get("/rules", response_model=BookingRulesResponse)
async def get_rules(
    db: DbSession,
    current_user: CurrentUser,
    meal_type: MealType = Query(...),
) -> BookingRulesResponse:
    """Category limits a booking of this meal type must respect."""
    table = await booking_rule_service.get_rule_table(db)
    rule = get_booking_rules(meal_type, table)
    return BookingRulesResponse(
        meal_type=meal_type,
        rules=[
            CategoryRule(
                category=category,
                min=rule.limits[category].min,
                max=rule.limits[category].max,
            )
            for category in rule.categories
        ],
    )


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(booking_limiter)],
)
async def create_booking(
    booking_data: BookingCreate,
    db: DbSession,
    current_user: CurrentUser,
) -> BookingResponse:
    """Book a meal.

    The selected items must satisfy the rules of the meal type and the
    declared total must equal the sum of item subtotals.
    """
    table = await booking_rule_service.get_rule_table(db)
    booking = await booking_service.create_booking(db, current_user, booking_data, table)
    return BookingResponse.model_validate(booking)


@router.get("", response_model=BookingListResponse)
async def list_bookings(
    db: DbSession,
    current_user: CurrentUser,
    status_filter: BookingStatus | None = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> BookingListResponse:
    """List the current user's bookings, newest first."""
    bookings, total = await booking_service.list_user_bookings(
        db, current_user.id, status=status_filter, page=page, page_size=page_size
    )
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: UUID,
    db: DbSession,
    current_user: CurrentUser,
) -> BookingResponse:
    booking = await booking_service.load_booking(db, booking_id)
    if booking.user_id != current_user.id and not current_user.is_kitchen_staff:
        raise AuthorizationError("You don't have permission to access this booking")
    return BookingResponse.model_validate(booking)


@router.delete("/{booking_id}", response_model=BookingResponse)
async def cancel_booking(
    booking_id: UUID,
    db: DbSession,
    current_user: CurrentUser,
) -> BookingResponse:
    """Cancel one of your own bookings before the cancellation deadline."""
    booking = await booking_service.cancel_booking(db, booking_id, current_user)
    return BookingResponse.model_validate(booking)
