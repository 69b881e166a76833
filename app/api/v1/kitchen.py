"""Kitchen order board endpoints."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.api.deps import DbSession, KitchenStaff
from app.core.middleware import kitchen_limiter
from app.domain.enums import BookingStatus, MealType
from app.schemas.booking import (
    BookingResponse,
    KitchenOrderListResponse,
    KitchenOrderResponse,
    StatusUpdateRequest,
    StatusUpdateResponse,
)
from app.services.booking_service import booking_service

router = APIRouter(dependencies=[Depends(kitchen_limiter)])


@router.get("/orders", response_model=KitchenOrderListResponse)
async def list_orders(
    staff: KitchenStaff,
    db: DbSession,
    service_date: date | None = Query(None, alias="date"),
    status_filter: BookingStatus | None = Query(None, alias="status"),
    meal_type: MealType | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
) -> KitchenOrderListResponse:
    """Orders for a service day (today by default), highest priority first."""
    orders, total = await booking_service.list_kitchen_orders(
        db,
        service_date=service_date,
        status=status_filter,
        meal_type=meal_type.value if meal_type else None,
        page=page,
        page_size=page_size,
    )
    return KitchenOrderListResponse(
        orders=[
            KitchenOrderResponse.model_validate(booking).model_copy(update={"priority": priority})
            for booking, priority in orders
        ],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.patch("/orders/{booking_id}/status", response_model=StatusUpdateResponse)
async def update_order_status(
    booking_id: UUID,
    request: StatusUpdateRequest,
    staff: KitchenStaff,
    db: DbSession,
) -> StatusUpdateResponse:
    """Move an order along its lifecycle.

    Only the transitions of the order lifecycle are accepted; anything else
    is answered with the current status and the statuses reachable from it.
    """
    booking = await booking_service.change_status(db, booking_id, request.status, staff)
    return StatusUpdateResponse(
        message=f"Order status updated to {booking.status}",
        booking=BookingResponse.model_validate(booking),
    )
