"""Booking-related Pydantic schemas."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.domain.booking_rules import OrderItem
from app.domain.enums import (
    BookingStatus,
    MealType,
    PaymentMethod,
    RecipeCategory,
)


class BookingItemCreate(BaseModel):
    """One ordered recipe (prices in cents)."""

    recipe_id: str = Field(..., min_length=1, max_length=64)
    recipe_name: str | None = Field(None, max_length=200)
    recipe_category: RecipeCategory
    quantity: int = Field(..., gt=0, le=50)
    unit_price: int = Field(..., gt=0)

    def to_order_item(self) -> OrderItem:
        return OrderItem(
            recipe_id=self.recipe_id,
            recipe_category=self.recipe_category,
            quantity=self.quantity,
            unit_price=self.unit_price,
            recipe_name=self.recipe_name,
        )


class BookingCreate(BaseModel):
    """Schema for creating a booking."""

    menu_id: UUID
    service_date: date
    meal_type: MealType
    items: list[BookingItemCreate] = Field(..., min_length=1)
    total_price: int = Field(..., gt=0)
    payment_method: PaymentMethod | None = None
    notes: str | None = Field(None, max_length=1000)

    def order_items(self) -> list[OrderItem]:
        return [item.to_order_item() for item in self.items]


class BookingItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    recipe_id: str
    recipe_name: str | None
    recipe_category: RecipeCategory
    quantity: int
    unit_price: int
    subtotal: int


class BookingResponse(BaseModel):
    """Schema for booking response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    menu_id: UUID
    service_date: date
    meal_type: MealType

    total_price: int
    status: BookingStatus
    payment_method: PaymentMethod | None
    payment_status: str
    notes: str | None

    items: list[BookingItemResponse]

    booked_at: datetime
    confirmed_at: datetime | None
    completed_at: datetime | None
    cancelled_at: datetime | None
    updated_at: datetime


class BookingListResponse(BaseModel):
    """Schema for paginated booking list."""

    bookings: list[BookingResponse]
    total: int
    page: int
    page_size: int


class KitchenOrderResponse(BookingResponse):
    """Booking as shown on the kitchen board."""

    priority: float = 0.0


class KitchenOrderListResponse(BaseModel):
    orders: list[KitchenOrderResponse]
    total: int
    page: int
    page_size: int


class StatusUpdateRequest(BaseModel):
    """Schema for a kitchen status change."""

    status: BookingStatus


class StatusUpdateResponse(BaseModel):
    message: str
    booking: BookingResponse


class CategoryRule(BaseModel):
    """Allowed quantity for one category (max null = unbounded)."""

    category: RecipeCategory
    min: int = Field(default=0, ge=0)
    max: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def validate_bounds(self) -> "CategoryRule":
        if self.max is not None and self.max < self.min:
            raise ValueError("max must be greater than or equal to min")
        return self


class BookingRulesResponse(BaseModel):
    meal_type: MealType
    rules: list[CategoryRule]


class BookingRulesUpdate(BaseModel):
    """Replacement rule set for a meal type."""

    rules: list[CategoryRule] = Field(..., min_length=1)

    @model_validator(mode="after")
    def validate_unique_categories(self) -> "BookingRulesUpdate":
        categories = [r.category for r in self.rules]
        if len(categories) != len(set(categories)):
            raise ValueError("Each category may appear only once")
        return self
