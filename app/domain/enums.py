"""Enumerations shared by the domain, models and schemas."""

from enum import Enum


class MealType(str, Enum):
    """Service windows a booking can be made for."""

    BREAKFAST = "BREAKFAST"
    LUNCH = "LUNCH"
    DINNER = "DINNER"
    SNACK = "SNACK"


class RecipeCategory(str, Enum):
    """Course a recipe belongs to."""

    APPETIZER = "APPETIZER"
    FIRST_COURSE = "FIRST_COURSE"
    SECOND_COURSE = "SECOND_COURSE"
    SIDE_DISH = "SIDE_DISH"
    DESSERT = "DESSERT"
    BEVERAGE = "BEVERAGE"
    EXTRA = "EXTRA"


class BookingStatus(str, Enum):
    """Lifecycle states of a booking."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PREPARING = "PREPARING"
    READY = "READY"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class UserRole(str, Enum):
    """User roles in the system."""

    SUPER_ADMIN = "SUPER_ADMIN"
    KITCHEN_ADMIN = "KITCHEN_ADMIN"
    CUSTOMER_ADMIN = "CUSTOMER_ADMIN"
    END_USER = "END_USER"


class PaymentMethod(str, Enum):
    CREDIT_CARD = "CREDIT_CARD"
    BADGE = "BADGE"
    TICKET_RESTAURANT = "TICKET_RESTAURANT"
    SATISPAY = "SATISPAY"
    NEXY = "NEXY"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    REFUNDED = "REFUNDED"
    FAILED = "FAILED"
