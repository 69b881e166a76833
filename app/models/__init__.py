"""Database models."""

from app.models.admin import AuditLog
from app.models.booking import Booking, BookingItem, BookingRule, Menu
from app.models.user import User

__all__ = [
    # User
    "User",
    # Booking
    "Menu",
    "Booking",
    "BookingItem",
    "BookingRule",
    # Admin
    "AuditLog",
]
