"""Booking persistence and lifecycle.

New bookings pass the booking rules before they are stored, and status
changes pass the order state machine before the row is updated. Status
writes are conditional on the status that was read, so two concurrent
updates of the same booking cannot both succeed.
"""

import logging
from datetime import UTC, date, datetime, time
from typing import Any
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.config import settings
from app.core.exceptions import (
    AuthorizationError,
    BookingStatusConflict,
    CancellationNotAllowed,
    DuplicateBooking,
    InvalidBooking,
    InvalidStatusTransition,
    MenuNotAvailable,
    NotFoundError,
    PriceMismatch,
    ValidationError,
)
from app.domain.booking_rules import (
    RuleTable,
    calculate_total_price,
    validate_booking_items,
    validate_total_price,
)
from app.domain.enums import BookingStatus
from app.domain.order_state import apply_transition
from app.models.booking import Booking, BookingItem, Menu
from app.models.user import User
from app.schemas.booking import BookingCreate
from app.services.audit_service import audit_service

logger = logging.getLogger(__name__)

OPEN_STATUSES = (
    BookingStatus.PENDING.value,
    BookingStatus.CONFIRMED.value,
    BookingStatus.PREPARING.value,
    BookingStatus.READY.value,
)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def order_priority(booking: Booking, now: datetime) -> float:
    """Kitchen board priority: confirmed first, then preparing, older first."""
    priority = 0.0
    if booking.status == BookingStatus.CONFIRMED.value:
        priority += 10
    elif booking.status == BookingStatus.PREPARING.value:
        priority += 5
    age_hours = (now - _as_utc(booking.booked_at)).total_seconds() / 3600
    priority += min(max(age_hours, 0.0), 24.0)
    return priority


class BookingService:
    """Booking operations used by the API routes."""

    async def load_booking(self, db: AsyncSession, booking_id: UUID) -> Booking:
        """Load a booking with its items.

        Raises:
            NotFoundError: If no booking has this ID
        """
        result = await db.execute(
            select(Booking)
            .where(Booking.id == booking_id)
            .options(selectinload(Booking.items))
            .execution_options(populate_existing=True)
        )
        booking = result.scalar_one_or_none()
        if not booking:
            raise NotFoundError("Booking", str(booking_id))
        return booking

    async def create_booking(
        self,
        db: AsyncSession,
        user: User,
        data: BookingCreate,
        rule_table: RuleTable,
    ) -> Booking:
        """Validate and store a new PENDING booking.

        Raises:
            NotFoundError: Menu does not exist
            MenuNotAvailable: Menu inactive, for another meal, or full
            InvalidBooking: Items break the booking rules
            PriceMismatch: Declared total differs from the item total
            DuplicateBooking: User already has an open booking for this meal
            RuleNotFoundError: No rules configured for the meal type
        """
        menu = await db.get(Menu, data.menu_id)
        if not menu:
            raise NotFoundError("Menu", str(data.menu_id))
        if not menu.is_active:
            raise MenuNotAvailable()
        if menu.meal_type != data.meal_type.value or menu.service_date != data.service_date:
            raise ValidationError("Menu does not match the requested date and meal type")
        if menu.current_bookings >= menu.max_bookings:
            raise MenuNotAvailable("This menu is fully booked")

        items = data.order_items()
        rules_check = validate_booking_items(data.meal_type, items, rule_table)
        if not rules_check.valid:
            logger.info(
                "Rejected %s booking for user %s: %s",
                data.meal_type.value,
                user.id,
                "; ".join(rules_check.errors),
            )
            raise InvalidBooking([v.to_dict() for v in rules_check.violations])

        if not validate_total_price(items, data.total_price):
            raise PriceMismatch(data.total_price, calculate_total_price(items))

        existing = await db.execute(
            select(Booking.id).where(
                Booking.user_id == user.id,
                Booking.service_date == data.service_date,
                Booking.meal_type == data.meal_type.value,
                Booking.status.in_(OPEN_STATUSES),
            )
        )
        if existing.first():
            raise DuplicateBooking()

        # Claim a slot atomically; a concurrent booking may have taken the last one
        claimed = await db.execute(
            update(Menu)
            .where(Menu.id == menu.id, Menu.current_bookings < Menu.max_bookings)
            .values(current_bookings=Menu.current_bookings + 1)
            .execution_options(synchronize_session=False)
        )
        if claimed.rowcount == 0:
            raise MenuNotAvailable("This menu is fully booked")

        booking = Booking(
            user_id=user.id,
            menu_id=menu.id,
            service_date=data.service_date,
            meal_type=data.meal_type.value,
            total_price=data.total_price,
            payment_method=data.payment_method.value if data.payment_method else None,
            notes=data.notes,
            status=BookingStatus.PENDING.value,
            items=[
                BookingItem(
                    recipe_id=item.recipe_id,
                    recipe_name=item.recipe_name,
                    recipe_category=item.recipe_category.value,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    subtotal=item.subtotal,
                )
                for item in items
            ],
        )
        db.add(booking)
        await db.flush()

        await audit_service.log(
            db,
            user_id=user.id,
            action="booking.created",
            entity="Booking",
            entity_id=booking.id,
            changes={
                "service_date": data.service_date.isoformat(),
                "meal_type": data.meal_type.value,
                "total_price": data.total_price,
            },
        )
        logger.info("Created booking %s for user %s", booking.id, user.id)
        return await self.load_booking(db, booking.id)

    async def _release_slot(self, db: AsyncSession, menu_id: UUID) -> None:
        """Give back the menu slot a cancelled booking was holding."""
        await db.execute(
            update(Menu)
            .where(Menu.id == menu_id, Menu.current_bookings > 0)
            .values(current_bookings=Menu.current_bookings - 1)
            .execution_options(synchronize_session=False)
        )

    async def update_booking_status(
        self,
        db: AsyncSession,
        booking_id: UUID,
        expected_status: str,
        new_status: str,
        timestamps: dict[str, datetime] | None = None,
    ) -> Booking:
        """Write a new status if the row still holds ``expected_status``.

        Raises:
            BookingStatusConflict: If another request changed the status first
        """
        values: dict[str, Any] = {"status": new_status, **(timestamps or {})}
        result = await db.execute(
            update(Booking)
            .where(Booking.id == booking_id, Booking.status == expected_status)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            logger.warning(
                "Lost status race on booking %s (expected %s)", booking_id, expected_status
            )
            raise BookingStatusConflict()
        return await self.load_booking(db, booking_id)

    async def change_status(
        self,
        db: AsyncSession,
        booking_id: UUID,
        requested: BookingStatus,
        actor: User,
    ) -> Booking:
        """Apply a kitchen status change.

        Raises:
            NotFoundError: If the booking does not exist
            InvalidStatusTransition: If the table does not allow the change
            BookingStatusConflict: If the booking changed concurrently
        """
        booking = await self.load_booking(db, booking_id)
        decision = apply_transition(booking.status, requested)
        if not decision.allowed:
            logger.warning(
                "Rejected transition %s -> %s on booking %s",
                decision.current_status,
                decision.requested_status,
                booking_id,
            )
            raise InvalidStatusTransition(
                decision.current_status,
                decision.requested_status,
                [s.value for s in decision.allowed_transitions],
            )

        now = datetime.now(UTC)
        timestamps = {decision.timestamp_field: now} if decision.timestamp_field else {}
        cancelling = decision.requested_status == BookingStatus.CANCELLED.value
        if cancelling:
            timestamps["cancelled_at"] = now
        updated = await self.update_booking_status(
            db, booking_id, decision.current_status, decision.requested_status, timestamps
        )
        if cancelling:
            await self._release_slot(db, booking.menu_id)

        await audit_service.log_status_change(
            db,
            user_id=actor.id,
            booking_id=booking_id,
            old_status=decision.current_status,
            new_status=decision.requested_status,
            timestamp=now.isoformat(),
        )
        logger.info(
            "Booking %s moved %s -> %s by %s",
            booking_id,
            decision.current_status,
            decision.requested_status,
            actor.id,
        )
        return updated

    async def cancel_booking(
        self,
        db: AsyncSession,
        booking_id: UUID,
        user: User,
        now: datetime | None = None,
    ) -> Booking:
        """Cancel a booking on behalf of its owner.

        Raises:
            AuthorizationError: If the user does not own the booking
            CancellationNotAllowed: If the booking is past the deadline or cannot be cancelled
        """
        now = now or datetime.now(UTC)
        booking = await self.load_booking(db, booking_id)
        if booking.user_id != user.id:
            raise AuthorizationError("You can only cancel your own bookings")

        decision = apply_transition(booking.status, BookingStatus.CANCELLED)
        if not decision.allowed:
            raise CancellationNotAllowed()

        service_start = datetime.combine(booking.service_date, time.min, tzinfo=UTC)
        hours_left = (service_start - now).total_seconds() / 3600
        if hours_left < settings.cancellation_deadline_hours:
            raise CancellationNotAllowed(
                f"Bookings can only be cancelled up to "
                f"{settings.cancellation_deadline_hours} hours before service"
            )

        updated = await self.update_booking_status(
            db,
            booking_id,
            decision.current_status,
            BookingStatus.CANCELLED.value,
            {"cancelled_at": now},
        )

        await self._release_slot(db, booking.menu_id)

        await audit_service.log(
            db,
            user_id=user.id,
            action="booking.cancelled",
            entity="Booking",
            entity_id=booking_id,
            changes={"status": BookingStatus.CANCELLED.value},
        )
        logger.info("Booking %s cancelled by owner %s", booking_id, user.id)
        return updated

    async def list_user_bookings(
        self,
        db: AsyncSession,
        user_id: UUID,
        status: BookingStatus | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Booking], int]:
        query = select(Booking).where(Booking.user_id == user_id)
        if status:
            query = query.where(Booking.status == status.value)

        count_result = await db.execute(select(func.count()).select_from(query.subquery()))
        total = count_result.scalar() or 0

        result = await db.execute(
            query.options(selectinload(Booking.items))
            .order_by(Booking.booked_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        return list(result.scalars().all()), total

    async def list_kitchen_orders(
        self,
        db: AsyncSession,
        service_date: date | None = None,
        status: BookingStatus | None = None,
        meal_type: str | None = None,
        page: int = 1,
        page_size: int = 50,
        now: datetime | None = None,
    ) -> tuple[list[tuple[Booking, float]], int]:
        """Orders for one day (default today), highest priority first."""
        now = now or datetime.now(UTC)
        query = select(Booking).where(Booking.service_date == (service_date or now.date()))
        if status:
            query = query.where(Booking.status == status.value)
        if meal_type:
            query = query.where(Booking.meal_type == meal_type)

        count_result = await db.execute(select(func.count()).select_from(query.subquery()))
        total = count_result.scalar() or 0

        result = await db.execute(
            query.options(selectinload(Booking.items))
            .order_by(Booking.booked_at.asc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        orders = [(b, order_priority(b, now)) for b in result.scalars().all()]
        orders.sort(key=lambda pair: pair[1], reverse=True)
        return orders, total


booking_service = BookingService()
