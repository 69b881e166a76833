from datetime import UTC, datetime, time, timedelta

import pytest
from sqlalchemy import select

from app.core.exceptions import (
    AuthorizationError,
    BookingStatusConflict,
    CancellationNotAllowed,
    InvalidStatusTransition,
)
from app.domain.enums import BookingStatus
from app.models.admin import AuditLog
from app.models.booking import Booking, Menu
from app.schemas.booking import BookingCreate
from app.services.booking_rule_service import BookingRuleService
from app.services.booking_service import booking_service, order_priority
from factories import SERVICE_DATE, lunch_payload

SERVICE_START = datetime.combine(SERVICE_DATE, time.min, tzinfo=UTC)


async def create_lunch(session, data) -> Booking:
    table = await BookingRuleService(cache_enabled=False).get_rule_table(session)
    return await booking_service.create_booking(
        session, data.diner, BookingCreate(**lunch_payload(data.lunch)), table
    )


async def test_create_booking_claims_a_menu_slot(session_factory, data):
    async with session_factory() as session:
        booking = await create_lunch(session, data)
        await session.commit()

    async with session_factory() as session:
        menu = await session.get(Menu, data.lunch.id)
        actions = (await session.execute(select(AuditLog.action))).scalars().all()

    assert booking.status == BookingStatus.PENDING.value
    assert sorted(i.subtotal for i in booking.items) == [200, 800]
    assert menu.current_bookings == 1
    assert actions == ["booking.created"]


async def test_change_status_stamps_and_audits(session_factory, data):
    async with session_factory() as session:
        booking = await create_lunch(session, data)
        confirmed = await booking_service.change_status(
            session, booking.id, BookingStatus.CONFIRMED, data.chef
        )
        await session.commit()

    async with session_factory() as session:
        entry = (
            await session.execute(
                select(AuditLog).where(AuditLog.action == "booking.status_updated")
            )
        ).scalar_one()

    assert confirmed.status == BookingStatus.CONFIRMED.value
    assert confirmed.confirmed_at is not None
    assert confirmed.completed_at is None
    assert entry.user_id == data.chef.id
    assert entry.changes["old_status"] == "PENDING"
    assert entry.changes["new_status"] == "CONFIRMED"


async def test_illegal_change_leaves_booking_untouched(session_factory, data):
    async with session_factory() as session:
        booking = await create_lunch(session, data)

        with pytest.raises(InvalidStatusTransition) as exc_info:
            await booking_service.change_status(
                session, booking.id, BookingStatus.READY, data.chef
            )

        reloaded = await booking_service.load_booking(session, booking.id)

    assert exc_info.value.allowed_transitions == ["CONFIRMED", "CANCELLED"]
    assert reloaded.status == BookingStatus.PENDING.value


async def test_stale_status_write_conflicts(session_factory, data):
    async with session_factory() as session:
        booking = await create_lunch(session, data)

        with pytest.raises(BookingStatusConflict):
            await booking_service.update_booking_status(
                session,
                booking.id,
                expected_status=BookingStatus.CONFIRMED.value,
                new_status=BookingStatus.PREPARING.value,
            )


async def test_cancel_releases_the_menu_slot(session_factory, data):
    async with session_factory() as session:
        booking = await create_lunch(session, data)
        cancelled = await booking_service.cancel_booking(
            session, booking.id, data.diner, now=SERVICE_START - timedelta(days=1)
        )
        await session.commit()

    async with session_factory() as session:
        menu = await session.get(Menu, data.lunch.id)

    assert cancelled.status == BookingStatus.CANCELLED.value
    assert cancelled.cancelled_at is not None
    assert menu.current_bookings == 0


async def test_kitchen_cancel_releases_the_menu_slot(session_factory, data):
    async with session_factory() as session:
        booking = await create_lunch(session, data)
        cancelled = await booking_service.change_status(
            session, booking.id, BookingStatus.CANCELLED, data.chef
        )
        await session.commit()

    async with session_factory() as session:
        menu = await session.get(Menu, data.lunch.id)

    assert cancelled.status == BookingStatus.CANCELLED.value
    assert cancelled.cancelled_at is not None
    assert menu.current_bookings == 0


async def test_cancel_refused_inside_the_deadline(session_factory, data):
    async with session_factory() as session:
        booking = await create_lunch(session, data)

        with pytest.raises(CancellationNotAllowed):
            await booking_service.cancel_booking(
                session, booking.id, data.diner, now=SERVICE_START - timedelta(hours=1)
            )


async def test_only_the_owner_can_cancel(session_factory, data):
    async with session_factory() as session:
        booking = await create_lunch(session, data)

        with pytest.raises(AuthorizationError):
            await booking_service.cancel_booking(session, booking.id, data.colleague)


async def test_ready_booking_cannot_be_cancelled(session_factory, data):
    async with session_factory() as session:
        booking = await create_lunch(session, data)
        for target in (BookingStatus.CONFIRMED, BookingStatus.PREPARING, BookingStatus.READY):
            await booking_service.change_status(session, booking.id, target, data.chef)

        with pytest.raises(CancellationNotAllowed):
            await booking_service.cancel_booking(
                session, booking.id, data.diner, now=SERVICE_START - timedelta(days=1)
            )


def test_order_priority():
    now = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)

    fresh_pending = Booking(status="PENDING", booked_at=now)
    confirmed = Booking(status="CONFIRMED", booked_at=now - timedelta(hours=2))
    preparing = Booking(status="PREPARING", booked_at=now)
    stale = Booking(status="PENDING", booked_at=(now - timedelta(days=3)).replace(tzinfo=None))

    assert order_priority(fresh_pending, now) == 0
    assert order_priority(confirmed, now) == pytest.approx(12)
    assert order_priority(preparing, now) == 5
    assert order_priority(stale, now) == 24
