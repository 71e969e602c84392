"""Availability checks, hold expiry and the availability projection."""

from datetime import UTC, date, datetime, timedelta

import pytest
from sqlalchemy import select

from inhalestays.core.exceptions import NotFoundError, ValidationError
from inhalestays.models.booking import Booking
from inhalestays.models.inventory import Seat
from inhalestays.models.vendor import Vendor
from inhalestays.services.availability_service import (
    availability_service,
    ranges_overlap,
)
from inhalestays.services.booking_service import booking_service

T0 = datetime(2025, 1, 1, 9, 0, tzinfo=UTC)
HOLD = timedelta(minutes=5)


def test_ranges_overlap_is_half_open():
    jan1, jan15, jan20, jan31 = date(2025, 1, 1), date(2025, 1, 15), date(2025, 1, 20), date(2025, 1, 31)
    assert ranges_overlap(jan1, jan31, jan15, jan20)
    assert ranges_overlap(jan15, jan20, jan1, jan31)
    # Adjacent ranges share no day
    assert not ranges_overlap(jan1, jan15, jan15, jan20)
    assert not ranges_overlap(jan15, jan20, jan1, jan15)


async def _book(db, seed, start=date(2025, 1, 1), count=30, now=T0, user=None):
    booking = await booking_service.create_booking(
        db,
        user or seed.student,
        "cabin",
        seed.seat.id,
        start,
        "daily",
        count,
        now=now,
    )
    await db.commit()
    return booking


async def test_free_unit_is_available(db, seed):
    result = await availability_service.check_availability(
        db, "seat", seed.seat.id, date(2025, 1, 1), date(2025, 1, 31), now=T0
    )
    assert result.available
    assert result.reason is None


async def test_pending_booking_blocks_while_hold_is_live(db, seed):
    await _book(db, seed)
    result = await availability_service.check_availability(
        db, "seat", seed.seat.id, date(2025, 1, 15), date(2025, 1, 20), now=T0 + HOLD - timedelta(seconds=1)
    )
    assert not result.available
    assert result.reason == "overlapping_booking"


async def test_lapsed_hold_does_not_block(db, seed):
    await _book(db, seed)
    result = await availability_service.check_availability(
        db, "seat", seed.seat.id, date(2025, 1, 15), date(2025, 1, 20), now=T0 + HOLD + timedelta(seconds=1)
    )
    assert result.available


async def test_adjacent_range_is_available(db, seed):
    await _book(db, seed)
    result = await availability_service.check_availability(
        db, "seat", seed.seat.id, date(2025, 1, 31), date(2025, 2, 5), now=T0
    )
    assert result.available


async def test_empty_range_is_rejected(db, seed):
    with pytest.raises(ValidationError):
        await availability_service.check_availability(
            db, "seat", seed.seat.id, date(2025, 1, 5), date(2025, 1, 5), now=T0
        )


async def test_unknown_unit(db, seed):
    with pytest.raises(NotFoundError):
        await availability_service.check_availability(
            db, "bed", seed.seat.id, date(2025, 1, 1), date(2025, 1, 2), now=T0
        )


async def test_inactive_unit_and_unapproved_vendor_are_unavailable(db, seed):
    seat = await db.get(Seat, seed.seat.id)
    seat.is_active = False
    await db.commit()
    result = await availability_service.check_availability(
        db, "seat", seed.seat.id, date(2025, 1, 1), date(2025, 1, 2), now=T0
    )
    assert result.reason == "unit_inactive"

    seat.is_active = True
    vendor = await db.get(Vendor, seed.vendor.id)
    vendor.status = "suspended"
    await db.commit()
    result = await availability_service.check_availability(
        db, "seat", seed.seat.id, date(2025, 1, 1), date(2025, 1, 2), now=T0
    )
    assert result.reason == "vendor_not_approved"


async def test_sweep_fails_lapsed_holds(db, seed):
    booking = await _book(db, seed)

    assert await availability_service.expire_stale_holds(db, now=T0 + HOLD - timedelta(seconds=1)) == 0
    assert booking.payment_status == "pending"

    assert await availability_service.expire_stale_holds(db, now=T0 + HOLD) == 1
    await db.commit()
    assert booking.payment_status == "failed"
    assert booking.failure_reason == "hold_expired"
    assert booking.failed_at == T0 + HOLD

    # Idempotent
    assert await availability_service.expire_stale_holds(db, now=T0 + HOLD * 2) == 0


async def test_sweep_respects_batch_limit(db, seed):
    await _book(db, seed, start=date(2025, 1, 1), count=5)
    await _book(db, seed, start=date(2025, 2, 1), count=5)
    later = T0 + HOLD * 2
    assert await availability_service.expire_stale_holds(db, now=later, limit=1) == 1
    assert await availability_service.expire_stale_holds(db, now=later, limit=1) == 1
    assert await availability_service.expire_stale_holds(db, now=later, limit=1) == 0


async def test_new_booking_reclaims_lapsed_hold(db, seed):
    first = await _book(db, seed)
    second = await _book(
        db, seed, start=date(2025, 1, 15), count=5, now=T0 + HOLD + timedelta(minutes=1), user=seed.other
    )
    assert first.payment_status == "failed"
    assert first.failure_reason == "hold_expired"
    assert second.payment_status == "pending"


async def test_projection_reflects_completed_bookings(db, seed):
    db.add(
        Booking(
            booking_number="CABIN-PROJ01",
            user_id=seed.student.id,
            booking_type="cabin",
            seat_id=seed.seat.id,
            start_date=date(2025, 1, 1),
            end_date=date(2025, 1, 31),
            booking_duration="daily",
            duration_count=30,
            unit_price=1000,
            total_price=1000,
            payment_status="completed",
            created_at=T0,
        )
    )
    await db.commit()

    refreshed = await availability_service.refresh_availability_flags(db, today=date(2025, 1, 10))
    await db.commit()
    assert refreshed == 1
    seat = (await db.execute(select(Seat).where(Seat.id == seed.seat.id))).scalar_one()
    assert seat.is_available is False
    assert seat.unavailable_until == date(2025, 1, 31)

    # The booking's end date is free again
    await availability_service.refresh_availability_flags(db, today=date(2025, 1, 31))
    await db.commit()
    assert seat.is_available is True
    assert seat.unavailable_until is None
