"""Availability checks, hold expiry and the unit availability projection.

A unit is free for [start, end) when it is active, its cabin/hostel is
active and booking-enabled, its vendor is approved, and no completed booking
or pending booking with a live hold overlaps the range.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from inhalestays.core.exceptions import NotFoundError, ValidationError
from inhalestays.domain.booking_state import ACTIVE_STATUSES, assert_booking_transition
from inhalestays.models.booking import Booking
from inhalestays.models.inventory import Cabin, Hostel, HostelBed, HostelRoom, Seat
from inhalestays.models.vendor import Vendor

logger = logging.getLogger(__name__)

UNIT_TYPES = ("seat", "bed")
UNIT_TYPE_FOR_BOOKING = {"cabin": "seat", "hostel": "bed"}
BOOKING_TYPE_FOR_UNIT = {"seat": "cabin", "bed": "hostel"}


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (as returned by SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def ranges_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Half-open ranges [a_start, a_end) and [b_start, b_end) intersect."""
    return a_start < b_end and b_start < a_end


def hold_is_active(booking: Booking, now: datetime) -> bool:
    return (
        booking.payment_status == "pending"
        and booking.hold_expires_at is not None
        and as_utc(booking.hold_expires_at) > now
    )


def hold_has_lapsed(booking: Booking, now: datetime) -> bool:
    return booking.payment_status == "pending" and not hold_is_active(booking, now)


def mark_booking_failed(booking: Booking, reason: str, now: datetime) -> None:
    assert_booking_transition(booking.payment_status, "failed")
    booking.payment_status = "failed"
    booking.failure_reason = reason
    booking.failed_at = now


def unit_column(unit_type: str):
    if unit_type == "seat":
        return Booking.seat_id
    if unit_type == "bed":
        return Booking.bed_id
    raise ValidationError(f"Unknown unit type: {unit_type}")


@dataclass
class AvailabilityResult:
    """Outcome of an availability check."""

    available: bool
    reason: str | None = None


@dataclass
class BookableUnit:
    """A seat or bed with the records that decide whether it can be booked."""

    unit_type: str
    unit: Seat | HostelBed
    parent: Cabin | Hostel
    vendor: Vendor
    room: HostelRoom | None = None

    @property
    def booking_type(self) -> str:
        return BOOKING_TYPE_FOR_UNIT[self.unit_type]

    @property
    def is_hot_selling(self) -> bool:
        return bool(getattr(self.unit, "is_hot_selling", False))

    def unbookable_reason(self) -> str | None:
        """Why the unit cannot be booked at all, or None."""
        if not self.unit.is_active:
            return "unit_inactive"
        if self.room is not None and not self.room.is_active:
            return "room_inactive"
        if not self.parent.is_active:
            return "property_inactive"
        if not self.parent.is_booking_enabled:
            return "booking_disabled"
        if self.vendor.status != "approved":
            return "vendor_not_approved"
        return None


class AvailabilityService:
    """Read-side booking rules shared by booking creation, payments and sweeps."""

    async def get_bookable_unit(
        self,
        db: AsyncSession,
        unit_type: str,
        unit_id: UUID,
        lock: bool = False,
    ) -> BookableUnit:
        """Load a unit with its parent and vendor.

        With `lock`, the unit row is locked FOR UPDATE, serializing booking
        writes for that unit until the transaction ends.
        """
        model = {"seat": Seat, "bed": HostelBed}.get(unit_type)
        if model is None:
            raise ValidationError(f"Unknown unit type: {unit_type}")

        stmt = select(model).where(model.id == unit_id)
        if lock:
            stmt = stmt.with_for_update()
        result = await db.execute(stmt)
        unit = result.scalar_one_or_none()
        if not unit:
            raise NotFoundError(model.__name__, str(unit_id))

        room = None
        if unit_type == "seat":
            parent = await db.get(Cabin, unit.cabin_id)
        else:
            room = await db.get(HostelRoom, unit.room_id)
            parent = await db.get(Hostel, room.hostel_id)
        vendor = await db.get(Vendor, parent.vendor_id)

        return BookableUnit(
            unit_type=unit_type,
            unit=unit,
            parent=parent,
            vendor=vendor,
            room=room,
        )

    async def find_conflicts(
        self,
        db: AsyncSession,
        unit_type: str,
        unit_id: UUID,
        start_date: date,
        end_date: date,
        now: datetime,
        exclude_booking_id: UUID | None = None,
    ) -> list[Booking]:
        """Bookings that currently occupy any part of [start_date, end_date)."""
        column = unit_column(unit_type)
        stmt = select(Booking).where(
            column == unit_id,
            Booking.payment_status.in_(ACTIVE_STATUSES),
            Booking.start_date < end_date,
            Booking.end_date > start_date,
        )
        if exclude_booking_id is not None:
            stmt = stmt.where(Booking.id != exclude_booking_id)

        result = await db.execute(stmt)
        return [
            booking
            for booking in result.scalars().all()
            if booking.payment_status == "completed" or hold_is_active(booking, now)
        ]

    async def check_availability(
        self,
        db: AsyncSession,
        unit_type: str,
        unit_id: UUID,
        start_date: date,
        end_date: date,
        now: datetime | None = None,
        exclude_booking_id: UUID | None = None,
    ) -> AvailabilityResult:
        """Whether the unit is free for the whole of [start_date, end_date). Read-only."""
        if start_date >= end_date:
            raise ValidationError("start_date must be before end_date")
        now = now or utcnow()

        bookable = await self.get_bookable_unit(db, unit_type, unit_id)
        reason = bookable.unbookable_reason()
        if reason:
            return AvailabilityResult(available=False, reason=reason)

        conflicts = await self.find_conflicts(
            db, unit_type, unit_id, start_date, end_date, now, exclude_booking_id
        )
        if conflicts:
            return AvailabilityResult(available=False, reason="overlapping_booking")
        return AvailabilityResult(available=True)

    def expire_if_stale(self, booking: Booking, now: datetime) -> bool:
        """Fail a pending booking whose hold has lapsed. Returns True if it was expired."""
        if not hold_has_lapsed(booking, now):
            return False
        mark_booking_failed(booking, "hold_expired", now)
        logger.info("Booking %s hold expired", booking.booking_number)
        return True

    async def expire_stale_holds(
        self,
        db: AsyncSession,
        now: datetime | None = None,
        unit_type: str | None = None,
        unit_id: UUID | None = None,
        limit: int | None = None,
    ) -> int:
        """Flip pending bookings with lapsed holds to failed.

        Args:
            db: Database session
            now: Reference time
            unit_type: Restrict to one unit (with unit_id)
            unit_id: Restrict to one unit (with unit_type)
            limit: Maximum bookings to expire in this call

        Returns:
            int: Number of bookings expired
        """
        now = now or utcnow()
        stmt = (
            select(Booking)
            .where(
                Booking.payment_status == "pending",
                or_(Booking.hold_expires_at.is_(None), Booking.hold_expires_at <= now),
            )
            .order_by(Booking.hold_expires_at)
        )
        if unit_type is not None and unit_id is not None:
            stmt = stmt.where(unit_column(unit_type) == unit_id)
        if limit:
            stmt = stmt.limit(limit)
        stmt = stmt.with_for_update(skip_locked=True)

        result = await db.execute(stmt)
        expired = 0
        for booking in result.scalars().all():
            if self.expire_if_stale(booking, now):
                expired += 1

        if expired:
            await db.flush()
        return expired

    async def refresh_unit_projection(
        self,
        db: AsyncSession,
        unit_type: str,
        unit_id: UUID,
        today: date | None = None,
    ) -> None:
        """Recompute is_available / unavailable_until from completed bookings."""
        today = today or utcnow().date()
        model = Seat if unit_type == "seat" else HostelBed
        unit = await db.get(model, unit_id)
        if unit is None:
            return

        result = await db.execute(
            select(Booking.end_date).where(
                unit_column(unit_type) == unit_id,
                Booking.payment_status == "completed",
                Booking.start_date <= today,
                Booking.end_date > today,
            )
        )
        covering_ends = list(result.scalars().all())

        unit.is_available = not covering_ends
        unit.unavailable_until = max(covering_ends) if covering_ends else None

    async def refresh_availability_flags(
        self,
        db: AsyncSession,
        today: date | None = None,
    ) -> int:
        """Refresh the projection for every unit that is flagged or should be.

        Returns:
            int: Number of units refreshed
        """
        today = today or utcnow().date()
        targets: set[tuple[str, UUID]] = set()

        for unit_type, model in (("seat", Seat), ("bed", HostelBed)):
            flagged = await db.execute(select(model.id).where(model.is_available.is_(False)))
            targets.update((unit_type, unit_id) for unit_id in flagged.scalars().all())

            column = unit_column(unit_type)
            covering = await db.execute(
                select(column).where(
                    column.is_not(None),
                    Booking.payment_status == "completed",
                    Booking.start_date <= today,
                    Booking.end_date > today,
                )
            )
            targets.update((unit_type, unit_id) for unit_id in covering.scalars().all())

        for unit_type, unit_id in targets:
            await self.refresh_unit_projection(db, unit_type, unit_id, today)

        await db.flush()
        return len(targets)


availability_service = AvailabilityService()
