"""Booking creation, reads and cancellation."""

import logging
from datetime import date, datetime, timedelta
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from inhalestays.config import settings
from inhalestays.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    SlotNotAvailable,
    UnitNotBookable,
    ValidationError,
)
from inhalestays.domain.booking_state import assert_booking_transition
from inhalestays.domain.pricing import (
    assert_client_total,
    compute_end_date,
    compute_total_price,
)
from inhalestays.models.booking import Booking
from inhalestays.models.inventory import Cabin, Hostel, HostelBed, HostelRoom, Seat
from inhalestays.models.transaction import Transaction
from inhalestays.models.user import User
from inhalestays.models.vendor import Vendor
from inhalestays.services.availability_service import (
    UNIT_TYPE_FOR_BOOKING,
    availability_service,
    utcnow,
)
from inhalestays.utils.booking_number import generate_booking_number

logger = logging.getLogger(__name__)


def vendor_seat_ids(user_id: UUID):
    """Subquery of seat ids owned by the vendor account `user_id`."""
    return (
        select(Seat.id)
        .join(Cabin, Seat.cabin_id == Cabin.id)
        .join(Vendor, Cabin.vendor_id == Vendor.id)
        .where(Vendor.user_id == user_id)
    )


def vendor_bed_ids(user_id: UUID):
    """Subquery of bed ids owned by the vendor account `user_id`."""
    return (
        select(HostelBed.id)
        .join(HostelRoom, HostelBed.room_id == HostelRoom.id)
        .join(Hostel, HostelRoom.hostel_id == Hostel.id)
        .join(Vendor, Hostel.vendor_id == Vendor.id)
        .where(Vendor.user_id == user_id)
    )


class BookingService:
    """Booking lifecycle operations other than payment."""

    async def create_booking(
        self,
        db: AsyncSession,
        user: User,
        booking_type: str,
        unit_id: UUID,
        start_date: date,
        booking_duration: str,
        duration_count: int,
        end_date: date | None = None,
        total_price: int | None = None,
        on_behalf_of: UUID | None = None,
        now: datetime | None = None,
    ) -> Booking:
        """Create a pending booking holding the unit for the hold window.

        The unit row is locked while stale holds are expired, overlaps are
        checked and the booking is inserted, so two requests for the same
        unit cannot both pass the check.

        Raises:
            ValidationError: Bad dates, duration or a diverging client total
            NotFoundError: Unit does not exist
            UnitNotBookable: Unit, property or vendor is not bookable
            SlotNotAvailable: Range overlaps an active booking
        """
        now = now or utcnow()

        unit_type = UNIT_TYPE_FOR_BOOKING.get(booking_type)
        if unit_type is None:
            raise ValidationError(f"Unknown booking type: {booking_type}")

        derived_end = compute_end_date(start_date, booking_duration, duration_count)
        if end_date is not None and end_date != derived_end:
            raise ValidationError(
                f"end_date {end_date.isoformat()} does not match "
                f"{duration_count} {booking_duration} from {start_date.isoformat()} "
                f"(expected {derived_end.isoformat()})"
            )

        booker_id = user.id
        if on_behalf_of is not None and on_behalf_of != user.id:
            if user.role != "admin":
                raise AuthorizationError("Only admins can book on behalf of another user")
            if not await db.get(User, on_behalf_of):
                raise NotFoundError("User", str(on_behalf_of))
            booker_id = on_behalf_of

        bookable = await availability_service.get_bookable_unit(
            db, unit_type, unit_id, lock=True
        )
        reason = bookable.unbookable_reason()
        if reason:
            raise UnitNotBookable(f"This unit is not available for booking ({reason})")

        server_total = compute_total_price(
            bookable.unit.price,
            booking_duration,
            duration_count,
            hot_selling=bookable.is_hot_selling,
            markup_percent=settings.hot_selling_markup_percent,
        )
        assert_client_total(total_price, server_total, settings.price_tolerance)

        await availability_service.expire_stale_holds(
            db, now, unit_type=unit_type, unit_id=unit_id
        )
        conflicts = await availability_service.find_conflicts(
            db, unit_type, unit_id, start_date, derived_end, now
        )
        if conflicts:
            raise SlotNotAvailable()

        booking = Booking(
            booking_number=await generate_booking_number(db, booking_type),
            user_id=booker_id,
            booking_type=booking_type,
            seat_id=unit_id if unit_type == "seat" else None,
            bed_id=unit_id if unit_type == "bed" else None,
            start_date=start_date,
            end_date=derived_end,
            booking_duration=booking_duration,
            duration_count=duration_count,
            unit_price=bookable.unit.price,
            total_price=server_total,
            currency=settings.default_currency,
            payment_status="pending",
            hold_expires_at=now + timedelta(minutes=settings.booking_hold_minutes),
            created_at=now,
        )
        db.add(booking)
        try:
            await db.flush()
        except IntegrityError as exc:
            # Exclusion constraint backstop for writers that bypassed the lock
            await db.rollback()
            logger.info(
                "Booking insert rejected by database for %s %s: %s",
                unit_type,
                unit_id,
                exc.orig,
            )
            raise SlotNotAvailable() from exc

        logger.info(
            "Booking %s created for %s %s [%s, %s) total=%s",
            booking.booking_number,
            unit_type,
            unit_id,
            start_date,
            derived_end,
            server_total,
        )
        return booking

    async def _user_can_view(self, db: AsyncSession, booking: Booking, user: User) -> bool:
        if user.role == "admin" or booking.user_id == user.id:
            return True
        if user.role != "vendor":
            return False
        if booking.seat_id is not None:
            owned = vendor_seat_ids(user.id).where(Seat.id == booking.seat_id)
        else:
            owned = vendor_bed_ids(user.id).where(HostelBed.id == booking.bed_id)
        result = await db.execute(owned)
        return result.scalar_one_or_none() is not None

    async def get_booking(
        self,
        db: AsyncSession,
        booking_id: UUID,
        user: User,
        now: datetime | None = None,
    ) -> Booking:
        """Fetch a booking visible to the user, expiring its hold if lapsed."""
        result = await db.execute(select(Booking).where(Booking.id == booking_id))
        booking = result.scalar_one_or_none()
        if not booking:
            raise NotFoundError("Booking", str(booking_id))
        if not await self._user_can_view(db, booking, user):
            raise AuthorizationError("You don't have permission to access this booking")

        if availability_service.expire_if_stale(booking, now or utcnow()):
            await db.flush()
        return booking

    async def list_bookings(
        self,
        db: AsyncSession,
        user: User,
        scope: str = "mine",
        payment_status: str | None = None,
        booking_type: str | None = None,
        page: int = 1,
        page_size: int = 20,
        now: datetime | None = None,
    ) -> tuple[list[Booking], int]:
        """List bookings for the user.

        Args:
            db: Database session
            user: Caller
            scope: mine (own bookings), vendor (bookings of own units), all (admin)
            payment_status: Filter by payment status
            booking_type: Filter by cabin or hostel
            page: 1-based page
            page_size: Page size
            now: Reference time for lazy hold expiry

        Returns:
            tuple: (bookings, total count)
        """
        now = now or utcnow()
        query = select(Booking)

        if scope == "mine":
            query = query.where(Booking.user_id == user.id)
        elif scope == "vendor":
            if user.role not in ("vendor", "admin"):
                raise AuthorizationError("Vendor access required")
            query = query.where(
                or_(
                    Booking.seat_id.in_(vendor_seat_ids(user.id)),
                    Booking.bed_id.in_(vendor_bed_ids(user.id)),
                )
            )
        elif scope == "all":
            if user.role != "admin":
                raise AuthorizationError("Admin access required")
        else:
            raise ValidationError(f"Unknown scope: {scope}")

        # Expire lapsed holds first so status filters see current state
        pending = await db.execute(query.where(Booking.payment_status == "pending"))
        expired = [
            booking
            for booking in pending.scalars().all()
            if availability_service.expire_if_stale(booking, now)
        ]
        if expired:
            await db.flush()

        if payment_status:
            query = query.where(Booking.payment_status == payment_status)
        if booking_type:
            query = query.where(Booking.booking_type == booking_type)

        count_result = await db.execute(select(func.count()).select_from(query.subquery()))
        total = count_result.scalar() or 0

        query = (
            query.order_by(Booking.created_at.desc(), Booking.booking_number)
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        result = await db.execute(query)
        return list(result.scalars().all()), total

    async def cancel_booking(
        self,
        db: AsyncSession,
        booking_id: UUID,
        user: User,
        reason: str | None = None,
        now: datetime | None = None,
    ) -> Booking:
        """Cancel a pending or completed booking (owner or admin).

        Cancelling a completed booking appends a cancellation transaction
        and refreshes the unit's availability projection.
        """
        now = now or utcnow()
        result = await db.execute(
            select(Booking).where(Booking.id == booking_id).with_for_update()
        )
        booking = result.scalar_one_or_none()
        if not booking:
            raise NotFoundError("Booking", str(booking_id))
        if user.role != "admin" and booking.user_id != user.id:
            raise AuthorizationError("Only the booking owner or an admin can cancel")

        availability_service.expire_if_stale(booking, now)
        previous_status = booking.payment_status
        assert_booking_transition(previous_status, "cancelled")

        booking.payment_status = "cancelled"
        booking.cancelled_by = "admin" if user.role == "admin" else "user"
        booking.cancellation_reason = reason
        booking.cancelled_at = now

        if previous_status == "completed":
            db.add(
                Transaction(
                    booking_id=booking.id,
                    user_id=booking.user_id,
                    booking_type=booking.booking_type,
                    transaction_type="cancellation",
                    amount=booking.total_price,
                    currency=booking.currency,
                    payment_method=booking.payment_method,
                    gateway_payment_id=booking.gateway_payment_id,
                    created_at=now,
                )
            )
            await db.flush()
            await availability_service.refresh_unit_projection(
                db, booking.unit_type, booking.unit_id, now.date()
            )

        await db.flush()
        logger.info(
            "Booking %s cancelled by %s (was %s)",
            booking.booking_number,
            booking.cancelled_by,
            previous_status,
        )
        return booking

    async def list_expiring_bookings(
        self, db: AsyncSession, end_date: date
    ) -> list[tuple[Booking, str]]:
        """Completed bookings ending on `end_date`, paired with the owner's push token.

        Owners without a registered device are left out.
        """
        result = await db.execute(
            select(Booking, User.push_token)
            .join(User, Booking.user_id == User.id)
            .where(
                Booking.payment_status == "completed",
                Booking.end_date == end_date,
                User.push_token.is_not(None),
            )
            .order_by(Booking.booking_number)
        )
        return [(booking, push_token) for booking, push_token in result.all()]


booking_service = BookingService()
