"""Occupancy, revenue and payout reporting (read-only queries)."""

from datetime import UTC, date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from inhalestays.config import settings
from inhalestays.core.exceptions import ValidationError
from inhalestays.models.booking import Booking
from inhalestays.models.inventory import Cabin, Hostel, HostelBed, HostelRoom, Seat
from inhalestays.models.transaction import Transaction
from inhalestays.models.vendor import Vendor
from inhalestays.services.availability_service import utcnow
from inhalestays.services.booking_service import vendor_bed_ids, vendor_seat_ids
from inhalestays.services.commission_service import commission_service


def _period_bounds(period_start: date, period_end: date) -> tuple[datetime, datetime]:
    """Inclusive date period as a half-open UTC datetime range."""
    if period_end < period_start:
        raise ValidationError("period_end must not be before period_start")
    start = datetime.combine(period_start, time.min, tzinfo=UTC)
    try:
        end = datetime.combine(period_end + timedelta(days=1), time.min, tzinfo=UTC)
    except OverflowError:
        raise ValidationError("period_end exceeds supported dates")
    return start, end


def _rate(part: int, whole: int) -> Decimal:
    if not whole:
        return Decimal("0.00")
    return (Decimal(part) * 100 / Decimal(whole)).quantize(
        Decimal("0.01"), rounding=ROUND_HALF_UP
    )


class ReportingService:
    """Read-only booking reports."""

    async def get_occupancy(
        self,
        db: AsyncSession,
        on_date: date,
        now: datetime | None = None,
        vendor_user_id: UUID | None = None,
    ) -> dict:
        """Per-property occupancy on a date.

        Occupied units have a completed booking covering the date; held units
        have a pending booking with a live hold covering it.
        """
        now = now or utcnow()
        properties = []

        covering = (Booking.start_date <= on_date, Booking.end_date > on_date)
        live_hold = (Booking.payment_status == "pending", Booking.hold_expires_at > now)

        # Cabins and seats
        cabin_query = select(Cabin).where(Cabin.is_active.is_(True)).order_by(Cabin.name)
        if vendor_user_id:
            cabin_query = cabin_query.join(Vendor, Cabin.vendor_id == Vendor.id).where(
                Vendor.user_id == vendor_user_id
            )
        cabins = (await db.execute(cabin_query)).scalars().all()

        seat_totals = dict(
            (await db.execute(
                select(Seat.cabin_id, func.count(Seat.id))
                .where(Seat.is_active.is_(True))
                .group_by(Seat.cabin_id)
            )).all()
        )
        seat_occupied = dict(
            (await db.execute(
                select(Seat.cabin_id, func.count(func.distinct(Booking.seat_id)))
                .join(Seat, Booking.seat_id == Seat.id)
                .where(Booking.payment_status == "completed", *covering)
                .group_by(Seat.cabin_id)
            )).all()
        )
        seat_held = dict(
            (await db.execute(
                select(Seat.cabin_id, func.count(func.distinct(Booking.seat_id)))
                .join(Seat, Booking.seat_id == Seat.id)
                .where(*live_hold, *covering)
                .group_by(Seat.cabin_id)
            )).all()
        )
        for cabin in cabins:
            total = seat_totals.get(cabin.id, 0)
            occupied = seat_occupied.get(cabin.id, 0)
            properties.append({
                "property_type": "cabin",
                "property_id": cabin.id,
                "name": cabin.name,
                "total_units": total,
                "occupied_units": occupied,
                "held_units": seat_held.get(cabin.id, 0),
                "occupancy_rate": _rate(occupied, total),
            })

        # Hostels and beds
        hostel_query = select(Hostel).where(Hostel.is_active.is_(True)).order_by(Hostel.name)
        if vendor_user_id:
            hostel_query = hostel_query.join(Vendor, Hostel.vendor_id == Vendor.id).where(
                Vendor.user_id == vendor_user_id
            )
        hostels = (await db.execute(hostel_query)).scalars().all()

        bed_totals = dict(
            (await db.execute(
                select(HostelRoom.hostel_id, func.count(HostelBed.id))
                .join(HostelRoom, HostelBed.room_id == HostelRoom.id)
                .where(HostelBed.is_active.is_(True), HostelRoom.is_active.is_(True))
                .group_by(HostelRoom.hostel_id)
            )).all()
        )
        bed_occupied = dict(
            (await db.execute(
                select(HostelRoom.hostel_id, func.count(func.distinct(Booking.bed_id)))
                .join(HostelBed, Booking.bed_id == HostelBed.id)
                .join(HostelRoom, HostelBed.room_id == HostelRoom.id)
                .where(Booking.payment_status == "completed", *covering)
                .group_by(HostelRoom.hostel_id)
            )).all()
        )
        bed_held = dict(
            (await db.execute(
                select(HostelRoom.hostel_id, func.count(func.distinct(Booking.bed_id)))
                .join(HostelBed, Booking.bed_id == HostelBed.id)
                .join(HostelRoom, HostelBed.room_id == HostelRoom.id)
                .where(*live_hold, *covering)
                .group_by(HostelRoom.hostel_id)
            )).all()
        )
        for hostel in hostels:
            total = bed_totals.get(hostel.id, 0)
            occupied = bed_occupied.get(hostel.id, 0)
            properties.append({
                "property_type": "hostel",
                "property_id": hostel.id,
                "name": hostel.name,
                "total_units": total,
                "occupied_units": occupied,
                "held_units": bed_held.get(hostel.id, 0),
                "occupancy_rate": _rate(occupied, total),
            })

        total_units = sum(p["total_units"] for p in properties)
        occupied_units = sum(p["occupied_units"] for p in properties)
        return {
            "on_date": on_date,
            "properties": properties,
            "total_units": total_units,
            "occupied_units": occupied_units,
            "held_units": sum(p["held_units"] for p in properties),
            "occupancy_rate": _rate(occupied_units, total_units),
        }

    async def get_revenue(
        self,
        db: AsyncSession,
        period_start: date,
        period_end: date,
        vendor_user_id: UUID | None = None,
    ) -> dict:
        """Booking receipts minus cancellation refunds, grouped by booking type."""
        start, end = _period_bounds(period_start, period_end)

        query = (
            select(
                Transaction.booking_type,
                Transaction.transaction_type,
                func.coalesce(func.sum(Transaction.amount), 0),
                func.count(),
            )
            .where(Transaction.created_at >= start, Transaction.created_at < end)
            .group_by(Transaction.booking_type, Transaction.transaction_type)
        )
        if vendor_user_id:
            query = query.join(Booking, Transaction.booking_id == Booking.id).where(
                or_(
                    Booking.seat_id.in_(vendor_seat_ids(vendor_user_id)),
                    Booking.bed_id.in_(vendor_bed_ids(vendor_user_id)),
                )
            )
        rows = (await db.execute(query)).all()

        by_type: dict[str, dict] = {
            booking_type: {
                "booking_type": booking_type,
                "gross_amount": 0,
                "refund_amount": 0,
                "net_amount": 0,
                "booking_count": 0,
                "cancellation_count": 0,
            }
            for booking_type in ("cabin", "hostel")
        }
        for booking_type, transaction_type, amount, count in rows:
            entry = by_type[booking_type]
            if transaction_type == "booking":
                entry["gross_amount"] += int(amount)
                entry["booking_count"] += count
            else:
                entry["refund_amount"] += int(amount)
                entry["cancellation_count"] += count

        for entry in by_type.values():
            entry["net_amount"] = entry["gross_amount"] - entry["refund_amount"]

        breakdown = list(by_type.values())
        return {
            "period_start": period_start,
            "period_end": period_end,
            "currency": settings.default_currency,
            "by_type": breakdown,
            "gross_amount": sum(e["gross_amount"] for e in breakdown),
            "refund_amount": sum(e["refund_amount"] for e in breakdown),
            "net_amount": sum(e["net_amount"] for e in breakdown),
        }

    async def get_vendor_payouts(
        self,
        db: AsyncSession,
        period_start: date,
        period_end: date,
        vendor_user_id: UUID | None = None,
    ) -> dict:
        """Per-vendor gross booking revenue, commission and net payout."""
        start, end = _period_bounds(period_start, period_end)
        in_period = (
            Transaction.transaction_type == "booking",
            Transaction.created_at >= start,
            Transaction.created_at < end,
        )

        seat_rows = (await db.execute(
            select(Cabin.vendor_id, func.coalesce(func.sum(Transaction.amount), 0), func.count())
            .select_from(Transaction)
            .join(Booking, Transaction.booking_id == Booking.id)
            .join(Seat, Booking.seat_id == Seat.id)
            .join(Cabin, Seat.cabin_id == Cabin.id)
            .where(*in_period)
            .group_by(Cabin.vendor_id)
        )).all()
        bed_rows = (await db.execute(
            select(Hostel.vendor_id, func.coalesce(func.sum(Transaction.amount), 0), func.count())
            .select_from(Transaction)
            .join(Booking, Transaction.booking_id == Booking.id)
            .join(HostelBed, Booking.bed_id == HostelBed.id)
            .join(HostelRoom, HostelBed.room_id == HostelRoom.id)
            .join(Hostel, HostelRoom.hostel_id == Hostel.id)
            .where(*in_period)
            .group_by(Hostel.vendor_id)
        )).all()

        totals: dict[UUID, list[int]] = {}
        for vendor_id, amount, count in list(seat_rows) + list(bed_rows):
            gross_count = totals.setdefault(vendor_id, [0, 0])
            gross_count[0] += int(amount)
            gross_count[1] += count

        vendor_query = select(Vendor).order_by(Vendor.business_name)
        if vendor_user_id:
            vendor_query = vendor_query.where(Vendor.user_id == vendor_user_id)
        vendors = (await db.execute(vendor_query)).scalars().all()

        payouts = []
        for vendor in vendors:
            gross, count = totals.get(vendor.id, (0, 0))
            if not gross and vendor_user_id is None:
                continue
            amounts = commission_service.calculate_payout(
                vendor.commission_type, vendor.commission_value, gross, count
            )
            payouts.append({
                "vendor_id": vendor.id,
                "business_name": vendor.business_name,
                "commission_type": vendor.commission_type,
                "commission_value": vendor.commission_value,
                "payout_cycle": vendor.payout_cycle,
                "booking_count": count,
                **amounts,
            })

        return {
            "period_start": period_start,
            "period_end": period_end,
            "currency": settings.default_currency,
            "payouts": payouts,
            "total_gross": sum(p["gross_amount"] for p in payouts),
            "total_commission": sum(p["commission_amount"] for p in payouts),
            "total_net_payout": sum(p["net_payout"] for p in payouts),
        }


reporting_service = ReportingService()
