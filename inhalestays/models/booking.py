"""Booking model."""

from __future__ import annotations

import uuid
from datetime import date, datetime

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from inhalestays.database import Base


class Booking(Base):
    """Reservation of one seat or bed over [start_date, end_date).

    Overlapping pending/completed bookings for the same unit are rejected by
    the booking service under a row lock, and in PostgreSQL by the exclusion
    constraints added in the initial migration.
    """

    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint(
            "(seat_id IS NOT NULL AND bed_id IS NULL) OR (seat_id IS NULL AND bed_id IS NOT NULL)",
            name="ck_booking_single_unit",
        ),
        CheckConstraint("end_date > start_date", name="ck_booking_date_range"),
        CheckConstraint("duration_count >= 1", name="ck_booking_duration_count"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    booking_number: Mapped[str] = mapped_column(
        String(20), unique=True, nullable=False, index=True
    )  # CABIN-XXXXXX / HOSTEL-XXXXXX
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )
    booking_type: Mapped[str] = mapped_column(String(10), nullable=False)  # cabin, hostel
    seat_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("seats.id"), index=True
    )
    bed_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("hostel_beds.id"), index=True
    )

    # Dates
    start_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    end_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    booking_duration: Mapped[str] = mapped_column(
        String(10), nullable=False
    )  # daily, weekly, monthly
    duration_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Pricing (in paise)
    unit_price: Mapped[int] = mapped_column(Integer, nullable=False)  # monthly rate at booking time
    total_price: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="INR")

    # Payment
    payment_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending", index=True
    )  # pending, completed, failed, cancelled
    payment_method: Mapped[str | None] = mapped_column(String(20))
    gateway_order_id: Mapped[str | None] = mapped_column(String(100), index=True)
    gateway_payment_id: Mapped[str | None] = mapped_column(String(100))
    gateway_signature: Mapped[str | None] = mapped_column(String(200))
    hold_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), index=True
    )
    failure_reason: Mapped[str | None] = mapped_column(
        String(50)
    )  # hold_expired, gateway_failed, late_payment_conflict

    # Cancellation
    cancelled_by: Mapped[str | None] = mapped_column(String(10))  # user, admin
    cancellation_reason: Mapped[str | None] = mapped_column(Text)

    # Timestamps
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    failed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    @property
    def unit_id(self) -> uuid.UUID:
        return self.seat_id if self.seat_id is not None else self.bed_id

    @property
    def unit_type(self) -> str:
        return "seat" if self.seat_id is not None else "bed"
