"""Booking-related Pydantic schemas."""

from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

BookingType = Literal["cabin", "hostel"]
BookingDuration = Literal["daily", "weekly", "monthly"]
PaymentStatus = Literal["pending", "completed", "failed", "cancelled"]
UnitType = Literal["seat", "bed"]


class BookingCreate(BaseModel):
    """Schema for creating a booking.

    `end_date` and `total_price` are optional; when given they must agree with
    the server's calculation.
    """

    booking_type: BookingType
    unit_id: UUID
    start_date: date
    booking_duration: BookingDuration = "monthly"
    duration_count: int = Field(default=1, ge=1, le=366)
    end_date: date | None = None
    total_price: int | None = Field(default=None, ge=0)
    user_id: UUID | None = None  # admin booking on behalf of a student


class BookingCancelRequest(BaseModel):
    """Schema for cancelling a booking."""

    reason: str | None = Field(None, max_length=500)


class BookingResponse(BaseModel):
    """Schema for booking response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    booking_number: str
    user_id: UUID
    booking_type: str
    seat_id: UUID | None = None
    bed_id: UUID | None = None

    start_date: date
    end_date: date
    booking_duration: str
    duration_count: int

    unit_price: int
    total_price: int
    currency: str

    payment_status: str
    payment_method: str | None = None
    gateway_order_id: str | None = None
    gateway_payment_id: str | None = None
    hold_expires_at: datetime | None = None
    failure_reason: str | None = None

    cancelled_by: str | None = None
    cancellation_reason: str | None = None

    paid_at: datetime | None = None
    failed_at: datetime | None = None
    cancelled_at: datetime | None = None
    created_at: datetime | None = None


class BookingListResponse(BaseModel):
    """Schema for paginated booking list."""

    items: list[BookingResponse]
    total: int
    page: int
    page_size: int
    pages: int


class AvailabilityResponse(BaseModel):
    """Schema for an availability check."""

    available: bool
    unit_type: str
    unit_id: UUID
    start_date: date
    end_date: date
    reason: str | None = None
    total_price: int | None = None
