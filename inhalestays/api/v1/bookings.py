"""Booking endpoints."""

import math
from typing import Annotated, Literal
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from inhalestays.api.deps import get_current_active_user, get_db
from inhalestays.core.middleware import booking_limiter
from inhalestays.models.booking import Booking
from inhalestays.models.user import User
from inhalestays.schemas.booking import (
    BookingCancelRequest,
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    BookingType,
    PaymentStatus,
)
from inhalestays.services.booking_service import booking_service
from inhalestays.services.notification_service import notification_service

router = APIRouter()


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(booking_limiter)],
)
async def create_booking(
    request: BookingCreate,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Create a pending booking.

    The slot is held for the hold window; pay with /payments/create-order
    and /payments/verify before it lapses.
    """
    return await booking_service.create_booking(
        db,
        user=current_user,
        booking_type=request.booking_type,
        unit_id=request.unit_id,
        start_date=request.start_date,
        booking_duration=request.booking_duration,
        duration_count=request.duration_count,
        end_date=request.end_date,
        total_price=request.total_price,
        on_behalf_of=request.user_id,
    )


@router.get("", response_model=BookingListResponse)
async def list_bookings(
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    scope: Literal["mine", "vendor", "all"] = "mine",
    payment_status: PaymentStatus | None = None,
    booking_type: BookingType | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> BookingListResponse:
    """List bookings: own, for the caller's units (vendor) or all (admin)."""
    bookings, total = await booking_service.list_bookings(
        db,
        current_user,
        scope=scope,
        payment_status=payment_status,
        booking_type=booking_type,
        page=page,
        page_size=page_size,
    )
    return BookingListResponse(
        items=[BookingResponse.model_validate(b) for b in bookings],
        total=total,
        page=page,
        page_size=page_size,
        pages=math.ceil(total / page_size) if total else 0,
    )


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: UUID,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Get booking details."""
    return await booking_service.get_booking(db, booking_id, current_user)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: UUID,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    background_tasks: BackgroundTasks,
    request: BookingCancelRequest | None = None,
) -> Booking:
    """Cancel a pending or completed booking."""
    booking = await booking_service.cancel_booking(
        db,
        booking_id,
        current_user,
        reason=request.reason if request else None,
    )

    owner = current_user if booking.user_id == current_user.id else await db.get(User, booking.user_id)
    if owner and owner.push_token:
        background_tasks.add_task(
            notification_service.notify_booking_cancelled, owner.push_token, booking
        )
    return booking
