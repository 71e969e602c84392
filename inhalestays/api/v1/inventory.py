"""Inventory endpoints: cabins, seats, hostels, rooms, beds and availability."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inhalestays.api.deps import get_current_vendor_or_admin, get_db
from inhalestays.config import settings
from inhalestays.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from inhalestays.domain.pricing import compute_end_date, compute_total_price
from inhalestays.models.inventory import Cabin, Hostel, HostelBed, HostelRoom, Seat
from inhalestays.models.location import Area
from inhalestays.models.user import User
from inhalestays.models.vendor import Vendor
from inhalestays.schemas.booking import AvailabilityResponse, BookingDuration, UnitType
from inhalestays.schemas.inventory import (
    BedCreate,
    BedResponse,
    HostelCreate,
    PropertyCreate,
    PropertyResponse,
    RoomCreate,
    RoomResponse,
    SeatCreate,
    SeatResponse,
    UnitStatusResponse,
)
from inhalestays.services.availability_service import availability_service

router = APIRouter()


async def _resolve_vendor(db: AsyncSession, user: User, vendor_id: UUID | None) -> Vendor:
    """Vendor a new property belongs to: the caller's own, or any for admins."""
    if user.role == "admin":
        if vendor_id is None:
            raise ValidationError("vendor_id is required when an admin creates a property")
        vendor = await db.get(Vendor, vendor_id)
        if not vendor:
            raise NotFoundError("Vendor", str(vendor_id))
        return vendor

    result = await db.execute(select(Vendor).where(Vendor.user_id == user.id))
    vendor = result.scalar_one_or_none()
    if not vendor:
        raise AuthorizationError("Vendor registration required")
    if vendor.status != "approved":
        raise AuthorizationError(f"Vendor account is {vendor.status}")
    return vendor


async def _assert_owns(db: AsyncSession, user: User, vendor_id: UUID) -> None:
    if user.role == "admin":
        return
    vendor = await db.get(Vendor, vendor_id)
    if not vendor or vendor.user_id != user.id:
        raise AuthorizationError("You don't have permission to manage this property")


async def _get_cabin(db: AsyncSession, cabin_id: UUID) -> Cabin:
    cabin = await db.get(Cabin, cabin_id)
    if not cabin:
        raise NotFoundError("Cabin", str(cabin_id))
    return cabin


async def _get_room(db: AsyncSession, room_id: UUID) -> tuple[HostelRoom, Hostel]:
    room = await db.get(HostelRoom, room_id)
    if not room:
        raise NotFoundError("HostelRoom", str(room_id))
    hostel = await db.get(Hostel, room.hostel_id)
    return room, hostel


async def _check_area(db: AsyncSession, area_id: UUID | None) -> None:
    if area_id is not None and not await db.get(Area, area_id):
        raise NotFoundError("Area", str(area_id))


# ============ CABINS & SEATS ============


@router.post("/cabins", response_model=PropertyResponse, status_code=status.HTTP_201_CREATED)
async def create_cabin(
    cabin_data: PropertyCreate,
    current_user: Annotated[User, Depends(get_current_vendor_or_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Cabin:
    """Create a reading room."""
    vendor = await _resolve_vendor(db, current_user, cabin_data.vendor_id)
    await _check_area(db, cabin_data.area_id)

    cabin = Cabin(
        vendor_id=vendor.id,
        **cabin_data.model_dump(exclude={"vendor_id"}),
    )
    db.add(cabin)
    await db.flush()
    return cabin


@router.get("/cabins/{cabin_id}/seats", response_model=list[SeatResponse])
async def list_seats(
    cabin_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    include_inactive: bool = False,
) -> list[Seat]:
    """List seats in a cabin."""
    await _get_cabin(db, cabin_id)
    query = select(Seat).where(Seat.cabin_id == cabin_id).order_by(Seat.number)
    if not include_inactive:
        query = query.where(Seat.is_active.is_(True))
    result = await db.execute(query)
    return list(result.scalars().all())


@router.post(
    "/cabins/{cabin_id}/seats",
    response_model=SeatResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_seat(
    cabin_id: UUID,
    seat_data: SeatCreate,
    current_user: Annotated[User, Depends(get_current_vendor_or_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Seat:
    """Add a seat to a cabin."""
    cabin = await _get_cabin(db, cabin_id)
    await _assert_owns(db, current_user, cabin.vendor_id)

    existing = await db.execute(
        select(Seat.id).where(Seat.cabin_id == cabin_id, Seat.number == seat_data.number)
    )
    if existing.scalar_one_or_none():
        raise ValidationError(f"Seat {seat_data.number} already exists in this cabin")

    seat = Seat(cabin_id=cabin_id, **seat_data.model_dump())
    db.add(seat)
    await db.flush()
    return seat


# ============ HOSTELS, ROOMS & BEDS ============


@router.post("/hostels", response_model=PropertyResponse, status_code=status.HTTP_201_CREATED)
async def create_hostel(
    hostel_data: HostelCreate,
    current_user: Annotated[User, Depends(get_current_vendor_or_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Hostel:
    """Create a hostel."""
    vendor = await _resolve_vendor(db, current_user, hostel_data.vendor_id)
    await _check_area(db, hostel_data.area_id)

    hostel = Hostel(
        vendor_id=vendor.id,
        **hostel_data.model_dump(exclude={"vendor_id"}),
    )
    db.add(hostel)
    await db.flush()
    return hostel


@router.post(
    "/hostels/{hostel_id}/rooms",
    response_model=RoomResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_room(
    hostel_id: UUID,
    room_data: RoomCreate,
    current_user: Annotated[User, Depends(get_current_vendor_or_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> HostelRoom:
    """Add a room to a hostel."""
    hostel = await db.get(Hostel, hostel_id)
    if not hostel:
        raise NotFoundError("Hostel", str(hostel_id))
    await _assert_owns(db, current_user, hostel.vendor_id)

    room = HostelRoom(hostel_id=hostel_id, **room_data.model_dump())
    db.add(room)
    await db.flush()
    return room


@router.get("/rooms/{room_id}/beds", response_model=list[BedResponse])
async def list_beds(
    room_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    include_inactive: bool = False,
) -> list[HostelBed]:
    """List beds in a hostel room."""
    await _get_room(db, room_id)
    query = select(HostelBed).where(HostelBed.room_id == room_id).order_by(HostelBed.number)
    if not include_inactive:
        query = query.where(HostelBed.is_active.is_(True))
    result = await db.execute(query)
    return list(result.scalars().all())


@router.post(
    "/rooms/{room_id}/beds",
    response_model=BedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_bed(
    room_id: UUID,
    bed_data: BedCreate,
    current_user: Annotated[User, Depends(get_current_vendor_or_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> HostelBed:
    """Add a bed to a hostel room."""
    room, hostel = await _get_room(db, room_id)
    await _assert_owns(db, current_user, hostel.vendor_id)

    existing = await db.execute(
        select(HostelBed.id).where(
            HostelBed.room_id == room_id, HostelBed.number == bed_data.number
        )
    )
    if existing.scalar_one_or_none():
        raise ValidationError(f"Bed {bed_data.number} already exists in this room")

    bed = HostelBed(room_id=room_id, **bed_data.model_dump())
    db.add(bed)
    await db.flush()
    return bed


# ============ UNITS ============


@router.post("/{unit_type}/{unit_id}/deactivate", response_model=UnitStatusResponse)
async def deactivate_unit(
    unit_type: UnitType,
    unit_id: UUID,
    current_user: Annotated[User, Depends(get_current_vendor_or_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UnitStatusResponse:
    """Soft-deactivate a seat or bed. Units are never deleted."""
    bookable = await availability_service.get_bookable_unit(db, unit_type, unit_id)
    await _assert_owns(db, current_user, bookable.parent.vendor_id)

    bookable.unit.is_active = False
    await db.flush()
    return UnitStatusResponse(unit_type=unit_type, unit_id=unit_id, is_active=False)


@router.get("/{unit_type}/{unit_id}/availability", response_model=AvailabilityResponse)
async def check_availability(
    unit_type: UnitType,
    unit_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    start_date: date,
    end_date: date | None = None,
    booking_duration: BookingDuration | None = None,
    duration_count: int = Query(1, ge=1, le=366),
) -> AvailabilityResponse:
    """Check whether a unit is free for a date range.

    Pass either end_date (exclusive) or booking_duration with duration_count.
    With a duration, the response also carries the price.
    """
    if end_date is None and booking_duration is None:
        raise ValidationError("Provide end_date or booking_duration")
    if booking_duration is not None:
        derived_end = compute_end_date(start_date, booking_duration, duration_count)
        if end_date is not None and end_date != derived_end:
            raise ValidationError("end_date does not match booking_duration and duration_count")
        end_date = derived_end

    result = await availability_service.check_availability(
        db, unit_type, unit_id, start_date, end_date
    )

    total_price = None
    if booking_duration is not None:
        bookable = await availability_service.get_bookable_unit(db, unit_type, unit_id)
        total_price = compute_total_price(
            bookable.unit.price,
            booking_duration,
            duration_count,
            hot_selling=bookable.is_hot_selling,
            markup_percent=settings.hot_selling_markup_percent,
        )

    return AvailabilityResponse(
        available=result.available,
        unit_type=unit_type,
        unit_id=unit_id,
        start_date=start_date,
        end_date=end_date,
        reason=result.reason,
        total_price=total_price,
    )
