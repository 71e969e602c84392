"""Inventory Pydantic schemas."""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class PropertyCreate(BaseModel):
    """Schema for creating a cabin or hostel."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    address: str | None = Field(None, max_length=1000)
    area_id: UUID | None = None
    vendor_id: UUID | None = None  # admins create on behalf of a vendor
    is_booking_enabled: bool = True


class HostelCreate(PropertyCreate):
    """Schema for creating a hostel."""

    gender: str | None = Field(None, pattern="^(male|female|co-ed)$")


class PropertyResponse(BaseModel):
    """Schema for a cabin or hostel."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    vendor_id: UUID
    area_id: UUID | None = None
    name: str
    description: str | None = None
    address: str | None = None
    is_booking_enabled: bool
    is_active: bool


class SeatCreate(BaseModel):
    """Schema for adding a seat to a cabin."""

    number: int = Field(..., ge=1)
    price: int = Field(..., gt=0)  # monthly, in paise
    is_hot_selling: bool = False


class SeatResponse(BaseModel):
    """Schema for a seat."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    cabin_id: UUID
    number: int
    price: int
    is_hot_selling: bool
    is_available: bool
    unavailable_until: date | None = None
    is_active: bool


class RoomCreate(BaseModel):
    """Schema for adding a room to a hostel."""

    room_number: str = Field(..., min_length=1, max_length=20)
    floor: int | None = None


class RoomResponse(BaseModel):
    """Schema for a hostel room."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    hostel_id: UUID
    room_number: str
    floor: int | None = None
    is_active: bool


class BedCreate(BaseModel):
    """Schema for adding a bed to a room."""

    number: int = Field(..., ge=1)
    price: int = Field(..., gt=0)  # monthly, in paise
    sharing_type: str | None = Field(None, pattern="^(single|double|triple|dorm)$")


class BedResponse(BaseModel):
    """Schema for a hostel bed."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    room_id: UUID
    number: int
    price: int
    sharing_type: str | None = None
    is_available: bool
    unavailable_until: date | None = None
    is_active: bool


class UnitStatusResponse(BaseModel):
    """Schema for a unit activation change."""

    unit_type: str
    unit_id: UUID
    is_active: bool
