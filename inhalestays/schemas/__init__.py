"""Pydantic schemas for API validation."""

from inhalestays.schemas.booking import (
    AvailabilityResponse,
    BookingCancelRequest,
    BookingCreate,
    BookingListResponse,
    BookingResponse,
)
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
)
from inhalestays.schemas.location import LocationCreate, LocationResponse
from inhalestays.schemas.payment import (
    CreateOrderRequest,
    CreateOrderResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
    WebhookAck,
)
from inhalestays.schemas.user import PushTokenUpdate, UserResponse, UserUpdate
from inhalestays.schemas.vendor import VendorCreate, VendorResponse, VendorStatusUpdate

__all__ = [
    # User
    "UserUpdate",
    "UserResponse",
    "PushTokenUpdate",
    # Vendor
    "VendorCreate",
    "VendorResponse",
    "VendorStatusUpdate",
    # Location
    "LocationCreate",
    "LocationResponse",
    # Inventory
    "PropertyCreate",
    "HostelCreate",
    "PropertyResponse",
    "SeatCreate",
    "SeatResponse",
    "RoomCreate",
    "RoomResponse",
    "BedCreate",
    "BedResponse",
    # Booking
    "BookingCreate",
    "BookingCancelRequest",
    "BookingResponse",
    "BookingListResponse",
    "AvailabilityResponse",
    # Payment
    "CreateOrderRequest",
    "CreateOrderResponse",
    "VerifyPaymentRequest",
    "VerifyPaymentResponse",
    "WebhookAck",
]
