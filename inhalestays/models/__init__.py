"""Database models."""

from inhalestays.models.booking import Booking
from inhalestays.models.inventory import Cabin, Hostel, HostelBed, HostelRoom, Seat
from inhalestays.models.location import Area, City, State
from inhalestays.models.transaction import Transaction
from inhalestays.models.user import User
from inhalestays.models.vendor import Vendor

__all__ = [
    # Location
    "State",
    "City",
    "Area",
    # User
    "User",
    "Vendor",
    # Inventory
    "Cabin",
    "Seat",
    "Hostel",
    "HostelRoom",
    "HostelBed",
    # Booking
    "Booking",
    "Transaction",
]
