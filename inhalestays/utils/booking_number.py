"""Booking number generation."""

import random
import string

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

BOOKING_NUMBER_PREFIXES = {
    "cabin": "CABIN",
    "hostel": "HOSTEL",
}


async def generate_booking_number(db: AsyncSession, booking_type: str) -> str:
    """Generate a unique booking number like CABIN-A3B7K9 or HOSTEL-K9M2X4.

    Args:
        db: Database session for uniqueness check
        booking_type: cabin or hostel

    Returns:
        str: Unique booking number
    """
    from inhalestays.models.booking import Booking

    prefix = BOOKING_NUMBER_PREFIXES[booking_type]
    chars = string.ascii_uppercase + string.digits

    while True:
        random_part = "".join(random.choices(chars, k=6))
        booking_number = f"{prefix}-{random_part}"

        result = await db.execute(
            select(Booking.id).where(Booking.booking_number == booking_number)
        )
        if not result.scalar_one_or_none():
            return booking_number
