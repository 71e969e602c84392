"""Booking price and date-range calculation.

Unit prices are monthly rates in paise. Daily bookings cost a thirtieth of
the monthly rate per day and weekly bookings a quarter per week. Hot-selling
seats carry a percentage markup on the whole total.
"""

import calendar
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

from inhalestays.core.exceptions import ValidationError

DURATIONS = ("daily", "weekly", "monthly")

DAYS_PER_MONTH = Decimal("30")
WEEKS_PER_MONTH = Decimal("4")


def _assert_duration(duration: str, count: int) -> None:
    if duration not in DURATIONS:
        raise ValidationError(f"Unknown booking duration: {duration}")
    if count < 1:
        raise ValidationError("duration_count must be at least 1")


def add_months(start: date, months: int) -> date:
    """Add calendar months, clamping the day to the end of the target month."""
    years, month_index = divmod(start.month - 1 + months, 12)
    year = start.year + years
    month = month_index + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(start.day, last_day))


def compute_end_date(start: date, duration: str, count: int) -> date:
    """Exclusive end of a booking of `count` units of `duration` starting on `start`."""
    _assert_duration(duration, count)
    try:
        if duration == "daily":
            return start + timedelta(days=count)
        if duration == "weekly":
            return start + timedelta(weeks=count)
        return add_months(start, count)
    except (OverflowError, ValueError):
        raise ValidationError("Booking range exceeds supported dates")


def compute_total_price(
    monthly_price: int,
    duration: str,
    count: int,
    hot_selling: bool = False,
    markup_percent: int = 5,
) -> int:
    """Server-side total in paise, rounded half-up to a whole paisa.

    Args:
        monthly_price: Unit price per month in paise
        duration: daily, weekly or monthly
        count: Number of duration units
        hot_selling: Apply the hot-selling markup
        markup_percent: Markup applied to hot-selling units

    Returns:
        int: Total price in paise
    """
    _assert_duration(duration, count)
    price = Decimal(monthly_price)
    if duration == "daily":
        total = price * count / DAYS_PER_MONTH
    elif duration == "weekly":
        total = price * count / WEEKS_PER_MONTH
    else:
        total = price * count

    if hot_selling:
        total = total * (Decimal(100) + markup_percent) / Decimal(100)

    return int(total.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def assert_client_total(client_total: int | None, server_total: int, tolerance: int) -> None:
    """Reject a client-supplied total that diverges from the server's beyond tolerance."""
    if client_total is None:
        return
    if abs(client_total - server_total) > tolerance:
        raise ValidationError(
            f"Price mismatch: expected {server_total}, got {client_total}"
        )
