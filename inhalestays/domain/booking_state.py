"""Booking payment-status state machine."""

from inhalestays.core.exceptions import InvalidBookingStatus

BOOKING_TRANSITIONS = {
    "pending": {"completed", "failed", "cancelled"},
    "completed": {"cancelled"},
    "failed": set(),
    "cancelled": set(),
}

# Statuses that occupy a unit's date range
ACTIVE_STATUSES = ("pending", "completed")


def can_transition(current: str, target: str) -> bool:
    return target in BOOKING_TRANSITIONS.get(current, set())


def assert_booking_transition(current: str, target: str) -> None:
    if not can_transition(current, target):
        raise InvalidBookingStatus(
            f"Invalid booking transition: {current} → {target}"
        )
