"""Booking and vendor state machines."""

import pytest

from inhalestays.core.exceptions import InvalidBookingStatus, ValidationError
from inhalestays.domain.booking_state import (
    ACTIVE_STATUSES,
    BOOKING_TRANSITIONS,
    assert_booking_transition,
    can_transition,
)
from inhalestays.domain.vendor_state import VENDOR_TRANSITIONS, assert_vendor_transition

STATUSES = ("pending", "completed", "failed", "cancelled")


@pytest.mark.parametrize(
    "current,target",
    [
        ("pending", "completed"),
        ("pending", "failed"),
        ("pending", "cancelled"),
        ("completed", "cancelled"),
    ],
)
def test_allowed_transitions(current, target):
    assert can_transition(current, target)
    assert_booking_transition(current, target)


@pytest.mark.parametrize("terminal", ["failed", "cancelled"])
def test_terminal_statuses_have_no_exit(terminal):
    for target in STATUSES:
        assert not can_transition(terminal, target)
        with pytest.raises(InvalidBookingStatus):
            assert_booking_transition(terminal, target)


def test_completed_cannot_go_back_to_pending_or_fail():
    for target in ("pending", "failed", "completed"):
        with pytest.raises(InvalidBookingStatus) as exc_info:
            assert_booking_transition("completed", target)
        assert exc_info.value.status_code == 409
        assert exc_info.value.to_dict()["code"] == "invalid_status"


def test_transition_table_is_closed_over_known_statuses():
    assert set(BOOKING_TRANSITIONS) == set(STATUSES)
    for targets in BOOKING_TRANSITIONS.values():
        assert targets <= set(STATUSES)


def test_active_statuses_occupy_units():
    assert set(ACTIVE_STATUSES) == {"pending", "completed"}


def test_unknown_status_is_rejected():
    assert not can_transition("refunded", "cancelled")


def test_vendor_transitions():
    assert_vendor_transition("pending", "approved")
    assert_vendor_transition("approved", "suspended")
    assert_vendor_transition("suspended", "approved")
    assert_vendor_transition("rejected", "pending")
    assert "rejected" not in VENDOR_TRANSITIONS["approved"]

    with pytest.raises(ValidationError):
        assert_vendor_transition("rejected", "approved")
    with pytest.raises(ValidationError):
        assert_vendor_transition("pending", "pending")
