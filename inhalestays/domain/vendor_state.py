"""Vendor approval state machine."""

from inhalestays.core.exceptions import ValidationError

VENDOR_TRANSITIONS = {
    "pending": {"approved", "rejected"},
    "approved": {"suspended"},
    "suspended": {"approved"},
    "rejected": {"pending"},
}


def assert_vendor_transition(current: str, target: str) -> None:
    allowed = VENDOR_TRANSITIONS.get(current, set())
    if target not in allowed:
        raise ValidationError(
            f"Invalid vendor transition: {current} → {target}"
        )
