"""Append-only enforcement for transaction records using SQLAlchemy events."""

import logging
from datetime import UTC, datetime

from sqlalchemy import event

from inhalestays.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

_registered = False


class ImmutabilityViolationError(ValidationError):
    """Raised when attempting to modify an append-only record."""

    def __init__(self, model_name: str, operation: str, record_id: str):
        self.model_name = model_name
        self.operation = operation
        self.record_id = record_id
        super().__init__(
            f"Immutability violation: Cannot {operation} {model_name} record {record_id}. "
            "Transaction records are append-only."
        )


def _log_immutability_violation(model_name: str, operation: str, record_id: str) -> None:
    logger.error(
        "IMMUTABILITY_VIOLATION: Attempted to %s %s record_id=%s at %s",
        operation,
        model_name,
        record_id,
        datetime.now(UTC).isoformat(),
    )


def register_immutability_enforcement() -> None:
    """Register listeners that reject UPDATE and DELETE of transactions.

    Must be called after models are imported but before session use.
    Safe to call more than once.
    """
    global _registered
    if _registered:
        return

    from inhalestays.models.transaction import Transaction

    @event.listens_for(Transaction, "before_update")
    def prevent_transaction_update(mapper, connection, target):
        _log_immutability_violation("Transaction", "UPDATE", str(target.id))
        raise ImmutabilityViolationError("Transaction", "UPDATE", str(target.id))

    @event.listens_for(Transaction, "before_delete")
    def prevent_transaction_delete(mapper, connection, target):
        _log_immutability_violation("Transaction", "DELETE", str(target.id))
        raise ImmutabilityViolationError("Transaction", "DELETE", str(target.id))

    _registered = True
    logger.info("Immutability enforcement registered for transaction records")
