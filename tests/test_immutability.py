"""Transactions are append-only."""

from datetime import date

import pytest
from sqlalchemy import select

from inhalestays.core.immutability import ImmutabilityViolationError
from inhalestays.gateways.razorpay import compute_signature
from inhalestays.models.transaction import Transaction
from inhalestays.services.booking_service import booking_service
from inhalestays.services.payment_service import payment_service
from tests.conftest import KEY_SECRET


async def _transaction(db, seed) -> Transaction:
    booking = await booking_service.create_booking(
        db, seed.student, "cabin", seed.seat.id, date(2025, 1, 1), "daily", 30
    )
    booking.gateway_order_id = "order_IM1"
    await db.commit()
    await payment_service.verify_payment(
        db,
        seed.student,
        booking.id,
        "order_IM1",
        "pay_IM1",
        compute_signature(KEY_SECRET, "order_IM1|pay_IM1"),
    )
    await db.commit()
    return (await db.execute(select(Transaction))).scalar_one()


async def test_transaction_cannot_be_updated(db, seed):
    transaction = await _transaction(db, seed)
    transaction.amount = 1

    with pytest.raises(ImmutabilityViolationError):
        await db.commit()


async def test_transaction_cannot_be_deleted(db, seed):
    transaction = await _transaction(db, seed)
    await db.delete(transaction)

    with pytest.raises(ImmutabilityViolationError):
        await db.commit()
