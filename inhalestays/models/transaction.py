"""Transaction (receipt) model. Append-only; see core.immutability."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from inhalestays.database import Base


class Transaction(Base):
    """Money movement tied to a booking."""

    __tablename__ = "transactions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    booking_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("bookings.id"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False, index=True
    )
    booking_type: Mapped[str] = mapped_column(String(10), nullable=False)  # cabin, hostel
    transaction_type: Mapped[str] = mapped_column(
        String(20), nullable=False, index=True
    )  # booking, cancellation
    amount: Mapped[int] = mapped_column(Integer, nullable=False)  # paise, always positive
    currency: Mapped[str] = mapped_column(String(3), default="INR")
    payment_method: Mapped[str | None] = mapped_column(String(20))
    gateway_payment_id: Mapped[str | None] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), index=True
    )
