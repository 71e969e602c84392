"""Payment order creation, verification and gateway webhooks.

`complete_booking` is the only code that moves a booking to completed. It is
reached from checkout verification and from the signed webhook, both of which
check a gateway signature first.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from inhalestays.core.exceptions import (
    AuthorizationError,
    ExternalServiceError,
    InvalidBookingStatus,
    NotFoundError,
    SignatureMismatch,
    SlotNotAvailable,
    ValidationError,
)
from inhalestays.core.logging import SIGNATURE_LOGGER
from inhalestays.domain.booking_state import assert_booking_transition
from inhalestays.gateways.base import GatewayType
from inhalestays.models.booking import Booking
from inhalestays.models.transaction import Transaction
from inhalestays.models.user import User
from inhalestays.services.availability_service import (
    availability_service,
    hold_is_active,
    mark_booking_failed,
    utcnow,
)
from inhalestays.services.gateway_service import gateway_service

logger = logging.getLogger(__name__)
signature_logger = logging.getLogger(SIGNATURE_LOGGER)

COMPLETION_EVENTS = ("payment.captured", "order.paid")
FAILURE_EVENTS = ("payment.failed",)


def _extract_ids(event: dict) -> tuple[str | None, str | None]:
    """(order_id, payment_id) from a webhook body."""
    payload = event.get("payload") or {}
    payment = (payload.get("payment") or {}).get("entity") or {}
    order = (payload.get("order") or {}).get("entity") or {}
    return payment.get("order_id") or order.get("id"), payment.get("id")


@dataclass
class CompletionResult:
    """Outcome of applying a verified payment to a booking."""

    booking: Booking
    newly_completed: bool


class PaymentService:
    """Payment flows against the configured gateway."""

    def _assert_gateway_configured(self) -> None:
        if not gateway_service.is_configured():
            raise ExternalServiceError("razorpay", "gateway credentials not configured")

    async def create_order(
        self,
        db: AsyncSession,
        user: User,
        booking_id: UUID,
        booking_type: str,
        amount: int,
        currency: str,
        now: datetime | None = None,
    ) -> dict:
        """Create a gateway order for a pending booking.

        Returns:
            dict: orderId, amount, currency and the public keyId
        """
        now = now or utcnow()
        self._assert_gateway_configured()

        result = await db.execute(
            select(Booking).where(Booking.id == booking_id).with_for_update()
        )
        booking = result.scalar_one_or_none()
        if not booking:
            raise NotFoundError("Booking", str(booking_id))
        if user.role != "admin" and booking.user_id != user.id:
            raise AuthorizationError("You don't have permission to pay for this booking")

        if booking.booking_type != booking_type:
            raise ValidationError(
                f"bookingType {booking_type} does not match booking ({booking.booking_type})"
            )
        if amount != booking.total_price:
            raise ValidationError(
                f"Amount mismatch: expected {booking.total_price}, got {amount}"
            )
        if currency.upper() != booking.currency:
            raise ValidationError(
                f"Currency mismatch: expected {booking.currency}, got {currency}"
            )

        if booking.payment_status != "pending":
            raise InvalidBookingStatus(
                f"Cannot create an order for a {booking.payment_status} booking"
            )
        if not hold_is_active(booking, now):
            mark_booking_failed(booking, "hold_expired", now)
            await db.commit()
            raise InvalidBookingStatus("Booking hold has expired; please book again")

        if booking.gateway_order_id:
            # Amount and currency are fixed per booking, so the open order still applies
            logger.info(
                "Reusing order %s for booking %s",
                booking.gateway_order_id,
                booking.booking_number,
            )
            return {
                "orderId": booking.gateway_order_id,
                "amount": booking.total_price,
                "currency": booking.currency,
                "keyId": gateway_service.key_id(),
            }

        order = await gateway_service.create_order(
            amount=booking.total_price,
            currency=booking.currency,
            receipt=f"booking_{booking.booking_number}",
            notes={
                "bookingId": str(booking.id),
                "bookingType": booking.booking_type,
                "userId": str(booking.user_id),
            },
        )
        if not order.success:
            raise ExternalServiceError("razorpay", order.error_message)

        booking.gateway_order_id = order.order_id
        await db.flush()
        logger.info(
            "Order %s created for booking %s amount=%s",
            order.order_id,
            booking.booking_number,
            booking.total_price,
        )
        return {
            "orderId": order.order_id,
            "amount": order.amount,
            "currency": order.currency,
            "keyId": gateway_service.key_id(),
        }

    async def complete_booking(
        self,
        db: AsyncSession,
        booking: Booking,
        payment_id: str,
        signature: str | None,
        now: datetime,
    ) -> CompletionResult:
        """Apply a signature-verified payment to a locked booking.

        Already-completed bookings are a successful no-op. A pending booking
        whose hold lapsed is completed only if its range is still free;
        otherwise it is failed and SlotNotAvailable is raised.
        """
        if booking.payment_status == "completed":
            return CompletionResult(booking=booking, newly_completed=False)
        if booking.payment_status != "pending":
            raise InvalidBookingStatus(
                f"Booking is {booking.payment_status} and cannot be paid"
            )

        if not hold_is_active(booking, now):
            await availability_service.get_bookable_unit(
                db, booking.unit_type, booking.unit_id, lock=True
            )
            conflicts = await availability_service.find_conflicts(
                db,
                booking.unit_type,
                booking.unit_id,
                booking.start_date,
                booking.end_date,
                now,
                exclude_booking_id=booking.id,
            )
            if conflicts:
                mark_booking_failed(booking, "late_payment_conflict", now)
                await db.commit()
                logger.warning(
                    "Payment %s arrived after hold lapsed and slot was taken; booking %s failed",
                    payment_id,
                    booking.booking_number,
                )
                raise SlotNotAvailable(
                    "Payment received after the hold expired and the slot was taken"
                )

        assert_booking_transition(booking.payment_status, "completed")
        booking.payment_status = "completed"
        booking.payment_method = GatewayType.RAZORPAY.value
        booking.gateway_payment_id = payment_id
        booking.gateway_signature = signature
        booking.paid_at = now

        db.add(
            Transaction(
                booking_id=booking.id,
                user_id=booking.user_id,
                booking_type=booking.booking_type,
                transaction_type="booking",
                amount=booking.total_price,
                currency=booking.currency,
                payment_method=booking.payment_method,
                gateway_payment_id=payment_id,
                created_at=now,
            )
        )
        try:
            await db.flush()
        except IntegrityError as exc:
            # Exclusion constraint caught a range taken after the hold lapsed
            booking_id = booking.id
            await db.rollback()
            booking = await db.get(Booking, booking_id, with_for_update=True)
            mark_booking_failed(booking, "late_payment_conflict", now)
            await db.commit()
            logger.warning(
                "Completion of booking %s rejected by database: %s",
                booking.booking_number,
                exc.orig,
            )
            raise SlotNotAvailable(
                "Payment received after the hold expired and the slot was taken"
            ) from exc
        await availability_service.refresh_unit_projection(
            db, booking.unit_type, booking.unit_id, now.date()
        )
        await db.flush()

        logger.info(
            "Booking %s completed with payment %s",
            booking.booking_number,
            payment_id,
        )
        return CompletionResult(booking=booking, newly_completed=True)

    async def verify_payment(
        self,
        db: AsyncSession,
        user: User,
        booking_id: UUID,
        order_id: str,
        payment_id: str,
        signature: str,
        now: datetime | None = None,
    ) -> CompletionResult:
        """Verify a checkout callback and complete the booking.

        Raises:
            SignatureMismatch: Signature does not verify; nothing is changed
            NotFoundError: No booking with this id and order id
            InvalidBookingStatus: Booking failed or cancelled
            SlotNotAvailable: Hold lapsed and the slot was taken meanwhile
        """
        now = now or utcnow()
        self._assert_gateway_configured()

        if not gateway_service.verify_payment_signature(order_id, payment_id, signature):
            signature_logger.warning(
                "Payment signature mismatch booking=%s order=%s payment=%s user=%s",
                booking_id,
                order_id,
                payment_id,
                user.id,
            )
            raise SignatureMismatch()

        result = await db.execute(
            select(Booking)
            .where(Booking.id == booking_id, Booking.gateway_order_id == order_id)
            .with_for_update()
        )
        booking = result.scalar_one_or_none()
        if not booking:
            raise NotFoundError("Booking", str(booking_id))
        if user.role != "admin" and booking.user_id != user.id:
            raise AuthorizationError("You don't have permission to verify this booking")

        return await self.complete_booking(db, booking, payment_id, signature, now)

    async def handle_webhook(
        self,
        db: AsyncSession,
        payload: bytes,
        signature: str | None,
        now: datetime | None = None,
    ) -> dict:
        """Process a signed gateway webhook.

        Returns:
            dict: Acknowledgement with the event name and outcome
        """
        now = now or utcnow()
        event = gateway_service.verify_webhook(payload, signature or "")
        if event is None:
            signature_logger.warning("Webhook signature mismatch")
            raise SignatureMismatch("Webhook signature verification failed")

        event_name = event.get("event", "")
        order_id, payment_id = _extract_ids(event)

        if event_name not in COMPLETION_EVENTS + FAILURE_EVENTS:
            logger.info("Ignoring webhook event %s", event_name)
            return {"status": "ignored", "event": event_name}
        if not order_id:
            logger.warning("Webhook %s without order id", event_name)
            return {"status": "ignored", "event": event_name}

        result = await db.execute(
            select(Booking).where(Booking.gateway_order_id == order_id).with_for_update()
        )
        booking = result.scalar_one_or_none()
        if not booking:
            logger.warning("Webhook %s for unknown order %s", event_name, order_id)
            return {"status": "ignored", "event": event_name}

        if event_name in FAILURE_EVENTS:
            if booking.payment_status == "pending":
                mark_booking_failed(booking, "gateway_failed", now)
                await db.flush()
                logger.info("Booking %s failed by gateway", booking.booking_number)
                return {"status": "failed", "event": event_name, "bookingId": str(booking.id)}
            return {"status": "ignored", "event": event_name, "bookingId": str(booking.id)}

        if not payment_id:
            logger.warning("Webhook %s for order %s without payment id", event_name, order_id)
            return {"status": "ignored", "event": event_name}

        try:
            completion = await self.complete_booking(db, booking, payment_id, None, now)
        except (SlotNotAvailable, InvalidBookingStatus) as exc:
            # Acknowledged; the booking stays unconfirmed
            logger.warning(
                "Webhook %s not applied to booking %s: %s",
                event_name,
                booking.booking_number,
                exc.detail,
            )
            return {"status": "rejected", "event": event_name, "bookingId": str(booking.id)}
        return {
            "status": "completed" if completion.newly_completed else "already_completed",
            "event": event_name,
            "bookingId": str(booking.id),
        }


payment_service = PaymentService()
