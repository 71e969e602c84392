"""Webhook endpoints for payment gateways."""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from inhalestays.api.deps import get_db
from inhalestays.schemas.payment import WebhookAck
from inhalestays.services.payment_service import payment_service

router = APIRouter()


@router.post("/razorpay", response_model=WebhookAck, status_code=status.HTTP_200_OK)
async def razorpay_webhook(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    razorpay_signature: str | None = Header(None, alias="X-Razorpay-Signature"),
) -> WebhookAck:
    """Handle Razorpay webhook events.

    payment.captured and order.paid confirm the booking; payment.failed
    fails a pending booking. Other events are acknowledged and ignored.
    """
    # Raw body for signature verification
    payload = await request.body()
    result = await payment_service.handle_webhook(db, payload, razorpay_signature)
    return WebhookAck(
        status=result["status"],
        event=result["event"],
        booking_id=result.get("bookingId"),
    )
