"""Payment endpoints."""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from inhalestays.api.deps import get_current_active_user, get_db
from inhalestays.core.middleware import payment_limiter
from inhalestays.models.user import User
from inhalestays.schemas.payment import (
    CreateOrderRequest,
    CreateOrderResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from inhalestays.services.notification_service import notification_service
from inhalestays.services.payment_service import payment_service

router = APIRouter()


@router.post(
    "/create-order",
    response_model=CreateOrderResponse,
    dependencies=[Depends(payment_limiter)],
)
async def create_order(
    order_data: CreateOrderRequest,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CreateOrderResponse:
    """Create a gateway order for a pending booking."""
    order = await payment_service.create_order(
        db,
        current_user,
        booking_id=order_data.booking_id,
        booking_type=order_data.booking_type,
        amount=order_data.amount,
        currency=order_data.currency,
    )
    return CreateOrderResponse(
        order_id=order["orderId"],
        amount=order["amount"],
        currency=order["currency"],
        key_id=order["keyId"],
    )


@router.post(
    "/verify",
    response_model=VerifyPaymentResponse,
    dependencies=[Depends(payment_limiter)],
)
async def verify_payment(
    payload: VerifyPaymentRequest,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    background_tasks: BackgroundTasks,
) -> VerifyPaymentResponse:
    """Verify the checkout signature and confirm the booking.

    Replaying a verified payload returns success without side effects.
    """
    completion = await payment_service.verify_payment(
        db,
        current_user,
        booking_id=payload.booking_id,
        order_id=payload.order_id,
        payment_id=payload.payment_id,
        signature=payload.signature,
    )
    booking = completion.booking

    if completion.newly_completed:
        owner = (
            current_user
            if booking.user_id == current_user.id
            else await db.get(User, booking.user_id)
        )
        if owner and owner.push_token:
            background_tasks.add_task(
                notification_service.notify_booking_confirmed, owner.push_token, booking
            )

    return VerifyPaymentResponse(
        success=True,
        booking_id=booking.id,
        payment_status=booking.payment_status,
    )
