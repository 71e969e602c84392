"""Payment-related Pydantic schemas.

The checkout client speaks camelCase, so these models alias their fields.
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from inhalestays.schemas.booking import BookingType


class CreateOrderRequest(BaseModel):
    """Schema for creating a gateway order."""

    model_config = ConfigDict(populate_by_name=True)

    amount: int = Field(..., gt=0)  # paise
    currency: str = Field(default="INR", min_length=3, max_length=3)
    booking_id: UUID = Field(..., alias="bookingId")
    booking_type: BookingType = Field(..., alias="bookingType")


class CreateOrderResponse(BaseModel):
    """Schema for a created gateway order."""

    model_config = ConfigDict(populate_by_name=True)

    order_id: str = Field(..., alias="orderId")
    amount: int
    currency: str
    key_id: str | None = Field(None, alias="keyId")


class VerifyPaymentRequest(BaseModel):
    """Schema for the checkout callback payload."""

    model_config = ConfigDict(populate_by_name=True)

    payment_id: str = Field(..., alias="paymentId", min_length=1, max_length=100)
    order_id: str = Field(..., alias="orderId", min_length=1, max_length=100)
    signature: str = Field(..., min_length=1, max_length=200)
    booking_id: UUID = Field(..., alias="bookingId")


class VerifyPaymentResponse(BaseModel):
    """Schema for a verified payment."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    booking_id: UUID = Field(..., alias="bookingId")
    payment_status: str = Field(..., alias="paymentStatus")


class WebhookAck(BaseModel):
    """Schema for a webhook acknowledgement."""

    model_config = ConfigDict(populate_by_name=True)

    status: str
    event: str
    booking_id: str | None = Field(None, alias="bookingId")
