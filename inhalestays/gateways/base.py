"""Base payment gateway interface.

All gateway adapters must implement this interface.
Business logic should NOT live in adapters - only gateway communication.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class GatewayType(str, Enum):
    """Supported payment gateways."""

    RAZORPAY = "razorpay"


@dataclass
class OrderResult:
    """Result of an order creation."""

    success: bool
    order_id: str | None = None
    amount: int | None = None
    currency: str | None = None
    error_message: str | None = None
    raw_response: dict | None = None


class PaymentGateway(ABC):
    """Abstract base class for payment gateways."""

    @property
    @abstractmethod
    def gateway_type(self) -> GatewayType:
        """Return the gateway type."""
        pass

    @property
    @abstractmethod
    def key_id(self) -> str | None:
        """Public key handed to the client checkout."""
        pass

    @abstractmethod
    async def create_order(
        self,
        amount: int,
        currency: str,
        receipt: str,
        notes: dict | None = None,
    ) -> OrderResult:
        """Create a gateway order the client pays against.

        Args:
            amount: Amount in smallest currency unit (paise)
            currency: Currency code (INR)
            receipt: Internal receipt reference
            notes: Additional metadata stored with the order

        Returns:
            OrderResult with the gateway order id
        """
        pass

    @abstractmethod
    def verify_payment_signature(
        self,
        order_id: str,
        payment_id: str,
        signature: str,
    ) -> bool:
        """Check the signature returned to the client after checkout.

        Args:
            order_id: Gateway order id
            payment_id: Gateway payment id
            signature: Signature supplied by the client

        Returns:
            True if the signature was produced by the gateway
        """
        pass

    @abstractmethod
    def verify_webhook(
        self,
        payload: bytes,
        signature: str,
    ) -> dict | None:
        """Verify webhook signature and parse payload.

        Args:
            payload: Raw request body
            signature: Webhook signature header

        Returns:
            Parsed event dict if valid, None if invalid
        """
        pass
