"""Payment gateway service.

Routes payment operations to the appropriate gateway adapter.
No business logic here - only gateway coordination.
"""

from inhalestays.gateways.base import GatewayType, OrderResult, PaymentGateway
from inhalestays.gateways.razorpay import RazorpayGateway


class GatewayService:
    """Service for managing payment gateway operations."""

    def __init__(self):
        self._gateways: dict[GatewayType, PaymentGateway] = {}

    def get_gateway(self, gateway_type: str | GatewayType = GatewayType.RAZORPAY) -> PaymentGateway:
        """Get or create gateway instance."""
        gateway_type = GatewayType(gateway_type)
        if gateway_type not in self._gateways:
            self._gateways[gateway_type] = RazorpayGateway()
        return self._gateways[gateway_type]

    def register(self, gateway: PaymentGateway) -> None:
        """Replace the adapter used for a gateway type."""
        self._gateways[gateway.gateway_type] = gateway

    def reset(self) -> None:
        """Drop cached adapters so they are rebuilt from settings."""
        self._gateways.clear()

    def is_configured(self, gateway_type: str | GatewayType = GatewayType.RAZORPAY) -> bool:
        gateway = self.get_gateway(gateway_type)
        return bool(getattr(gateway, "is_configured", True))

    def key_id(self, gateway_type: str | GatewayType = GatewayType.RAZORPAY) -> str | None:
        return self.get_gateway(gateway_type).key_id

    async def create_order(
        self,
        amount: int,
        currency: str,
        receipt: str,
        notes: dict | None = None,
        gateway_type: str | GatewayType = GatewayType.RAZORPAY,
    ) -> OrderResult:
        """Create an order via the specified gateway."""
        gateway = self.get_gateway(gateway_type)
        return await gateway.create_order(
            amount=amount,
            currency=currency,
            receipt=receipt,
            notes=notes,
        )

    def verify_payment_signature(
        self,
        order_id: str,
        payment_id: str,
        signature: str,
        gateway_type: str | GatewayType = GatewayType.RAZORPAY,
    ) -> bool:
        """Verify a checkout signature via the specified gateway."""
        return self.get_gateway(gateway_type).verify_payment_signature(
            order_id, payment_id, signature
        )

    def verify_webhook(
        self,
        payload: bytes,
        signature: str,
        gateway_type: str | GatewayType = GatewayType.RAZORPAY,
    ) -> dict | None:
        """Verify webhook via the specified gateway."""
        return self.get_gateway(gateway_type).verify_webhook(payload, signature)


gateway_service = GatewayService()
