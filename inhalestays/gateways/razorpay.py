"""Razorpay payment gateway adapter.

Documentation: https://razorpay.com/docs/api/orders/
"""

import hashlib
import hmac
import json
import logging

import httpx

from inhalestays.config import settings
from inhalestays.gateways.base import GatewayType, OrderResult, PaymentGateway

logger = logging.getLogger(__name__)


def compute_signature(secret: str, message: str | bytes) -> str:
    """Lowercase hex HMAC-SHA256 of `message` keyed with `secret`."""
    if isinstance(message, str):
        message = message.encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def signatures_match(expected: str, supplied: str | None) -> bool:
    """Constant-time comparison of two hex signatures."""
    if not supplied:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), supplied.encode("utf-8"))


class RazorpayGateway(PaymentGateway):
    """Razorpay payment gateway implementation."""

    def __init__(
        self,
        key_id: str | None = None,
        key_secret: str | None = None,
        webhook_secret: str | None = None,
        api_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._key_id = key_id or settings.razorpay_key_id
        self.key_secret = key_secret or settings.razorpay_key_secret
        self.webhook_secret = webhook_secret or settings.razorpay_webhook_secret
        self.api_url = (api_url or settings.razorpay_api_url).rstrip("/")
        self.timeout = timeout or settings.razorpay_timeout_seconds
        self._transport = transport

    @property
    def gateway_type(self) -> GatewayType:
        return GatewayType.RAZORPAY

    @property
    def key_id(self) -> str | None:
        return self._key_id

    @property
    def is_configured(self) -> bool:
        return bool(self._key_id and self.key_secret)

    async def create_order(
        self,
        amount: int,
        currency: str,
        receipt: str,
        notes: dict | None = None,
    ) -> OrderResult:
        """Create a Razorpay order."""
        if not self.is_configured:
            return OrderResult(
                success=False,
                error_message="Razorpay credentials not configured",
            )

        payload = {
            "amount": amount,
            "currency": currency,
            "receipt": receipt[:40],
            "notes": notes or {},
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    f"{self.api_url}/orders",
                    auth=(self._key_id, self.key_secret),
                    json=payload,
                )
        except httpx.HTTPError as e:
            logger.warning("Razorpay order request failed: %s", e)
            return OrderResult(success=False, error_message=str(e))

        if response.status_code not in (200, 201):
            try:
                description = response.json().get("error", {}).get("description")
            except ValueError:
                description = None
            logger.warning(
                "Razorpay order creation returned %s: %s",
                response.status_code,
                description,
            )
            return OrderResult(
                success=False,
                error_message=description or f"API returned {response.status_code}",
                raw_response={"status_code": response.status_code},
            )

        data = response.json()
        return OrderResult(
            success=True,
            order_id=data["id"],
            amount=data.get("amount", amount),
            currency=data.get("currency", currency),
            raw_response=data,
        )

    def verify_payment_signature(
        self,
        order_id: str,
        payment_id: str,
        signature: str,
    ) -> bool:
        """Check HMAC-SHA256(key_secret, order_id|payment_id)."""
        if not self.key_secret:
            return False
        expected = compute_signature(self.key_secret, f"{order_id}|{payment_id}")
        return signatures_match(expected, signature)

    def verify_webhook(
        self,
        payload: bytes,
        signature: str,
    ) -> dict | None:
        """Verify the X-Razorpay-Signature header over the raw body."""
        if not self.webhook_secret:
            return None
        expected = compute_signature(self.webhook_secret, payload)
        if not signatures_match(expected, signature):
            return None
        try:
            return json.loads(payload)
        except ValueError:
            return None
