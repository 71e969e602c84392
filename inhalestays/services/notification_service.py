"""Push notification service (Firebase Cloud Messaging).

Delivery is fire-and-forget: failures are logged and reported as False,
never raised to the booking flow.
"""

import logging
from typing import Any

import httpx

from inhalestays.config import settings
from inhalestays.models.booking import Booking

logger = logging.getLogger(__name__)


class NotificationService:
    """Service for sending push notifications."""

    BOOKING_CONFIRMED = "booking_confirmed"
    BOOKING_CANCELLED = "booking_cancelled"
    BOOKING_EXPIRING = "booking_expiring"

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._transport = transport
        self._http_client: httpx.AsyncClient | None = None

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Lazy-load HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=30.0, transport=self._transport)
        return self._http_client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def send_push(
        self,
        push_token: str | None,
        title: str,
        body: str,
        data: dict[str, Any] | None = None,
    ) -> bool:
        """Send a push notification via Firebase Cloud Messaging.

        Args:
            push_token: Device FCM token
            title: Notification title
            body: Notification body
            data: Additional data payload (values are sent as strings)

        Returns:
            bool: True if sent successfully
        """
        if not settings.firebase_server_key or not push_token:
            return False

        message = {
            "to": push_token,
            "notification": {
                "title": title,
                "body": body,
                "sound": "default",
            },
            "data": {key: str(value) for key, value in (data or {}).items()},
            "priority": "high",
        }

        try:
            response = await self.http_client.post(
                settings.firebase_send_url,
                headers={
                    "Authorization": f"key={settings.firebase_server_key}",
                    "Content-Type": "application/json",
                },
                json=message,
            )
        except httpx.HTTPError as e:
            logger.warning("Push notification failed: %s", e)
            return False

        if response.status_code != 200:
            logger.warning("Push notification rejected with status %s", response.status_code)
            return False
        return True

    async def notify_booking_confirmed(self, push_token: str | None, booking: Booking) -> bool:
        return await self.send_push(
            push_token,
            title="Booking confirmed",
            body=(
                f"Your booking {booking.booking_number} from "
                f"{booking.start_date:%d %b %Y} is confirmed."
            ),
            data={
                "type": self.BOOKING_CONFIRMED,
                "bookingId": booking.id,
                "bookingType": booking.booking_type,
            },
        )

    async def notify_booking_cancelled(self, push_token: str | None, booking: Booking) -> bool:
        return await self.send_push(
            push_token,
            title="Booking cancelled",
            body=f"Your booking {booking.booking_number} has been cancelled.",
            data={
                "type": self.BOOKING_CANCELLED,
                "bookingId": booking.id,
                "bookingType": booking.booking_type,
            },
        )

    async def notify_booking_expiring(
        self, push_token: str | None, booking: Booking, days_left: int
    ) -> bool:
        """Remind the student that a completed booking is about to end."""
        unit = "day" if days_left == 1 else "days"
        return await self.send_push(
            push_token,
            title="Booking ending soon",
            body=(
                f"Your booking {booking.booking_number} ends in {days_left} {unit} "
                f"on {booking.end_date:%d %b %Y}. Renew to keep your spot."
            ),
            data={
                "type": self.BOOKING_EXPIRING,
                "bookingId": booking.id,
                "bookingType": booking.booking_type,
                "daysLeft": days_left,
            },
        )


notification_service = NotificationService()
