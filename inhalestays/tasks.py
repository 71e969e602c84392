"""Celery background tasks.

This module contains the periodic booking maintenance tasks:
- Expiring pending bookings whose payment hold lapsed
- Refreshing the seat/bed availability projection
- Reminding students that a completed booking is about to end
"""

import asyncio
import logging
from datetime import date, timedelta

from celery import shared_task

from inhalestays.config import settings
from inhalestays.database import get_db_context
from inhalestays.services.availability_service import availability_service, utcnow
from inhalestays.services.booking_service import booking_service
from inhalestays.services.notification_service import notification_service

logger = logging.getLogger(__name__)

_loop: asyncio.AbstractEventLoop | None = None


def run_async(coro):
    """Run async function in sync context.

    One loop per worker process; pooled DB connections are bound to it.
    """
    global _loop
    if _loop is None or _loop.is_closed():
        _loop = asyncio.new_event_loop()
    return _loop.run_until_complete(coro)


# ==================== HOLD EXPIRY ====================


@shared_task(bind=True, max_retries=3)
def expire_stale_holds(self):
    """Fail pending bookings whose hold has lapsed.

    Runs every minute. Each run handles at most one batch; rows locked by
    an in-flight payment are skipped and picked up on a later run.
    """
    try:
        expired = run_async(_expire_stale_holds())
        return {"status": "success", "expired": expired}
    except Exception as exc:
        logger.exception("Hold expiry sweep failed")
        raise self.retry(exc=exc, countdown=30)


async def _expire_stale_holds() -> int:
    async with get_db_context() as db:
        expired = await availability_service.expire_stale_holds(
            db, now=utcnow(), limit=settings.hold_sweep_batch_size
        )
    if expired:
        logger.info("Expired %d stale booking holds", expired)
    return expired


# ==================== AVAILABILITY PROJECTION ====================


@shared_task(bind=True, max_retries=3)
def refresh_availability_flags(self):
    """Recompute is_available / unavailable_until on seats and beds.

    Completed bookings start and end with the calendar, so the projection
    drifts without a periodic refresh.
    """
    try:
        refreshed = run_async(_refresh_availability_flags())
        return {"status": "success", "refreshed": refreshed}
    except Exception as exc:
        logger.exception("Availability refresh failed")
        raise self.retry(exc=exc, countdown=120)


async def _refresh_availability_flags() -> int:
    async with get_db_context() as db:
        refreshed = await availability_service.refresh_availability_flags(
            db, today=utcnow().date()
        )
    logger.info("Refreshed availability for %d units", refreshed)
    return refreshed



# ==================== EXPIRY REMINDERS ====================


@shared_task(bind=True, max_retries=3)
def send_expiry_reminders(self):
    """Push a renewal reminder for completed bookings ending soon.

    Runs daily at 09:00; a booking is reminded once for each configured
    number of days before its end date.
    """
    try:
        sent = run_async(_send_expiry_reminders())
        return {"status": "success", "sent": sent}
    except Exception as exc:
        logger.exception("Expiry reminders failed")
        raise self.retry(exc=exc, countdown=300)


async def _send_expiry_reminders(today: date | None = None) -> int:
    today = today or utcnow().date()
    sent = 0
    async with get_db_context() as db:
        for days_left in settings.expiry_reminder_days:
            expiring = await booking_service.list_expiring_bookings(
                db, today + timedelta(days=days_left)
            )
            for booking, push_token in expiring:
                if await notification_service.notify_booking_expiring(
                    push_token, booking, days_left
                ):
                    sent += 1
    logger.info("Sent %d booking expiry reminders", sent)
    return sent
