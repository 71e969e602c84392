"""Periodic maintenance tasks."""

import json
from contextlib import asynccontextmanager
from datetime import UTC, date, datetime

import httpx
import pytest
from sqlalchemy import select

from inhalestays import tasks
from inhalestays.config import settings
from inhalestays.models.booking import Booking
from inhalestays.models.inventory import Seat
from inhalestays.models.user import User
from inhalestays.services.booking_service import booking_service
from inhalestays.services.notification_service import NotificationService

LONG_AGO = datetime(2025, 1, 1, 9, 0, tzinfo=UTC)


@pytest.fixture
def task_db(monkeypatch, session_maker):
    @asynccontextmanager
    async def get_db_context():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    monkeypatch.setattr(tasks, "get_db_context", get_db_context)


async def test_expiry_task_fails_lapsed_holds(task_db, seed, session_maker):
    async with session_maker() as db:
        booking = await booking_service.create_booking(
            db, seed.student, "cabin", seed.seat.id, date(2025, 1, 1), "daily", 30, now=LONG_AGO
        )
        await db.commit()

    assert await tasks._expire_stale_holds() == 1
    assert await tasks._expire_stale_holds() == 0

    async with session_maker() as db:
        stored = await db.get(Booking, booking.id)
        assert stored.payment_status == "failed"
        assert stored.failure_reason == "hold_expired"


async def test_refresh_task_recomputes_projection(task_db, seed, session_maker):
    async with session_maker() as db:
        seat = await db.get(Seat, seed.seat.id)
        seat.is_available = False
        await db.commit()

    assert await tasks._refresh_availability_flags() >= 1

    async with session_maker() as db:
        seat = (await db.execute(select(Seat).where(Seat.id == seed.seat.id))).scalar_one()
        assert seat.is_available is True
        assert seat.unavailable_until is None


async def test_expiry_reminders_for_completed_bookings(task_db, seed, session_maker, monkeypatch):
    monkeypatch.setattr(settings, "firebase_server_key", "fcm-server-key")
    sent = []

    def handler(request: httpx.Request) -> httpx.Response:
        sent.append(json.loads(request.content))
        return httpx.Response(200, json={"success": 1})

    monkeypatch.setattr(
        tasks, "notification_service", NotificationService(transport=httpx.MockTransport(handler))
    )

    async with session_maker() as db:
        student = await db.get(User, seed.student.id)
        student.push_token = "fcm-device-1"
        extra = [Seat(cabin_id=seed.cabin.id, number=n, price=1000) for n in (2, 3, 4)]
        db.add_all(extra)
        await db.flush()

        async def book(user, booking_type, unit_id, start, completed=True):
            booking = await booking_service.create_booking(
                db, user, booking_type, unit_id, start, "daily", 30, now=LONG_AGO
            )
            if completed:
                booking.payment_status = "completed"
            return booking

        # today is 2025-03-01
        in_seven = await book(seed.student, "cabin", seed.seat.id, date(2025, 2, 6))
        in_three = await book(seed.student, "hostel", seed.bed.id, date(2025, 2, 2))
        await book(seed.other, "cabin", extra[0].id, date(2025, 1, 31))  # no device
        await book(seed.student, "cabin", extra[1].id, date(2025, 2, 4))  # ends in 5 days
        await book(seed.student, "cabin", extra[2].id, date(2025, 2, 2), completed=False)
        await db.commit()

    assert await tasks._send_expiry_reminders(today=date(2025, 3, 1)) == 2

    assert [message["data"]["bookingId"] for message in sent] == [
        str(in_seven.id),
        str(in_three.id),
    ]
    assert sent[0]["to"] == "fcm-device-1"
    assert sent[0]["data"]["type"] == "booking_expiring"
    assert sent[0]["data"]["daysLeft"] == "7"
    assert sent[1]["data"]["bookingType"] == "hostel"
    assert "ends in 3 days on 04 Mar 2025" in sent[1]["notification"]["body"]


async def test_expiry_reminders_without_push_configuration(task_db, seed, session_maker):
    async with session_maker() as db:
        booking = await booking_service.create_booking(
            db, seed.student, "cabin", seed.seat.id, date(2025, 2, 28), "daily", 1, now=LONG_AGO
        )
        booking.payment_status = "completed"
        student = await db.get(User, seed.student.id)
        student.push_token = "fcm-device-1"
        await db.commit()

    assert await tasks._send_expiry_reminders(today=date(2025, 2, 28)) == 0
