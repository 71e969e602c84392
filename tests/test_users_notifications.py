"""Profile, push token and push delivery."""

import json
from datetime import date

import httpx
import pytest
from sqlalchemy import select

from inhalestays.config import settings
from inhalestays.models.user import User
from inhalestays.services.booking_service import booking_service
from inhalestays.services.notification_service import NotificationService
from tests.conftest import auth

API = "/api/v1"


async def test_update_profile(client, seed):
    response = await client.patch(
        f"{API}/users/me",
        json={"full_name": "Asha Rao", "phone": "+919876543210"},
        headers=auth(seed.student),
    )
    assert response.status_code == 200
    assert response.json()["full_name"] == "Asha Rao"
    assert response.json()["phone"] == "+919876543210"


async def test_update_profile_rejects_bad_phone(client, seed):
    response = await client.patch(
        f"{API}/users/me", json={"phone": "9876543210"}, headers=auth(seed.student)
    )
    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"


async def test_register_and_remove_push_token(client, seed, session_maker):
    response = await client.post(
        f"{API}/notifications/token", json={"token": "fcm-device-1"}, headers=auth(seed.student)
    )
    assert response.status_code == 204

    async with session_maker() as session:
        user = await session.scalar(select(User).where(User.id == seed.student.id))
        assert user.push_token == "fcm-device-1"

    response = await client.delete(f"{API}/notifications/token", headers=auth(seed.student))
    assert response.status_code == 204

    async with session_maker() as session:
        user = await session.scalar(select(User).where(User.id == seed.student.id))
        assert user.push_token is None


@pytest.fixture
def firebase_key(monkeypatch):
    monkeypatch.setattr(settings, "firebase_server_key", "fcm-server-key")


async def test_push_is_skipped_without_configuration(seed):
    service = NotificationService(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    assert await service.send_push("fcm-device-1", "Hi", "There") is False


async def test_push_is_skipped_without_device_token(firebase_key):
    service = NotificationService(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
    assert await service.send_push(None, "Hi", "There") is False


async def test_booking_confirmed_push(firebase_key, db, seed):
    sent = []

    def handler(request: httpx.Request) -> httpx.Response:
        sent.append((request.headers["Authorization"], json.loads(request.content)))
        return httpx.Response(200, json={"success": 1})

    booking = await booking_service.create_booking(
        db, seed.student, "cabin", seed.seat.id, date(2025, 1, 1), "daily", 30
    )
    await db.commit()

    service = NotificationService(transport=httpx.MockTransport(handler))
    try:
        assert await service.notify_booking_confirmed("fcm-device-1", booking) is True
    finally:
        await service.close()

    [(authorization, message)] = sent
    assert authorization == "key=fcm-server-key"
    assert message["to"] == "fcm-device-1"
    assert booking.booking_number in message["notification"]["body"]
    assert message["data"] == {
        "type": "booking_confirmed",
        "bookingId": str(booking.id),
        "bookingType": "cabin",
    }


async def test_push_failures_are_reported_not_raised(firebase_key):
    def refused(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    service = NotificationService(transport=httpx.MockTransport(refused))
    assert await service.send_push("fcm-device-1", "Hi", "There") is False

    service = NotificationService(transport=httpx.MockTransport(lambda request: httpx.Response(401)))
    assert await service.send_push("fcm-device-1", "Hi", "There") is False


async def test_health_check(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["environment"] == "test"
