"""Booking and payment flow over HTTP."""

import json

from jose import jwt
from sqlalchemy import func, select

from inhalestays.config import settings
from inhalestays.gateways.razorpay import compute_signature
from inhalestays.models.booking import Booking
from inhalestays.models.transaction import Transaction
from tests.conftest import KEY_SECRET, WEBHOOK_SECRET, auth

API = "/api/v1"


def _booking_payload(seed, start="2025-01-01", count=30, **extra):
    payload = {
        "booking_type": "cabin",
        "unit_id": str(seed.seat.id),
        "start_date": start,
        "booking_duration": "daily",
        "duration_count": count,
    }
    payload.update(extra)
    return payload


async def _create_and_order(client, seed, user=None):
    user = user or seed.student
    response = await client.post(
        f"{API}/bookings", json=_booking_payload(seed, total_price=1000), headers=auth(user)
    )
    assert response.status_code == 201, response.text
    booking = response.json()

    response = await client.post(
        f"{API}/payments/create-order",
        json={
            "bookingId": booking["id"],
            "bookingType": "cabin",
            "amount": booking["total_price"],
            "currency": "INR",
        },
        headers=auth(user),
    )
    assert response.status_code == 200, response.text
    return booking, response.json()


async def test_end_to_end_booking_payment_and_conflict(client, seed, razorpay_orders, session_maker):
    booking, order = await _create_and_order(client, seed)
    assert booking["payment_status"] == "pending"
    assert booking["end_date"] == "2025-01-31"
    assert booking["total_price"] == 1000
    assert order["keyId"] == "rzp_test_key"
    assert order["amount"] == 1000

    response = await client.post(
        f"{API}/payments/verify",
        json={
            "bookingId": booking["id"],
            "orderId": order["orderId"],
            "paymentId": "pay_E2E0001",
            "signature": compute_signature(KEY_SECRET, f"{order['orderId']}|pay_E2E0001"),
        },
        headers=auth(seed.student),
    )
    assert response.status_code == 200, response.text
    assert response.json() == {
        "success": True,
        "bookingId": booking["id"],
        "paymentStatus": "completed",
    }

    response = await client.post(
        f"{API}/bookings",
        json=_booking_payload(seed, start="2025-01-15", count=5),
        headers=auth(seed.other),
    )
    assert response.status_code == 409
    assert response.json()["code"] == "conflict"
    assert response.json()["retryable"] is True

    response = await client.get(f"{API}/bookings/{booking['id']}", headers=auth(seed.student))
    assert response.json()["payment_status"] == "completed"
    assert response.json()["gateway_payment_id"] == "pay_E2E0001"

    async with session_maker() as session:
        assert await session.scalar(select(func.count()).select_from(Transaction)) == 1


async def test_replayed_verification_succeeds_without_side_effects(client, seed, razorpay_orders, session_maker):
    booking, order = await _create_and_order(client, seed)
    payload = {
        "bookingId": booking["id"],
        "orderId": order["orderId"],
        "paymentId": "pay_REPLAY1",
        "signature": compute_signature(KEY_SECRET, f"{order['orderId']}|pay_REPLAY1"),
    }
    for _ in range(3):
        response = await client.post(f"{API}/payments/verify", json=payload, headers=auth(seed.student))
        assert response.status_code == 200
        assert response.json()["paymentStatus"] == "completed"

    async with session_maker() as session:
        assert await session.scalar(select(func.count()).select_from(Transaction)) == 1
        completed = await session.scalar(
            select(func.count()).select_from(Booking).where(Booking.payment_status == "completed")
        )
        assert completed == 1


async def test_tampered_signature_is_rejected(client, seed, razorpay_orders):
    booking, order = await _create_and_order(client, seed)
    signature = compute_signature(KEY_SECRET, f"{order['orderId']}|pay_T1")
    response = await client.post(
        f"{API}/payments/verify",
        json={
            "bookingId": booking["id"],
            "orderId": order["orderId"],
            "paymentId": "pay_T1",
            "signature": signature.upper(),
        },
        headers=auth(seed.student),
    )
    assert response.status_code == 400
    assert response.json()["code"] == "signature_mismatch"

    response = await client.get(f"{API}/bookings/{booking['id']}", headers=auth(seed.student))
    assert response.json()["payment_status"] == "pending"


async def test_webhook_confirms_booking(client, seed, razorpay_orders):
    booking, order = await _create_and_order(client, seed)
    body = json.dumps(
        {
            "event": "payment.captured",
            "payload": {
                "payment": {
                    "entity": {
                        "id": "pay_HOOK1",
                        "order_id": order["orderId"],
                        "status": "captured",
                    }
                }
            },
        }
    ).encode()

    response = await client.post(
        f"{API}/webhooks/razorpay",
        content=body,
        headers={
            "Content-Type": "application/json",
            "X-Razorpay-Signature": compute_signature(WEBHOOK_SECRET, body),
        },
    )
    assert response.status_code == 200, response.text
    assert response.json() == {
        "status": "completed",
        "event": "payment.captured",
        "bookingId": booking["id"],
    }

    response = await client.post(
        f"{API}/webhooks/razorpay",
        content=body,
        headers={"X-Razorpay-Signature": compute_signature("wrong-secret", body)},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "signature_mismatch"


async def test_create_booking_validation(client, seed):
    response = await client.post(
        f"{API}/bookings",
        json=_booking_payload(seed, booking_type="villa"),
        headers=auth(seed.student),
    )
    assert response.status_code == 422
    body = response.json()
    assert body["code"] == "validation_error"
    assert body["errors"]

    response = await client.post(
        f"{API}/bookings",
        json=_booking_payload(seed, total_price=5000),
        headers=auth(seed.student),
    )
    assert response.status_code == 422
    assert "Price mismatch" in response.json()["error"]


async def test_booking_requires_authentication(client, seed):
    response = await client.post(f"{API}/bookings", json=_booking_payload(seed))
    assert response.status_code == 401
    assert response.json()["code"] == "unauthorized"

    response = await client.post(
        f"{API}/bookings",
        json=_booking_payload(seed),
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert response.status_code == 401

    numeric_subject = jwt.encode(
        {"sub": 12345, "email": seed.student.email, "aud": settings.jwt_audience},
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )
    response = await client.post(
        f"{API}/bookings",
        json=_booking_payload(seed),
        headers={"Authorization": f"Bearer {numeric_subject}"},
    )
    assert response.status_code == 401
    assert response.json()["code"] == "unauthorized"

    foreign = jwt.encode(
        {"sub": str(seed.student.id), "email": seed.student.email, "aud": "anon"},
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )
    response = await client.post(
        f"{API}/bookings",
        json=_booking_payload(seed),
        headers={"Authorization": f"Bearer {foreign}"},
    )
    assert response.status_code == 401


async def test_cancel_and_list(client, seed):
    response = await client.post(f"{API}/bookings", json=_booking_payload(seed), headers=auth(seed.student))
    booking_id = response.json()["id"]

    response = await client.post(
        f"{API}/bookings/{booking_id}/cancel",
        json={"reason": "Exam postponed"},
        headers=auth(seed.other),
    )
    assert response.status_code == 403

    response = await client.post(
        f"{API}/bookings/{booking_id}/cancel",
        json={"reason": "Exam postponed"},
        headers=auth(seed.student),
    )
    assert response.status_code == 200
    assert response.json()["payment_status"] == "cancelled"
    assert response.json()["cancellation_reason"] == "Exam postponed"

    response = await client.get(
        f"{API}/bookings", params={"payment_status": "cancelled"}, headers=auth(seed.student)
    )
    listing = response.json()
    assert listing["total"] == 1
    assert listing["pages"] == 1
    assert listing["items"][0]["id"] == booking_id

    response = await client.get(f"{API}/bookings", params={"scope": "all"}, headers=auth(seed.student))
    assert response.status_code == 403

    response = await client.get(f"{API}/bookings", params={"scope": "all"}, headers=auth(seed.admin))
    assert response.json()["total"] == 1


async def test_availability_endpoint(client, seed):
    params = {"start_date": "2025-01-01", "booking_duration": "daily", "duration_count": 30}
    response = await client.get(f"{API}/inventory/seat/{seed.seat.id}/availability", params=params)
    assert response.status_code == 200
    body = response.json()
    assert body["available"] is True
    assert body["end_date"] == "2025-01-31"
    assert body["total_price"] == 1000

    await client.post(f"{API}/bookings", json=_booking_payload(seed), headers=auth(seed.student))

    response = await client.get(
        f"{API}/inventory/seat/{seed.seat.id}/availability",
        params={"start_date": "2025-01-10", "end_date": "2025-01-12"},
    )
    assert response.json()["available"] is False
    assert response.json()["reason"] == "overlapping_booking"


async def test_booking_range_past_calendar_limit(client, seed):
    response = await client.get(
        f"{API}/inventory/seat/{seed.seat.id}/availability",
        params={"start_date": "9999-12-31", "booking_duration": "daily", "duration_count": 1},
    )
    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"

    response = await client.post(
        f"{API}/bookings",
        json=_booking_payload(seed, start="9999-12-01", count=1, booking_duration="monthly"),
        headers=auth(seed.student),
    )
    assert response.status_code == 422
    assert response.json()["error"] == "Booking range exceeds supported dates"
