#!/usr/bin/env python3
"""
Booking and payment flow script for a local development server.

DO NOT ADD BUSINESS LOGIC HERE.
This script only orchestrates API calls.
All rules live in the backend.

Usage:
    python scripts/flow_book_and_pay.py --booking-type cabin --unit-id <UUID> --start-date 2026-04-01
    python scripts/flow_book_and_pay.py --booking-type hostel --unit-id <UUID> --start-date 2026-05-01 \
        --duration monthly --count 2

Flow:
    1. Mint a development token (shared JWT secret)
    2. Check availability and price
    3. Create booking
    4. Create gateway order
    5. Sign the checkout as the gateway would (shared key secret)
    6. Verify payment
    7. Fetch the confirmed booking
"""

import argparse
import json
import sys
from datetime import timedelta
from uuid import uuid4

import httpx

from inhalestays.config import settings
from inhalestays.core.security import create_access_token
from inhalestays.gateways.razorpay import compute_signature

BASE_URL = "http://localhost:8000"


def dev_token(email: str) -> str:
    """Mint a token the way the auth provider would, for local use only."""
    return create_access_token(
        {"sub": str(uuid4()), "email": email},
        expires_delta=timedelta(hours=1),
    )


def api_request(token: str, method: str, endpoint: str, data: dict | None = None) -> dict:
    """Make authenticated API request."""
    headers = {"Authorization": f"Bearer {token}"}
    url = f"{BASE_URL}{settings.api_prefix}{endpoint}"

    if method == "GET":
        response = httpx.get(url, headers=headers, params=data, timeout=10.0)
    elif method == "POST":
        response = httpx.post(url, headers=headers, json=data or {}, timeout=10.0)
    else:
        raise ValueError(f"Unknown method: {method}")

    return {"status": response.status_code, "data": response.json() if response.text else {}}


def print_step(step: int, title: str):
    print(f"\n{'='*60}")
    print(f"STEP {step}: {title}")
    print("="*60)


def print_result(result: dict, fields: list[str] | None = None):
    """Print result, optionally filtering fields."""
    if result["status"] >= 400:
        print(f"ERROR ({result['status']}): {json.dumps(result['data'], indent=2)}")
        return False

    print(f"Status: {result['status']}")
    if fields:
        filtered = {k: result["data"].get(k) for k in fields if k in result["data"]}
        print(json.dumps(filtered, indent=2))
    else:
        print(json.dumps(result["data"], indent=2))
    return True


def main():
    parser = argparse.ArgumentParser(description="Booking and payment flow")
    parser.add_argument("--booking-type", choices=["cabin", "hostel"], required=True)
    parser.add_argument("--unit-id", required=True, help="Seat or bed UUID")
    parser.add_argument("--start-date", required=True, help="Start date (YYYY-MM-DD)")
    parser.add_argument("--duration", choices=["daily", "weekly", "monthly"], default="monthly")
    parser.add_argument("--count", type=int, default=1, help="Number of duration units")
    parser.add_argument("--email", default="student@inhalestays.dev", help="Student email")
    args = parser.parse_args()

    unit_type = "seat" if args.booking_type == "cabin" else "bed"

    print_step(1, "Mint development token")
    token = dev_token(args.email)
    print(f"Token issued for {args.email}")

    print_step(2, "Check availability")
    availability = api_request(
        token,
        "GET",
        f"/inventory/{unit_type}/{args.unit_id}/availability",
        {
            "start_date": args.start_date,
            "booking_duration": args.duration,
            "duration_count": args.count,
        },
    )
    if not print_result(availability):
        sys.exit(1)
    if not availability["data"].get("available"):
        print("ERROR: Unit not available for these dates")
        sys.exit(1)
    total_price = availability["data"]["total_price"]

    print_step(3, "Create booking")
    booking = api_request(token, "POST", "/bookings", {
        "booking_type": args.booking_type,
        "unit_id": args.unit_id,
        "start_date": args.start_date,
        "booking_duration": args.duration,
        "duration_count": args.count,
        "total_price": total_price,
    })
    if not print_result(booking, ["id", "booking_number", "end_date", "total_price", "payment_status"]):
        sys.exit(1)
    booking_id = booking["data"]["id"]

    print_step(4, "Create gateway order")
    order = api_request(token, "POST", "/payments/create-order", {
        "bookingId": booking_id,
        "bookingType": args.booking_type,
        "amount": total_price,
        "currency": settings.default_currency,
    })
    if not print_result(order):
        sys.exit(1)
    order_id = order["data"]["orderId"]

    print_step(5, "Sign checkout")
    payment_id = f"pay_dev{uuid4().hex[:10]}"
    signature = compute_signature(settings.razorpay_key_secret, f"{order_id}|{payment_id}")
    print(f"Payment: {payment_id}")

    print_step(6, "Verify payment")
    verify = api_request(token, "POST", "/payments/verify", {
        "bookingId": booking_id,
        "orderId": order_id,
        "paymentId": payment_id,
        "signature": signature,
    })
    if not print_result(verify):
        sys.exit(1)

    print_step(7, "Fetch booking")
    final = api_request(token, "GET", f"/bookings/{booking_id}")
    if not print_result(final, ["booking_number", "payment_status", "paid_at"]):
        sys.exit(1)

    print("\n" + "="*60)
    print("FLOW COMPLETE")
    print("="*60)


if __name__ == "__main__":
    main()
