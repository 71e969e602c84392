"""Vendor onboarding, inventory management and the location hierarchy."""

import uuid

from inhalestays.core.security import create_access_token
from tests.conftest import auth

API = "/api/v1"


def _fresh_headers(email: str) -> dict[str, str]:
    token = create_access_token({"sub": str(uuid.uuid4()), "email": email})
    return {"Authorization": f"Bearer {token}"}


async def test_first_request_provisions_student_profile(client):
    headers = _fresh_headers("newcomer@inhalestays.in")

    response = await client.get(f"{API}/users/me", headers=headers)
    assert response.status_code == 200
    assert response.json()["email"] == "newcomer@inhalestays.in"
    assert response.json()["role"] == "student"

    again = await client.get(f"{API}/users/me", headers=headers)
    assert again.json()["id"] == response.json()["id"]


async def test_vendor_onboarding_to_bookable_inventory(client, seed):
    vendor_headers = _fresh_headers("owner@inhalestays.in")

    response = await client.post(
        f"{API}/vendors",
        json={"business_name": "Focus Hub", "contact_phone": "+919800000001"},
        headers=vendor_headers,
    )
    assert response.status_code == 201, response.text
    vendor = response.json()
    assert vendor["status"] == "pending"

    response = await client.post(f"{API}/inventory/cabins", json={"name": "Focus Hub"}, headers=vendor_headers)
    assert response.status_code == 403
    assert "pending" in response.json()["error"]

    response = await client.get(
        f"{API}/admin/vendors", params={"status": "pending"}, headers=auth(seed.admin)
    )
    assert [v["id"] for v in response.json()] == [vendor["id"]]

    response = await client.post(
        f"{API}/admin/vendors/{vendor['id']}/status",
        json={"status": "approved", "commission_type": "fixed", "commission_value": "50"},
        headers=auth(seed.admin),
    )
    assert response.status_code == 200, response.text
    assert response.json()["status"] == "approved"
    assert response.json()["commission_type"] == "fixed"
    assert response.json()["approved_at"] is not None

    response = await client.post(f"{API}/inventory/cabins", json={"name": "Focus Hub"}, headers=vendor_headers)
    assert response.status_code == 201
    cabin_id = response.json()["id"]

    response = await client.post(
        f"{API}/inventory/cabins/{cabin_id}/seats",
        json={"number": 1, "price": 3000},
        headers=vendor_headers,
    )
    assert response.status_code == 201
    seat = response.json()
    assert seat["is_available"] is True

    response = await client.post(
        f"{API}/inventory/cabins/{cabin_id}/seats",
        json={"number": 1, "price": 3000},
        headers=vendor_headers,
    )
    assert response.status_code == 422

    response = await client.post(
        f"{API}/inventory/hostels",
        json={"name": "Focus Residency", "gender": "female"},
        headers=vendor_headers,
    )
    assert response.status_code == 201
    hostel_id = response.json()["id"]

    response = await client.post(
        f"{API}/inventory/hostels/{hostel_id}/rooms",
        json={"room_number": "A1", "floor": 1},
        headers=vendor_headers,
    )
    assert response.status_code == 201
    room_id = response.json()["id"]

    response = await client.post(
        f"{API}/inventory/rooms/{room_id}/beds",
        json={"number": 1, "price": 9000, "sharing_type": "triple"},
        headers=vendor_headers,
    )
    assert response.status_code == 201

    response = await client.get(f"{API}/inventory/rooms/{room_id}/beds")
    assert [bed["number"] for bed in response.json()] == [1]

    params = {"start_date": "2025-03-01", "booking_duration": "monthly", "duration_count": 1}
    response = await client.get(f"{API}/inventory/seat/{seat['id']}/availability", params=params)
    assert response.json()["available"] is True
    assert response.json()["total_price"] == 3000
    assert response.json()["end_date"] == "2025-04-01"

    response = await client.post(f"{API}/inventory/seat/{seat['id']}/deactivate", headers=vendor_headers)
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    response = await client.get(f"{API}/inventory/seat/{seat['id']}/availability", params=params)
    assert response.json()["available"] is False
    assert response.json()["reason"] == "unit_inactive"

    response = await client.get(f"{API}/inventory/cabins/{cabin_id}/seats")
    assert response.json() == []


async def test_vendor_cannot_manage_another_vendors_property(client, seed):
    intruder = _fresh_headers("intruder@inhalestays.in")
    await client.post(f"{API}/vendors", json={"business_name": "Rival Rooms"}, headers=intruder)

    response = await client.post(
        f"{API}/inventory/cabins/{seed.cabin.id}/seats",
        json={"number": 2, "price": 1000},
        headers=intruder,
    )
    assert response.status_code == 403

    response = await client.post(f"{API}/inventory/seat/{seed.seat.id}/deactivate", headers=intruder)
    assert response.status_code == 403


async def test_students_cannot_create_inventory(client, seed):
    response = await client.post(f"{API}/inventory/cabins", json={"name": "Nope"}, headers=auth(seed.student))
    assert response.status_code == 403
    assert response.json()["code"] == "forbidden"


async def test_admin_creates_property_for_a_vendor(client, seed):
    response = await client.post(f"{API}/inventory/hostels", json={"name": "Annex"}, headers=auth(seed.admin))
    assert response.status_code == 422

    response = await client.post(
        f"{API}/inventory/hostels",
        json={"name": "Annex", "vendor_id": str(seed.vendor.id)},
        headers=auth(seed.admin),
    )
    assert response.status_code == 201
    assert response.json()["vendor_id"] == str(seed.vendor.id)


async def test_invalid_vendor_transition_is_rejected(client, seed):
    response = await client.post(
        f"{API}/admin/vendors/{seed.vendor.id}/status",
        json={"status": "pending"},
        headers=auth(seed.admin),
    )
    assert response.status_code == 422

    response = await client.post(
        f"{API}/admin/vendors/{seed.vendor.id}/status",
        json={"status": "suspended", "note": "Documents expired"},
        headers=auth(seed.admin),
    )
    assert response.json()["status"] == "suspended"

    response = await client.get(
        f"{API}/inventory/seat/{seed.seat.id}/availability",
        params={"start_date": "2025-01-01", "end_date": "2025-01-02"},
    )
    assert response.json()["reason"] == "vendor_not_approved"


async def test_location_hierarchy(client, seed):
    admin = auth(seed.admin)

    response = await client.post(f"{API}/locations/states", json={"name": "Karnataka"}, headers=admin)
    assert response.status_code == 201
    state_id = response.json()["id"]

    response = await client.post(f"{API}/locations/states", json={"name": "Karnataka"}, headers=admin)
    assert response.status_code == 422

    response = await client.post(
        f"{API}/locations/states", json={"name": "Kerala"}, headers=auth(seed.student)
    )
    assert response.status_code == 403

    response = await client.post(
        f"{API}/locations/states/{state_id}/cities", json={"name": "Bengaluru"}, headers=admin
    )
    city_id = response.json()["id"]

    for name in ("Koramangala", "Indiranagar"):
        response = await client.post(
            f"{API}/locations/cities/{city_id}/areas", json={"name": name}, headers=admin
        )
        assert response.status_code == 201

    response = await client.get(f"{API}/locations/states")
    assert [s["name"] for s in response.json()] == ["Karnataka"]

    response = await client.get(f"{API}/locations/states/{state_id}/cities")
    assert [c["name"] for c in response.json()] == ["Bengaluru"]

    response = await client.get(f"{API}/locations/cities/{city_id}/areas")
    assert [a["name"] for a in response.json()] == ["Indiranagar", "Koramangala"]

    response = await client.get(f"{API}/locations/states/{uuid.uuid4()}/cities")
    assert response.status_code == 404
