"""Shared fixtures: in-memory SQLite database, seeded inventory, API client."""

import json
import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"
os.environ["RAZORPAY_KEY_ID"] = "rzp_test_key"
os.environ["RAZORPAY_KEY_SECRET"] = "test_key_secret"
os.environ["RAZORPAY_WEBHOOK_SECRET"] = "test_webhook_secret"
os.environ.pop("FIREBASE_SERVER_KEY", None)

from datetime import UTC, datetime  # noqa: E402
from decimal import Decimal  # noqa: E402
from types import SimpleNamespace  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import inhalestays.models  # noqa: E402,F401
from inhalestays.core.security import create_access_token  # noqa: E402
from inhalestays.database import Base, get_db  # noqa: E402
from inhalestays.gateways.razorpay import RazorpayGateway  # noqa: E402
from inhalestays.main import app  # noqa: E402
from inhalestays.models.inventory import Cabin, Hostel, HostelBed, HostelRoom, Seat  # noqa: E402
from inhalestays.models.user import User  # noqa: E402
from inhalestays.models.vendor import Vendor  # noqa: E402
from inhalestays.services.gateway_service import gateway_service  # noqa: E402

KEY_SECRET = "test_key_secret"
WEBHOOK_SECRET = "test_webhook_secret"
SEAT_PRICE = 1000
BED_PRICE = 6000


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
async def seed(session_maker):
    """Users, an approved vendor, a cabin with one seat and a hostel with one bed."""
    now = datetime.now(UTC)
    async with session_maker() as session:
        admin = User(email="admin@inhalestays.in", role="admin", created_at=now)
        student = User(email="student@inhalestays.in", role="student", created_at=now)
        other = User(email="other@inhalestays.in", role="student", created_at=now)
        vendor_user = User(email="vendor@inhalestays.in", role="vendor", created_at=now)
        session.add_all([admin, student, other, vendor_user])
        await session.flush()

        vendor = Vendor(
            user_id=vendor_user.id,
            business_name="Quiet Corner Study Rooms",
            status="approved",
            commission_type="percentage",
            commission_value=Decimal("10.00"),
            approved_at=now,
        )
        session.add(vendor)
        await session.flush()

        cabin = Cabin(vendor_id=vendor.id, name="Quiet Corner")
        hostel = Hostel(vendor_id=vendor.id, name="Lakeview Hostel", gender="co-ed")
        session.add_all([cabin, hostel])
        await session.flush()

        seat = Seat(cabin_id=cabin.id, number=1, price=SEAT_PRICE)
        room = HostelRoom(hostel_id=hostel.id, room_number="101", floor=1)
        session.add_all([seat, room])
        await session.flush()

        bed = HostelBed(room_id=room.id, number=1, price=BED_PRICE, sharing_type="double")
        session.add(bed)
        await session.commit()

    return SimpleNamespace(
        admin=admin,
        student=student,
        other=other,
        vendor_user=vendor_user,
        vendor=vendor,
        cabin=cabin,
        seat=seat,
        hostel=hostel,
        room=room,
        bed=bed,
    )


def make_token(user: User) -> str:
    return create_access_token({"sub": str(user.id), "email": user.email})


def auth(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user)}"}


@pytest.fixture
async def client(session_maker):
    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def razorpay_orders():
    """Route gateway order creation to an in-process mock of the Orders API."""
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        calls.append({"auth": request.headers.get("Authorization"), "body": body})
        return httpx.Response(
            200,
            json={
                "id": f"order_TEST{len(calls):04d}",
                "amount": body["amount"],
                "currency": body["currency"],
                "receipt": body["receipt"],
                "status": "created",
            },
        )

    gateway_service.register(
        RazorpayGateway(
            key_id="rzp_test_key",
            key_secret=KEY_SECRET,
            webhook_secret=WEBHOOK_SECRET,
            transport=httpx.MockTransport(handler),
        )
    )
    yield calls
    gateway_service.reset()
