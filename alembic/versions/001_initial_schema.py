"""Initial database schema.

Revision ID: 001_initial
Revises: None
Create Date: 2025-01-06

Creates all initial tables for the InhaleStays platform:
- User profiles and vendors
- Location hierarchy
- Cabins/seats and hostels/rooms/beds
- Bookings and transactions

Bookings additionally get PostgreSQL exclusion constraints so that two
pending/completed bookings can never overlap on the same seat or bed, and
transactions get a trigger that rejects UPDATE and DELETE.
"""

from typing import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps(with_updated: bool = True) -> list[sa.Column]:
    columns = [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]
    if with_updated:
        columns.append(
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now())
        )
    return columns


def upgrade() -> None:
    """Create all database tables."""
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")

    # ==================== USERS ====================
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(255), unique=True, nullable=False, index=True),
        sa.Column("phone", sa.String(20), index=True),
        sa.Column("full_name", sa.String(200)),
        sa.Column("role", sa.String(20), nullable=False, server_default="student"),
        sa.Column("is_active", sa.Boolean, server_default=sa.true()),
        sa.Column("push_token", sa.Text),
        *_timestamps(),
    )

    op.create_table(
        "vendors",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id"),
            unique=True,
            nullable=False,
            index=True,
        ),
        sa.Column("business_name", sa.String(200), nullable=False),
        sa.Column("contact_phone", sa.String(20)),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending", index=True),
        sa.Column("status_note", sa.Text),
        sa.Column("commission_type", sa.String(20), nullable=False, server_default="percentage"),
        sa.Column("commission_value", sa.Numeric(10, 2), nullable=False, server_default="10.00"),
        sa.Column("payout_cycle", sa.String(20), nullable=False, server_default="monthly"),
        sa.Column("approved_at", sa.DateTime(timezone=True)),
        *_timestamps(),
    )

    # ==================== LOCATIONS ====================
    op.create_table(
        "states",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(100), unique=True, nullable=False),
        sa.Column("is_active", sa.Boolean, server_default=sa.true()),
        *_timestamps(with_updated=False),
    )

    op.create_table(
        "cities",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "state_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("states.id"),
            nullable=False,
            index=True,
        ),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("is_active", sa.Boolean, server_default=sa.true()),
        *_timestamps(with_updated=False),
        sa.UniqueConstraint("state_id", "name", name="uq_city_state_name"),
    )

    op.create_table(
        "areas",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "city_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("cities.id"),
            nullable=False,
            index=True,
        ),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("is_active", sa.Boolean, server_default=sa.true()),
        *_timestamps(with_updated=False),
        sa.UniqueConstraint("city_id", "name", name="uq_area_city_name"),
    )

    # ==================== CABINS ====================
    op.create_table(
        "cabins",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "vendor_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("vendors.id"),
            nullable=False,
            index=True,
        ),
        sa.Column("area_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("areas.id"), index=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("address", sa.Text),
        sa.Column("is_booking_enabled", sa.Boolean, server_default=sa.true()),
        sa.Column("is_active", sa.Boolean, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "seats",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "cabin_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("cabins.id"),
            nullable=False,
            index=True,
        ),
        sa.Column("number", sa.Integer, nullable=False),
        sa.Column("price", sa.Integer, nullable=False),
        sa.Column("is_hot_selling", sa.Boolean, server_default=sa.false()),
        sa.Column("is_available", sa.Boolean, server_default=sa.true()),
        sa.Column("unavailable_until", sa.Date),
        sa.Column("is_active", sa.Boolean, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint("cabin_id", "number", name="uq_seat_cabin_number"),
    )

    # ==================== HOSTELS ====================
    op.create_table(
        "hostels",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "vendor_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("vendors.id"),
            nullable=False,
            index=True,
        ),
        sa.Column("area_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("areas.id"), index=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text),
        sa.Column("address", sa.Text),
        sa.Column("gender", sa.String(10)),
        sa.Column("is_booking_enabled", sa.Boolean, server_default=sa.true()),
        sa.Column("is_active", sa.Boolean, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        "hostel_rooms",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "hostel_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("hostels.id"),
            nullable=False,
            index=True,
        ),
        sa.Column("room_number", sa.String(20), nullable=False),
        sa.Column("floor", sa.Integer),
        sa.Column("is_active", sa.Boolean, server_default=sa.true()),
        *_timestamps(with_updated=False),
        sa.UniqueConstraint("hostel_id", "room_number", name="uq_room_hostel_number"),
    )

    op.create_table(
        "hostel_beds",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "room_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("hostel_rooms.id"),
            nullable=False,
            index=True,
        ),
        sa.Column("number", sa.Integer, nullable=False),
        sa.Column("price", sa.Integer, nullable=False),
        sa.Column("sharing_type", sa.String(20)),
        sa.Column("is_available", sa.Boolean, server_default=sa.true()),
        sa.Column("unavailable_until", sa.Date),
        sa.Column("is_active", sa.Boolean, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint("room_id", "number", name="uq_bed_room_number"),
    )

    # ==================== BOOKINGS ====================
    op.create_table(
        "bookings",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("booking_number", sa.String(20), unique=True, nullable=False, index=True),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id"),
            nullable=False,
            index=True,
        ),
        sa.Column("booking_type", sa.String(10), nullable=False),
        sa.Column("seat_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("seats.id"), index=True),
        sa.Column(
            "bed_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("hostel_beds.id"), index=True
        ),
        sa.Column("start_date", sa.Date, nullable=False, index=True),
        sa.Column("end_date", sa.Date, nullable=False, index=True),
        sa.Column("booking_duration", sa.String(10), nullable=False),
        sa.Column("duration_count", sa.Integer, nullable=False, server_default="1"),
        sa.Column("unit_price", sa.Integer, nullable=False),
        sa.Column("total_price", sa.Integer, nullable=False),
        sa.Column("currency", sa.String(3), server_default="INR"),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default="pending", index=True),
        sa.Column("payment_method", sa.String(20)),
        sa.Column("gateway_order_id", sa.String(100), index=True),
        sa.Column("gateway_payment_id", sa.String(100)),
        sa.Column("gateway_signature", sa.String(200)),
        sa.Column("hold_expires_at", sa.DateTime(timezone=True), index=True),
        sa.Column("failure_reason", sa.String(50)),
        sa.Column("cancelled_by", sa.String(10)),
        sa.Column("cancellation_reason", sa.Text),
        sa.Column("paid_at", sa.DateTime(timezone=True)),
        sa.Column("failed_at", sa.DateTime(timezone=True)),
        sa.Column("cancelled_at", sa.DateTime(timezone=True)),
        *_timestamps(),
        sa.CheckConstraint(
            "(seat_id IS NOT NULL AND bed_id IS NULL) OR (seat_id IS NULL AND bed_id IS NOT NULL)",
            name="ck_booking_single_unit",
        ),
        sa.CheckConstraint("end_date > start_date", name="ck_booking_date_range"),
        sa.CheckConstraint("duration_count >= 1", name="ck_booking_duration_count"),
    )

    # Half-open [start, end) ranges; adjacent bookings do not collide
    for column in ("seat_id", "bed_id"):
        op.execute(
            f"""
            ALTER TABLE bookings ADD CONSTRAINT ex_booking_{column}_overlap
            EXCLUDE USING gist (
                {column} WITH =,
                daterange(start_date, end_date, '[)') WITH &&
            )
            WHERE ({column} IS NOT NULL AND payment_status IN ('pending', 'completed'))
            """
        )

    # ==================== TRANSACTIONS ====================
    op.create_table(
        "transactions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "booking_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("bookings.id"),
            nullable=False,
            index=True,
        ),
        sa.Column(
            "user_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id"),
            nullable=False,
            index=True,
        ),
        sa.Column("booking_type", sa.String(10), nullable=False),
        sa.Column("transaction_type", sa.String(20), nullable=False, index=True),
        sa.Column("amount", sa.Integer, nullable=False),
        sa.Column("currency", sa.String(3), server_default="INR"),
        sa.Column("payment_method", sa.String(20)),
        sa.Column("gateway_payment_id", sa.String(100)),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            index=True,
        ),
        sa.CheckConstraint("amount > 0", name="ck_transaction_amount_positive"),
    )

    op.execute(
        """
        CREATE FUNCTION reject_transaction_change() RETURNS trigger AS $$
        BEGIN
            RAISE EXCEPTION 'transactions are append-only';
        END;
        $$ LANGUAGE plpgsql
        """
    )
    op.execute(
        """
        CREATE TRIGGER transactions_append_only
        BEFORE UPDATE OR DELETE ON transactions
        FOR EACH ROW EXECUTE FUNCTION reject_transaction_change()
        """
    )


def downgrade() -> None:
    """Drop all database tables in reverse order."""
    op.execute("DROP TRIGGER IF EXISTS transactions_append_only ON transactions")
    op.execute("DROP FUNCTION IF EXISTS reject_transaction_change()")
    op.drop_table("transactions")
    op.drop_table("bookings")
    op.drop_table("hostel_beds")
    op.drop_table("hostel_rooms")
    op.drop_table("hostels")
    op.drop_table("seats")
    op.drop_table("cabins")
    op.drop_table("areas")
    op.drop_table("cities")
    op.drop_table("states")
    op.drop_table("vendors")
    op.drop_table("users")
