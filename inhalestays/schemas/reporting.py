"""Reporting schemas (read-only)."""

from datetime import date
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel


class PropertyOccupancy(BaseModel):
    """Occupancy of one cabin or hostel."""

    property_type: str
    property_id: UUID
    name: str
    total_units: int
    occupied_units: int
    held_units: int
    occupancy_rate: Decimal  # percent


class OccupancyReport(BaseModel):
    """Occupancy across properties on a date."""

    on_date: date
    properties: list[PropertyOccupancy]
    total_units: int
    occupied_units: int
    held_units: int
    occupancy_rate: Decimal


class RevenueByType(BaseModel):
    """Revenue for one booking type."""

    booking_type: str
    gross_amount: int
    refund_amount: int
    net_amount: int
    booking_count: int
    cancellation_count: int


class RevenueReport(BaseModel):
    """Revenue for a period."""

    period_start: date
    period_end: date
    currency: str
    by_type: list[RevenueByType]
    gross_amount: int
    refund_amount: int
    net_amount: int


class VendorPayout(BaseModel):
    """Payout line for one vendor."""

    vendor_id: UUID
    business_name: str
    commission_type: str
    commission_value: Decimal
    payout_cycle: str
    booking_count: int
    gross_amount: int
    commission_amount: int
    net_payout: int


class PayoutReport(BaseModel):
    """Vendor payouts for a period."""

    period_start: date
    period_end: date
    currency: str
    payouts: list[VendorPayout]
    total_gross: int
    total_commission: int
    total_net_payout: int
