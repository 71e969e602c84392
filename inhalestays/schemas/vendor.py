"""Vendor Pydantic schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class VendorCreate(BaseModel):
    """Schema for a vendor application."""

    business_name: str = Field(..., min_length=1, max_length=200)
    contact_phone: str | None = Field(None, max_length=20)
    payout_cycle: Literal["daily", "weekly", "monthly"] = "monthly"


class VendorStatusUpdate(BaseModel):
    """Schema for an admin status decision."""

    status: Literal["pending", "approved", "rejected", "suspended"]
    note: str | None = Field(None, max_length=1000)
    commission_type: Literal["percentage", "fixed"] | None = None
    commission_value: Decimal | None = Field(None, ge=0)


class VendorResponse(BaseModel):
    """Schema for a vendor."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    business_name: str
    contact_phone: str | None = None
    status: str
    status_note: str | None = None
    commission_type: str
    commission_value: Decimal
    payout_cycle: str
    approved_at: datetime | None = None
