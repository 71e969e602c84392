"""User-related Pydantic schemas."""

import re
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class UserUpdate(BaseModel):
    """Schema for updating the caller's profile."""

    full_name: str | None = Field(None, max_length=200)
    phone: str | None = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str | None) -> str | None:
        if v is None:
            return v
        # Indian mobile format: +91XXXXXXXXXX
        pattern = r"^\+91[0-9]{10}$"
        if not re.match(pattern, v):
            raise ValueError("Phone must be in format +91XXXXXXXXXX")
        return v


class UserResponse(BaseModel):
    """Schema for user response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: EmailStr
    phone: str | None = None
    full_name: str | None = None
    role: str
    is_active: bool
    created_at: datetime | None = None


class PushTokenUpdate(BaseModel):
    """Schema for registering a device push token."""

    token: str = Field(..., min_length=1, max_length=4096)
