"""Location Pydantic schemas."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class LocationCreate(BaseModel):
    """Schema for creating a state, city or area."""

    name: str = Field(..., min_length=1, max_length=100)


class LocationResponse(BaseModel):
    """Schema for a state, city or area."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    is_active: bool
