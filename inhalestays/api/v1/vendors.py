"""Vendor registration endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inhalestays.api.deps import get_current_active_user, get_db
from inhalestays.core.exceptions import NotFoundError, ValidationError
from inhalestays.domain.vendor_state import assert_vendor_transition
from inhalestays.models.user import User
from inhalestays.models.vendor import Vendor
from inhalestays.schemas.vendor import VendorCreate, VendorResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=VendorResponse, status_code=status.HTTP_201_CREATED)
async def register_vendor(
    vendor_data: VendorCreate,
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Vendor:
    """Apply as a vendor, or re-apply after rejection.

    The application starts pending until an admin approves it.
    """
    if current_user.role == "admin":
        raise ValidationError("Admins cannot register as vendors")

    result = await db.execute(select(Vendor).where(Vendor.user_id == current_user.id))
    vendor = result.scalar_one_or_none()

    if vendor:
        assert_vendor_transition(vendor.status, "pending")
        vendor.status = "pending"
        vendor.status_note = None
        for field, value in vendor_data.model_dump().items():
            setattr(vendor, field, value)
    else:
        vendor = Vendor(user_id=current_user.id, status="pending", **vendor_data.model_dump())
        db.add(vendor)

    current_user.role = "vendor"
    await db.flush()
    logger.info("Vendor application %s from user %s", vendor.id, current_user.id)
    return vendor


@router.get("/me", response_model=VendorResponse)
async def get_my_vendor(
    current_user: Annotated[User, Depends(get_current_active_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Vendor:
    """Get the caller's vendor record."""
    result = await db.execute(select(Vendor).where(Vendor.user_id == current_user.id))
    vendor = result.scalar_one_or_none()
    if not vendor:
        raise NotFoundError("Vendor")
    return vendor
