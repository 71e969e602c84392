"""Admin panel endpoints."""

import logging
from datetime import UTC, datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inhalestays.api.deps import get_current_admin, get_db
from inhalestays.core.exceptions import NotFoundError
from inhalestays.domain.vendor_state import assert_vendor_transition
from inhalestays.models.user import User
from inhalestays.models.vendor import Vendor
from inhalestays.schemas.vendor import VendorResponse, VendorStatusUpdate

logger = logging.getLogger(__name__)

router = APIRouter()


# ============ VENDOR APPROVALS ============


@router.get("/vendors", response_model=list[VendorResponse])
async def list_vendors(
    admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    status: str | None = Query(None, pattern="^(pending|approved|rejected|suspended)$"),
) -> list[Vendor]:
    """List vendors, optionally by status."""
    query = select(Vendor).order_by(Vendor.created_at.asc())
    if status:
        query = query.where(Vendor.status == status)
    result = await db.execute(query)
    return list(result.scalars().all())


@router.post("/vendors/{vendor_id}/status", response_model=VendorResponse)
async def update_vendor_status(
    vendor_id: UUID,
    update: VendorStatusUpdate,
    admin: Annotated[User, Depends(get_current_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Vendor:
    """Approve, reject, suspend or reinstate a vendor.

    Suspending a vendor makes all of its units unbookable; existing
    bookings are unaffected.
    """
    result = await db.execute(select(Vendor).where(Vendor.id == vendor_id))
    vendor = result.scalar_one_or_none()
    if not vendor:
        raise NotFoundError("Vendor", str(vendor_id))

    assert_vendor_transition(vendor.status, update.status)

    vendor.status = update.status
    vendor.status_note = update.note
    if update.status == "approved":
        vendor.approved_at = datetime.now(UTC)
    if update.commission_type is not None:
        vendor.commission_type = update.commission_type
    if update.commission_value is not None:
        vendor.commission_value = update.commission_value

    await db.flush()
    logger.info("Vendor %s set to %s by admin %s", vendor.id, vendor.status, admin.id)
    return vendor
