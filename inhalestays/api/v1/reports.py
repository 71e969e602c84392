"""Reporting endpoints (read-only).

Admins see all vendors; vendors see their own units only.
"""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from inhalestays.api.deps import get_current_vendor_or_admin, get_db
from inhalestays.models.user import User
from inhalestays.schemas.reporting import OccupancyReport, PayoutReport, RevenueReport
from inhalestays.services.availability_service import utcnow
from inhalestays.services.reporting_service import reporting_service

router = APIRouter()


def _vendor_scope(user: User):
    return None if user.role == "admin" else user.id


@router.get("/occupancy", response_model=OccupancyReport)
async def get_occupancy(
    current_user: Annotated[User, Depends(get_current_vendor_or_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    on_date: date | None = None,
) -> dict:
    """Per-property occupancy on a date (default today)."""
    return await reporting_service.get_occupancy(
        db,
        on_date or utcnow().date(),
        vendor_user_id=_vendor_scope(current_user),
    )


@router.get("/revenue", response_model=RevenueReport)
async def get_revenue(
    period_start: date,
    period_end: date,
    current_user: Annotated[User, Depends(get_current_vendor_or_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Booking revenue net of cancellation refunds for an inclusive date period."""
    return await reporting_service.get_revenue(
        db, period_start, period_end, vendor_user_id=_vendor_scope(current_user)
    )


@router.get("/payouts", response_model=PayoutReport)
async def get_payouts(
    period_start: date,
    period_end: date,
    current_user: Annotated[User, Depends(get_current_vendor_or_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Vendor payouts for an inclusive date period."""
    return await reporting_service.get_vendor_payouts(
        db, period_start, period_end, vendor_user_id=_vendor_scope(current_user)
    )
