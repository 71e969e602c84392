"""Vendor commission calculation.

Each vendor carries its own commission settings:
- percentage: commission_value percent of gross booking revenue
- fixed: commission_value paise per paid booking, never more than gross
"""

from decimal import ROUND_HALF_UP, Decimal
from enum import Enum


class CommissionType(str, Enum):
    """Vendor commission types."""

    PERCENTAGE = "percentage"
    FIXED = "fixed"


class CommissionService:
    """Service for calculating platform commission and vendor payouts."""

    def calculate_commission(
        self,
        commission_type: str | CommissionType,
        commission_value: Decimal,
        gross_amount: int,
        booking_count: int,
    ) -> int:
        """Calculate commission in paise.

        Args:
            commission_type: percentage or fixed
            commission_value: Percent, or paise per booking
            gross_amount: Gross booking revenue in paise
            booking_count: Number of paid bookings in the gross

        Returns:
            int: Commission amount in paise
        """
        commission_type = CommissionType(commission_type)
        value = Decimal(commission_value)

        if commission_type == CommissionType.PERCENTAGE:
            commission = (Decimal(gross_amount) * value / Decimal("100")).quantize(
                Decimal("1"), rounding=ROUND_HALF_UP
            )
        else:
            commission = (value * booking_count).quantize(Decimal("1"), rounding=ROUND_HALF_UP)

        return min(int(commission), gross_amount)

    def calculate_payout(
        self,
        commission_type: str | CommissionType,
        commission_value: Decimal,
        gross_amount: int,
        booking_count: int,
    ) -> dict:
        """Gross, commission and net payout for a vendor."""
        commission = self.calculate_commission(
            commission_type, commission_value, gross_amount, booking_count
        )
        return {
            "gross_amount": gross_amount,
            "commission_amount": commission,
            "net_payout": gross_amount - commission,
        }


commission_service = CommissionService()
