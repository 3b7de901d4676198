"""Pure ledger rules: payment status, balance, receipt numbers, membership dates.

``calculate_payment_status`` is the only place a member's payment status is
decided. Every write path that touches ``total_paid``, ``total_plan_price`` or
``admission_fee_amount`` re-derives the status through it.
"""

from __future__ import annotations

import random
from datetime import datetime
from typing import Optional

from libs.common.config import get_settings
from libs.common.datetime_utils import add_months, ensure_aware, local_date, utc_now
from services.members_service.models.enums import MemberPaymentStatus

EXPIRING_SOON_DAYS = 7


def calculate_payment_status(
    total_plan_price: float,
    total_paid: Optional[float],
    admission_fee: float = 0,
) -> MemberPaymentStatus:
    total_due = (total_plan_price or 0) + (admission_fee or 0)

    # Free plan with no admission fee
    if total_due == 0:
        return MemberPaymentStatus.PAID

    if not total_paid:
        return MemberPaymentStatus.UNPAID
    if total_paid >= total_due:
        return MemberPaymentStatus.PAID
    return MemberPaymentStatus.PARTIAL


def calculate_balance(
    total_plan_price: float,
    total_paid: Optional[float],
    admission_fee: float = 0,
) -> float:
    """Remaining amount due; never negative even after overpayment."""
    total_due = (total_plan_price or 0) + (admission_fee or 0)
    return max(0, total_due - (total_paid or 0))


def generate_receipt_number(now: Optional[datetime] = None) -> str:
    """``RCP-YYYYMMDD-NNNNN`` with five random digits."""
    prefix = get_settings().RECEIPT_PREFIX
    date_str = local_date(now).strftime("%Y%m%d")
    suffix = random.randint(10000, 99999)
    return f"{prefix}-{date_str}-{suffix}"


def calculate_membership_end_date(start_date: datetime, duration_months: int) -> datetime:
    return add_months(ensure_aware(start_date), duration_months)


def get_membership_status(
    end_date: Optional[datetime], now: Optional[datetime] = None
) -> str:
    """Display status from the end date: Pending, Expired, Expiring Soon or Active.

    Compares calendar days so a membership ending later today is still active.
    """
    if end_date is None:
        return "Pending"

    days_remaining = (local_date(end_date) - local_date(now or utc_now())).days
    if days_remaining < 0:
        return "Expired"
    if days_remaining <= EXPIRING_SOON_DAYS:
        return "Expiring Soon"
    return "Active"
