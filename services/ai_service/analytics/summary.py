"""Financial summary over a trailing window of months.

Only completed payments count as revenue. The outstanding balance and member
counts are a snapshot of the current state, not windowed.
"""

from collections import defaultdict
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import add_months, local_tz, utc_now
from services.ai_service.schemas import (
    FinancialSummary,
    MonthlyRevenue,
    RevenueBreakdown,
    TrainerPayouts,
)
from services.members_service.models import Member
from services.payments_service.models import (
    Payment,
    PaymentRecordStatus,
    PlanType,
    TrainerPayment,
)
from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession


def margin(revenue: float, cost: float) -> float:
    """Percent of ``revenue`` left after ``cost``, two decimals; 0 without revenue."""
    if revenue <= 0:
        return 0.0
    return round((revenue - cost) / revenue * 100, 2)


async def _member_counts(db: AsyncSession, column) -> dict[str, int]:
    result = await db.execute(select(column, func.count()).group_by(column))
    return {key.value: count for key, count in result.all()}


async def financial_summary(
    db: AsyncSession, months: int = 12, *, now: Optional[datetime] = None
) -> FinancialSummary:
    now = now or utc_now()
    start = add_months(now, -months)

    result = await db.execute(
        select(
            Payment.amount,
            Payment.payment_date,
            Payment.plan_type,
            Payment.payment_category,
        ).where(
            Payment.payment_status == PaymentRecordStatus.COMPLETED,
            Payment.payment_date >= start,
            Payment.payment_date <= now,
        )
    )
    rows = result.all()

    revenue = RevenueBreakdown()
    by_category: dict[str, float] = defaultdict(float)
    by_month: dict[str, float] = defaultdict(float)
    tz = local_tz()
    for amount, paid_at, plan_type, category in rows:
        if plan_type == PlanType.PT_PLAN:
            revenue.pt += amount
        else:
            revenue.membership += amount
        by_category[category.value] += amount
        by_month[paid_at.astimezone(tz).strftime("%Y-%m")] += amount
    revenue.total = revenue.membership + revenue.pt

    payout_row = (
        await db.execute(
            select(
                func.coalesce(func.sum(TrainerPayment.amount), 0),
                func.coalesce(func.sum(TrainerPayment.base_salary), 0),
                func.coalesce(func.sum(TrainerPayment.commission_amount), 0),
                func.count(TrainerPayment.id),
            ).where(
                TrainerPayment.payment_date >= start,
                TrainerPayment.payment_date <= now,
            )
        )
    ).one()
    payouts = TrainerPayouts(
        total=payout_row[0],
        base_salary=payout_row[1],
        commission=payout_row[2],
        count=payout_row[3],
    )

    due = Member.total_plan_price + Member.admission_fee_amount - Member.total_paid
    outstanding = (
        await db.execute(select(func.coalesce(func.sum(case((due > 0, due), else_=0)), 0)))
    ).scalar_one()
    members_total = (await db.execute(select(func.count(Member.id)))).scalar_one()

    return FinancialSummary(
        months=months,
        start_date=start,
        end_date=now,
        revenue=revenue,
        revenue_by_category=dict(by_category),
        monthly_revenue=[
            MonthlyRevenue(month=month, amount=amount)
            for month, amount in sorted(by_month.items())
        ],
        payment_count=len(rows),
        outstanding_balance=float(outstanding),
        members_total=members_total,
        members_by_status=await _member_counts(db, Member.status),
        members_by_payment_status=await _member_counts(db, Member.payment_status),
        trainer_payouts=payouts,
        pt_margin=margin(revenue.pt, payouts.commission),
        membership_margin=margin(revenue.membership, payouts.base_salary),
    )
