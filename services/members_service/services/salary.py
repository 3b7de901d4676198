"""Trainer salary and commission derivation."""

import calendar
import math
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Sequence, Tuple

from dateutil.relativedelta import relativedelta
from libs.common.datetime_utils import day_bounds, local_date
from libs.common.logging import get_logger
from services.attendance_service.models import (
    TrainerAttendance,
    TrainerAttendanceStatus,
)
from services.members_service.models import (
    CommissionType,
    Member,
    MemberStatus,
    PTPlan,
    Trainer,
)
from services.members_service.services.member_service import get_or_404
from services.payments_service.models import Payment, PaymentRecordStatus, PlanType
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


@dataclass
class PTClient:
    """An active member training with the trainer under a PT plan."""

    member_id: str
    name: str
    plan_name: str
    plan_price: float


@dataclass
class SalaryBreakdown:
    base_salary: float
    commission_amount: int
    total_salary: float
    active_members_count: int
    member_details: List[PTClient] = field(default_factory=list)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def calculate_salary(
    base_salary: float,
    commission_type: CommissionType,
    commission_value: float,
    pt_prices: Sequence[float],
) -> tuple[int, float]:
    """
    Return ``(commission_amount, total_salary)``.

    Fixed commission pays ``commission_value`` per PT client; percentage pays
    ``commission_value`` percent of the clients' summed PT plan prices. The
    commission is rounded half-up to a whole amount before adding the base.
    """
    base = base_salary or 0
    rate = commission_value or 0

    if commission_type == CommissionType.FIXED:
        commission = len(pt_prices) * rate
    elif commission_type == CommissionType.PERCENTAGE:
        commission = sum(price or 0 for price in pt_prices) * rate / 100
    else:
        commission = 0

    commission_amount = round_half_up(commission)
    return commission_amount, base + commission_amount


async def get_trainer_salary(db: AsyncSession, trainer_id: uuid.UUID) -> SalaryBreakdown:
    """Gather the trainer's active PT clients and derive this month's pay."""
    trainer = await get_or_404(db, Trainer, trainer_id, "Trainer")

    result = await db.execute(
        select(Member, PTPlan)
        .join(PTPlan, Member.pt_plan_id == PTPlan.id)
        .where(
            Member.trainer_id == trainer.id,
            Member.status == MemberStatus.ACTIVE,
        )
        .order_by(Member.member_id)
    )
    clients = [
        PTClient(
            member_id=member.member_id,
            name=member.name,
            plan_name=pt_plan.name,
            plan_price=pt_plan.price or 0,
        )
        for member, pt_plan in result.all()
    ]

    commission_amount, total = calculate_salary(
        trainer.base_salary,
        trainer.commission_type,
        trainer.commission_value,
        [client.plan_price for client in clients],
    )
    logger.info(
        "Salary for trainer %s: base=%s commission=%s clients=%d",
        trainer.trainer_id,
        trainer.base_salary,
        commission_amount,
        len(clients),
    )
    return SalaryBreakdown(
        base_salary=trainer.base_salary or 0,
        commission_amount=commission_amount,
        total_salary=total,
        active_members_count=len(clients),
        member_details=clients,
    )


# ---------------------------------------------------------------------------
# Clients and history
# ---------------------------------------------------------------------------

COMMISSION_CUTOFF_DAY = 20


@dataclass
class MonthlyPay:
    year: int
    month: int
    days_in_month: int
    leave_days: int
    base_salary_prorated: float
    commission_amount: int
    total_payable: float


async def trainer_clients(db: AsyncSession, trainer_id: uuid.UUID) -> List[Member]:
    """Every member assigned to the trainer, whatever their status."""
    await get_or_404(db, Trainer, trainer_id, "Trainer")
    result = await db.execute(
        select(Member)
        .where(Member.trainer_id == trainer_id)
        .order_by(Member.member_id)
    )
    return list(result.scalars().all())


async def pt_payment_history(
    db: AsyncSession, trainer_id: uuid.UUID
) -> List[Tuple[Payment, str, str]]:
    """PT payments taken from the trainer's members, newest first."""
    await get_or_404(db, Trainer, trainer_id, "Trainer")
    result = await db.execute(
        select(Payment, Member.member_id, Member.name)
        .join(Member, Payment.member_id == Member.id)
        .where(
            Member.trainer_id == trainer_id,
            Payment.plan_type == PlanType.PT_PLAN,
        )
        .order_by(Payment.payment_date.desc())
    )
    return [tuple(row) for row in result.all()]


def commission_window(year: int, month: int) -> Tuple[date, date]:
    """
    Local days whose PT payments earn commission in ``month``.

    The cycle runs from the 21st of the previous month to the 20th of this
    one, both inclusive.
    """
    end = date(year, month, COMMISSION_CUTOFF_DAY)
    start = end - relativedelta(months=1) + relativedelta(days=1)
    return start, end


async def _monthly_pay(
    db: AsyncSession, trainer: Trainer, year: int, month: int
) -> MonthlyPay:
    days_in_month = calendar.monthrange(year, month)[1]
    leave_days = (
        await db.execute(
            select(func.count(TrainerAttendance.id)).where(
                TrainerAttendance.trainer_id == trainer.id,
                TrainerAttendance.status == TrainerAttendanceStatus.LEAVE,
                TrainerAttendance.date >= date(year, month, 1),
                TrainerAttendance.date <= date(year, month, days_in_month),
            )
        )
    ).scalar_one()
    base = trainer.base_salary or 0
    prorated = round(base / days_in_month * (days_in_month - leave_days), 2)

    start, end = commission_window(year, month)
    result = await db.execute(
        select(Payment.amount)
        .join(Member, Payment.member_id == Member.id)
        .where(
            Member.trainer_id == trainer.id,
            Payment.plan_type == PlanType.PT_PLAN,
            Payment.payment_status == PaymentRecordStatus.COMPLETED,
            Payment.payment_date >= day_bounds(start)[0],
            Payment.payment_date < day_bounds(end)[1],
        )
    )
    commission_amount, total = calculate_salary(
        prorated,
        trainer.commission_type,
        trainer.commission_value,
        list(result.scalars().all()),
    )
    return MonthlyPay(
        year=year,
        month=month,
        days_in_month=days_in_month,
        leave_days=leave_days,
        base_salary_prorated=prorated,
        commission_amount=commission_amount,
        total_payable=total,
    )


async def salary_history(
    db: AsyncSession,
    trainer_id: uuid.UUID,
    months: int = 12,
    *,
    now: Optional[datetime] = None,
) -> List[MonthlyPay]:
    """
    Pay for the last ``months`` calendar months, current month first.

    Unlike ``get_trainer_salary`` this is backward-looking: base salary is
    pro-rated by leave days in the month and commission comes from completed
    PT payments inside the month's commission window.
    """
    trainer = await get_or_404(db, Trainer, trainer_id, "Trainer")
    first = local_date(now).replace(day=1)
    history = []
    for offset in range(months):
        current = first - relativedelta(months=offset)
        history.append(await _monthly_pay(db, trainer, current.year, current.month))
    return history
