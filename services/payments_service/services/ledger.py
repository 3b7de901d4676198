"""Member ledger reconciliation: payment create/edit/delete under a member row lock.

Every write here follows the same shape:

1. Lock the owning member row (``SELECT ... FOR UPDATE``)
2. Write the payment
3. Bring ``total_paid`` / last-payment fields in line
4. Re-derive ``payment_status`` and commit once

A failure anywhere rolls the whole unit back, so a payment is never visible
without its ledger effect.
"""

import uuid
from datetime import date, datetime
from typing import Optional, Sequence, Tuple

from libs.common.datetime_utils import day_bounds, utc_now
from libs.common.errors import Conflict, NotFound
from libs.common.logging import get_logger
from services.members_service.models import Member, MemberStatus, Plan, PTPlan
from services.members_service.services.member_service import (
    get_or_404,
    rederive_payment_status,
)
from services.payments_service.calculations import (
    calculate_membership_end_date,
    generate_receipt_number,
)
from services.payments_service.models import (
    MembershipAction,
    Payment,
    PaymentCategory,
    PaymentRecordStatus,
    PlanType,
)
from services.payments_service.schemas import PaymentCreate, PaymentUpdate
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

RECEIPT_ATTEMPTS = 5


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def lock_member(db: AsyncSession, member_id: uuid.UUID) -> Member:
    result = await db.execute(
        select(Member)
        .where(Member.id == member_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    member = result.scalar_one_or_none()
    if member is None:
        raise NotFound("Member not found")
    return member


async def _unique_receipt_number(db: AsyncSession, now: datetime) -> str:
    for _ in range(RECEIPT_ATTEMPTS):
        candidate = generate_receipt_number(now)
        exists = await db.execute(
            select(Payment.id).where(Payment.receipt_number == candidate)
        )
        if exists.scalar_one_or_none() is None:
            return candidate
    raise Conflict("Could not allocate a unique receipt number")


def starts_new_cycle(data: PaymentCreate) -> bool:
    """Renewals, and activations paid against the membership plan."""
    if data.is_renewal:
        return True
    return data.activate_membership and data.plan_type == PlanType.MEMBERSHIP


async def _start_new_cycle(
    db: AsyncSession, member: Member, data: PaymentCreate, now: datetime
) -> Optional[Plan]:
    """Assign the plan, reset the cycle total and reactivate the member."""
    plan_id = data.renewal_plan_id or data.plan_id or member.plan_id
    plan = await get_or_404(db, Plan, plan_id, "Plan") if plan_id else None

    start = data.membership_start_date or now
    member.membership_start_date = start
    if plan is not None:
        member.plan_id = plan.id
        member.total_plan_price = (
            data.custom_plan_price if data.custom_plan_price is not None else plan.price
        )
        member.membership_end_date = calculate_membership_end_date(start, plan.duration)

    member.membership_cycle = (member.membership_cycle or 1) + 1
    member.total_paid = 0
    member.status = MemberStatus.ACTIVE
    return plan


async def _refresh_last_payment(db: AsyncSession, member: Member) -> None:
    result = await db.execute(
        select(Payment)
        .where(
            Payment.member_id == member.id,
            Payment.payment_status == PaymentRecordStatus.COMPLETED,
        )
        .order_by(Payment.payment_date.desc(), Payment.created_at.desc())
        .limit(1)
    )
    latest = result.scalar_one_or_none()
    member.last_payment_date = latest.payment_date if latest else None
    member.last_payment_amount = latest.amount if latest else None


async def resum_member_totals(db: AsyncSession, member: Member) -> Member:
    """Full re-sum of completed payments in the member's current cycle."""
    await db.flush()
    result = await db.execute(
        select(func.coalesce(func.sum(Payment.amount), 0)).where(
            Payment.member_id == member.id,
            Payment.membership_cycle == member.membership_cycle,
            Payment.payment_status == PaymentRecordStatus.COMPLETED,
        )
    )
    member.total_paid = float(result.scalar_one())
    await _refresh_last_payment(db, member)
    rederive_payment_status(member)
    return member


# ---------------------------------------------------------------------------
# Write paths
# ---------------------------------------------------------------------------


async def create_payment(
    db: AsyncSession,
    data: PaymentCreate,
    *,
    created_by: str = "",
    now: Optional[datetime] = None,
) -> Payment:
    """
    Record a member payment and apply it to the ledger.

    1. Lock the member (NotFound if missing)
    2. Start a new membership cycle for renewals/activations
    3. Persist the payment with a fresh receipt number
    4. Add the amount to ``total_paid`` (completed payments only)
    5. Re-derive the payment status and commit
    """
    now = now or utc_now()
    try:
        member = await lock_member(db, data.member_id)

        action = MembershipAction.NONE
        cycle_plan = None
        if starts_new_cycle(data):
            cycle_plan = await _start_new_cycle(db, member, data, now)
            action = (
                MembershipAction.RENEWAL if data.is_renewal else MembershipAction.NEW
            )

        if data.plan_type == PlanType.PT_PLAN:
            plan_id = data.plan_id or member.pt_plan_id
            if data.plan_id:
                await get_or_404(db, PTPlan, data.plan_id, "PT plan")
        else:
            if cycle_plan is not None:
                plan_id = cycle_plan.id
            else:
                plan_id = data.plan_id or member.plan_id
                if data.plan_id:
                    await get_or_404(db, Plan, data.plan_id, "Plan")

        payment = Payment(
            receipt_number=await _unique_receipt_number(db, now),
            member_id=member.id,
            amount=data.amount,
            payment_date=data.payment_date or now,
            payment_mode=data.payment_mode,
            payment_category=data.payment_category,
            plan_type=data.plan_type,
            plan_id=plan_id,
            membership_action=action,
            payment_status=data.payment_status,
            membership_cycle=member.membership_cycle,
            plan_price=member.total_plan_price or 0,
            transaction_id=data.transaction_id,
            notes=data.notes,
            created_by=created_by,
        )
        db.add(payment)

        if payment.payment_status == PaymentRecordStatus.COMPLETED:
            member.total_paid = (member.total_paid or 0) + data.amount
            member.last_payment_date = payment.payment_date
            member.last_payment_amount = data.amount

        rederive_payment_status(member)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await db.refresh(payment)
    logger.info(
        "Recorded payment %s: member=%s amount=%s action=%s cycle=%d total_paid=%s status=%s",
        payment.receipt_number,
        member.member_id,
        payment.amount,
        action.value,
        member.membership_cycle,
        member.total_paid,
        member.payment_status.value,
    )
    return payment


async def get_payment_or_404(db: AsyncSession, payment_id: uuid.UUID) -> Payment:
    payment = await db.get(Payment, payment_id)
    if payment is None:
        raise NotFound("Payment not found")
    return payment


async def update_payment(
    db: AsyncSession, payment_id: uuid.UUID, data: PaymentUpdate
) -> Payment:
    """Edit a payment, then re-sum the owner's current cycle in the same transaction."""
    payment = await get_payment_or_404(db, payment_id)
    try:
        member = await lock_member(db, payment.member_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(payment, field, value)
        await resum_member_totals(db, member)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await db.refresh(payment)
    logger.info(
        "Updated payment %s; member %s total_paid=%s status=%s",
        payment.receipt_number,
        member.member_id,
        member.total_paid,
        member.payment_status.value,
    )
    return payment


async def delete_payment(db: AsyncSession, payment_id: uuid.UUID) -> None:
    payment = await get_payment_or_404(db, payment_id)
    receipt = payment.receipt_number
    try:
        member = await lock_member(db, payment.member_id)
        await db.delete(payment)
        await resum_member_totals(db, member)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Deleted payment %s; member %s total_paid=%s status=%s",
        receipt,
        member.member_id,
        member.total_paid,
        member.payment_status.value,
    )


async def recompute_member_totals(db: AsyncSession, member_id: uuid.UUID) -> Member:
    """Admin repair: rebuild the member's ledger fields from their payments."""
    try:
        member = await lock_member(db, member_id)
        before = member.total_paid
        await resum_member_totals(db, member)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    if before != member.total_paid:
        logger.warning(
            "Ledger drift corrected for member %s: total_paid %s -> %s",
            member.member_id,
            before,
            member.total_paid,
        )
    return member


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def list_payments(
    db: AsyncSession,
    *,
    member_id: Optional[uuid.UUID] = None,
    plan_type: Optional[PlanType] = None,
    payment_status: Optional[PaymentRecordStatus] = None,
    limit: int = 100,
    offset: int = 0,
) -> Sequence[Payment]:
    query = select(Payment)
    if member_id:
        query = query.where(Payment.member_id == member_id)
    if plan_type:
        query = query.where(Payment.plan_type == plan_type)
    if payment_status:
        query = query.where(Payment.payment_status == payment_status)
    query = query.order_by(Payment.created_at.desc()).offset(offset).limit(limit)
    result = await db.execute(query)
    return result.scalars().all()


async def member_payment_history(
    db: AsyncSession,
    member_id: uuid.UUID,
    *,
    category: Optional[PaymentCategory] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: int = 50,
    offset: int = 0,
) -> Tuple[Member, Sequence[Payment], int]:
    """Newest-first payments for one member plus the total matching count.

    ``end_date`` is inclusive of the whole local day.
    """
    member = await get_or_404(db, Member, member_id, "Member")

    conditions = [Payment.member_id == member.id]
    if category:
        conditions.append(Payment.payment_category == category)
    if start_date:
        conditions.append(Payment.payment_date >= day_bounds(start_date)[0])
    if end_date:
        conditions.append(Payment.payment_date < day_bounds(end_date)[1])

    total = (
        await db.execute(select(func.count()).select_from(Payment).where(*conditions))
    ).scalar_one()
    result = await db.execute(
        select(Payment)
        .where(*conditions)
        .order_by(Payment.payment_date.desc())
        .offset(offset)
        .limit(limit)
    )
    return member, result.scalars().all(), total
