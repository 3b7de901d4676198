"""
Member ledger operations: registration, updates, listing and the expiry sweep.

Every path that changes ``total_plan_price``, ``total_paid`` or
``admission_fee_amount`` re-derives ``payment_status`` through
``calculate_payment_status`` before committing.
"""

import math
import uuid
from datetime import datetime, timedelta
from typing import Optional, Sequence, Tuple, Type, TypeVar

from libs.common.datetime_utils import ensure_aware, utc_now
from libs.common.errors import Conflict, NotFound, ValidationError
from libs.common.logging import get_logger
from libs.db.base import Base
from services.members_service.models import (
    Discount,
    Member,
    MemberStatus,
    Plan,
    PTPlan,
    Trainer,
)
from services.members_service.schemas import (
    MemberCreate,
    MemberResponse,
    MemberUpdate,
    Pagination,
)
from services.members_service.services.sequences import next_member_id
from services.payments_service.calculations import (
    calculate_balance,
    calculate_membership_end_date,
    calculate_payment_status,
    get_membership_status,
)
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)

# The list filter's "Expiring Soon" window is wider than the display badge.
EXPIRING_FILTER_DAYS = 10

_SORT_COLUMNS = {
    "name": Member.name,
    "join_date": Member.join_date,
    "membership_end_date": Member.membership_end_date,
    "total_paid": Member.total_paid,
    "created_at": Member.created_at,
}


async def get_or_404(
    db: AsyncSession, model: Type[ModelT], obj_id: uuid.UUID, label: str
) -> ModelT:
    obj = await db.get(model, obj_id)
    if obj is None:
        raise NotFound(f"{label} not found")
    return obj


async def get_member_or_404(db: AsyncSession, member_id: uuid.UUID) -> Member:
    return await get_or_404(db, Member, member_id, "Member")


async def _check_references(
    db: AsyncSession,
    plan_id: Optional[uuid.UUID] = None,
    trainer_id: Optional[uuid.UUID] = None,
    pt_plan_id: Optional[uuid.UUID] = None,
    discount_id: Optional[uuid.UUID] = None,
) -> Optional[Plan]:
    """Raise NotFound for any dangling reference; return the plan if given."""
    plan = await get_or_404(db, Plan, plan_id, "Plan") if plan_id else None
    if trainer_id:
        await get_or_404(db, Trainer, trainer_id, "Trainer")
    if pt_plan_id:
        await get_or_404(db, PTPlan, pt_plan_id, "PT plan")
    if discount_id:
        await get_or_404(db, Discount, discount_id, "Discount")
    return plan


def rederive_payment_status(member: Member) -> None:
    member.payment_status = calculate_payment_status(
        member.total_plan_price, member.total_paid, member.admission_fee_amount
    )


def effective_end_date(member: Member, plan: Optional[Plan]) -> Optional[datetime]:
    """Stored end date, else start (or join) date plus the plan duration."""
    if member.membership_end_date:
        return ensure_aware(member.membership_end_date)
    if plan is None:
        return None
    start = member.membership_start_date or member.join_date
    if start is None:
        return None
    return calculate_membership_end_date(start, plan.duration)


def to_member_response(member: Member, now: Optional[datetime] = None) -> MemberResponse:
    response = MemberResponse.model_validate(member)
    response.balance = calculate_balance(
        member.total_plan_price, member.total_paid, member.admission_fee_amount
    )
    response.membership_display_status = get_membership_status(
        member.membership_end_date, now=now
    )
    return response


async def register_member(
    db: AsyncSession, data: MemberCreate, *, now: Optional[datetime] = None
) -> Member:
    """
    Register a member.

    1. Resolve references (plan, trainer, PT plan, discount)
    2. Mint the next ``MEMnnn`` id atomically
    3. Snapshot the plan price and derive the membership window
    4. Derive the payment status and commit
    """
    now = now or utc_now()
    plan = await _check_references(
        db, data.plan_id, data.trainer_id, data.pt_plan_id, data.discount_id
    )

    if data.email:
        existing = await db.execute(select(Member.id).where(Member.email == data.email))
        if existing.scalar_one_or_none():
            raise Conflict(f"A member with email {data.email} already exists")

    member = Member(
        member_id=await next_member_id(db),
        name=data.name,
        phone=data.phone,
        email=data.email,
        plan_id=data.plan_id,
        trainer_id=data.trainer_id,
        pt_plan_id=data.pt_plan_id,
        discount_id=data.discount_id,
        admission_fee_amount=data.admission_fee_amount,
        join_date=data.join_date or now,
        total_paid=0,
    )

    if plan is not None:
        member.total_plan_price = (
            data.total_plan_price if data.total_plan_price is not None else plan.price
        )
        start = data.membership_start_date or member.join_date
        member.membership_start_date = start
        member.membership_end_date = calculate_membership_end_date(start, plan.duration)
        member.status = MemberStatus.ACTIVE
    else:
        member.total_plan_price = data.total_plan_price or 0
        member.status = MemberStatus.PENDING

    rederive_payment_status(member)
    db.add(member)

    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise Conflict("Member violates a uniqueness constraint") from exc

    await db.refresh(member)
    logger.info(
        "Registered member %s (%s) status=%s payment_status=%s",
        member.member_id,
        member.name,
        member.status.value,
        member.payment_status.value,
    )
    return member


async def update_member(
    db: AsyncSession, member_id: uuid.UUID, data: MemberUpdate
) -> Member:
    """Apply a partial update; ledger inputs trigger a status re-derivation."""
    member = await get_member_or_404(db, member_id)
    update_data = data.model_dump(exclude_unset=True)

    plan = await _check_references(
        db,
        update_data.get("plan_id"),
        update_data.get("trainer_id"),
        update_data.get("pt_plan_id"),
        update_data.get("discount_id"),
    )

    plan_changed = plan is not None and plan.id != member.plan_id
    for field, value in update_data.items():
        setattr(member, field, value)

    if plan_changed and "total_plan_price" not in update_data:
        member.total_plan_price = plan.price

    window_changed = plan_changed or "membership_start_date" in update_data
    if window_changed and "membership_end_date" not in update_data:
        plan = plan or (await db.get(Plan, member.plan_id) if member.plan_id else None)
        start = member.membership_start_date or member.join_date
        if plan is not None and start is not None:
            member.membership_end_date = calculate_membership_end_date(
                start, plan.duration
            )

    rederive_payment_status(member)

    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise Conflict("Member violates a uniqueness constraint") from exc

    await db.refresh(member)
    return member


async def sweep_expired_members(
    db: AsyncSession, *, now: Optional[datetime] = None
) -> int:
    """Flip Active members whose effective end date has passed to Expired."""
    now = now or utc_now()
    result = await db.execute(
        select(Member, Plan)
        .outerjoin(Plan, Member.plan_id == Plan.id)
        .where(Member.status == MemberStatus.ACTIVE)
    )

    expired = 0
    for member, plan in result.all():
        end = effective_end_date(member, plan)
        if end is not None and end < now:
            member.status = MemberStatus.EXPIRED
            if member.membership_end_date is None:
                member.membership_end_date = end
            expired += 1

    if expired:
        await db.commit()
        logger.info("Expiry sweep marked %d member(s) as Expired", expired)
    return expired


async def list_members(
    db: AsyncSession,
    *,
    page: int = 1,
    limit: int = 50,
    search: Optional[str] = None,
    status: Optional[str] = None,
    payment_status: Optional[str] = None,
    member_type: Optional[str] = None,
    sort_by: str = "member_id",
    sort_order: str = "desc",
    now: Optional[datetime] = None,
) -> Tuple[Sequence[Member], Pagination]:
    """Run the expiry sweep, then return one filtered page of members."""
    now = now or utc_now()
    await sweep_expired_members(db, now=now)

    conditions = []
    if search:
        conditions.append(
            or_(
                Member.name.icontains(search, autoescape=True),
                Member.email.icontains(search, autoescape=True),
                Member.phone.contains(search, autoescape=True),
                Member.member_id.icontains(search, autoescape=True),
            )
        )

    if status and status != "all":
        if status == "Expiring Soon":
            conditions.append(Member.status == MemberStatus.ACTIVE)
            conditions.append(Member.membership_end_date >= now)
            conditions.append(
                Member.membership_end_date <= now + timedelta(days=EXPIRING_FILTER_DAYS)
            )
        else:
            try:
                conditions.append(Member.status == MemberStatus(status))
            except ValueError:
                raise ValidationError(f"Unknown member status: {status}")

    if payment_status and payment_status != "all":
        conditions.append(Member.payment_status == payment_status)

    if member_type == "pt":
        conditions.append(Member.pt_plan_id.is_not(None))
    elif member_type == "non-pt":
        conditions.append(Member.pt_plan_id.is_(None))

    count_query = select(func.count()).select_from(Member).where(*conditions)
    total = (await db.execute(count_query)).scalar_one()

    descending = sort_order != "asc"
    if sort_by == "member_id":
        # Numeric order: shorter ids are smaller (MEM999 < MEM1000)
        order = [func.length(Member.member_id), Member.member_id]
    else:
        order = [_SORT_COLUMNS.get(sort_by, Member.created_at)]
    order = [col.desc() if descending else col.asc() for col in order]

    query = (
        select(Member)
        .where(*conditions)
        .order_by(*order)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    members = (await db.execute(query)).scalars().all()

    pagination = Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=math.ceil(total / limit) if limit else 0,
    )
    return members, pagination
