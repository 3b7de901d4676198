"""Reference data: membership plans, PT plans and discounts."""

import uuid
from typing import List

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import require_staff
from libs.auth.models import AuthUser
from libs.common.errors import Conflict
from libs.db.session import get_async_db
from services.members_service.models import Discount, Plan, PTPlan, Trainer
from services.members_service.schemas import (
    DiscountCreate,
    DiscountResponse,
    PlanCreate,
    PlanResponse,
    PlanUpdate,
    PTPlanCreate,
    PTPlanResponse,
)
from services.members_service.services.member_service import get_or_404
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["plans"])


async def _commit_unique(db: AsyncSession, label: str) -> None:
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise Conflict(f"{label} already exists") from exc


@router.get("/plans", response_model=List[PlanResponse])
async def list_plans(
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(select(Plan).order_by(Plan.price))
    return result.scalars().all()


@router.post("/plans", response_model=PlanResponse, status_code=status.HTTP_201_CREATED)
async def create_plan(
    plan_in: PlanCreate,
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    plan = Plan(**plan_in.model_dump())
    db.add(plan)
    await _commit_unique(db, f"Plan '{plan_in.name}'")
    await db.refresh(plan)
    return plan


@router.get("/plans/{plan_id}", response_model=PlanResponse)
async def get_plan(
    plan_id: uuid.UUID,
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    return await get_or_404(db, Plan, plan_id, "Plan")


@router.patch("/plans/{plan_id}", response_model=PlanResponse)
async def update_plan(
    plan_id: uuid.UUID,
    plan_in: PlanUpdate,
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    """Members keep the price they were assigned; only new assignments see changes."""
    plan = await get_or_404(db, Plan, plan_id, "Plan")
    for field, value in plan_in.model_dump(exclude_unset=True).items():
        setattr(plan, field, value)
    await _commit_unique(db, f"Plan '{plan.name}'")
    await db.refresh(plan)
    return plan


@router.get("/pt-plans", response_model=List[PTPlanResponse])
async def list_pt_plans(
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(select(PTPlan).order_by(PTPlan.name))
    return result.scalars().all()


@router.post(
    "/pt-plans", response_model=PTPlanResponse, status_code=status.HTTP_201_CREATED
)
async def create_pt_plan(
    pt_plan_in: PTPlanCreate,
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    if pt_plan_in.trainer_id:
        await get_or_404(db, Trainer, pt_plan_in.trainer_id, "Trainer")
    pt_plan = PTPlan(**pt_plan_in.model_dump())
    db.add(pt_plan)
    await db.commit()
    await db.refresh(pt_plan)
    return pt_plan


@router.get("/discounts", response_model=List[DiscountResponse])
async def list_discounts(
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(select(Discount).order_by(Discount.code))
    return result.scalars().all()


@router.post(
    "/discounts", response_model=DiscountResponse, status_code=status.HTTP_201_CREATED
)
async def create_discount(
    discount_in: DiscountCreate,
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    discount = Discount(**discount_in.model_dump())
    db.add(discount)
    await _commit_unique(db, f"Discount '{discount_in.code}'")
    await db.refresh(discount)
    return discount
