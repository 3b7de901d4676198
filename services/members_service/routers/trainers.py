"""Trainers router: staff records and the salary calculator."""

import uuid
from dataclasses import asdict
from typing import List

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import require_staff
from libs.auth.models import AuthUser
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.members_service.models import Trainer
from services.members_service.schemas import (
    PTPaymentEntry,
    SalaryMemberDetail,
    SalaryMonth,
    SalaryResponse,
    TrainerClient,
    TrainerCreate,
    TrainerResponse,
    TrainerUpdate,
)
from services.members_service.services.member_service import get_or_404
from services.members_service.services.salary import (
    get_trainer_salary,
    pt_payment_history,
    salary_history,
    trainer_clients,
)
from services.members_service.services.sequences import next_trainer_id
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(prefix="/trainers", tags=["trainers"])


@router.get("", response_model=List[TrainerResponse])
async def list_trainers(
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(
        select(Trainer).order_by(func.length(Trainer.trainer_id), Trainer.trainer_id)
    )
    return result.scalars().all()


@router.post("", response_model=TrainerResponse, status_code=status.HTTP_201_CREATED)
async def create_trainer(
    trainer_in: TrainerCreate,
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    trainer = Trainer(trainer_id=await next_trainer_id(db), **trainer_in.model_dump())
    db.add(trainer)
    await db.commit()
    await db.refresh(trainer)
    logger.info(f"Created trainer {trainer.trainer_id} ({trainer.name})")
    return trainer


@router.get("/{trainer_id}", response_model=TrainerResponse)
async def get_trainer(
    trainer_id: uuid.UUID,
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    return await get_or_404(db, Trainer, trainer_id, "Trainer")


@router.patch("/{trainer_id}", response_model=TrainerResponse)
async def update_trainer(
    trainer_id: uuid.UUID,
    trainer_in: TrainerUpdate,
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    trainer = await get_or_404(db, Trainer, trainer_id, "Trainer")
    for field, value in trainer_in.model_dump(exclude_unset=True).items():
        setattr(trainer, field, value)
    await db.commit()
    await db.refresh(trainer)
    return trainer


@router.get("/{trainer_id}/salary", response_model=SalaryResponse)
async def get_salary(
    trainer_id: uuid.UUID,
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    """Base salary plus commission from the trainer's active PT clients."""
    trainer = await get_or_404(db, Trainer, trainer_id, "Trainer")
    breakdown = await get_trainer_salary(db, trainer_id)
    return SalaryResponse(
        trainer_id=trainer.id,
        base_salary=breakdown.base_salary,
        commission_type=trainer.commission_type,
        commission_value=trainer.commission_value or 0,
        commission_amount=breakdown.commission_amount,
        total_salary=breakdown.total_salary,
        active_members_count=breakdown.active_members_count,
        member_details=[
            SalaryMemberDetail(
                member_id=c.member_id,
                name=c.name,
                plan_name=c.plan_name,
                plan_price=c.plan_price,
            )
            for c in breakdown.member_details
        ],
    )


@router.get("/{trainer_id}/clients", response_model=List[TrainerClient])
async def list_clients(
    trainer_id: uuid.UUID,
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    return await trainer_clients(db, trainer_id)


@router.get("/{trainer_id}/pt-history", response_model=List[PTPaymentEntry])
async def get_pt_history(
    trainer_id: uuid.UUID,
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    rows = await pt_payment_history(db, trainer_id)
    return [
        PTPaymentEntry(
            id=payment.id,
            receipt_number=payment.receipt_number,
            member_id=member_code,
            member_name=name,
            amount=payment.amount,
            payment_date=payment.payment_date,
        )
        for payment, member_code, name in rows
    ]


@router.get("/{trainer_id}/salary-history", response_model=List[SalaryMonth])
async def get_salary_history(
    trainer_id: uuid.UUID,
    months: int = Query(12, ge=1, le=24),
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    """Month-by-month pay with leave pro-rating, current month first."""
    history = await salary_history(db, trainer_id, months)
    return [SalaryMonth(**asdict(month)) for month in history]
