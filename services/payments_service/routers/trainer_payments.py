"""Trainer salary payouts. Append-only; not reconciled against the calculator."""

import uuid
from typing import List

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import require_staff
from libs.auth.models import AuthUser
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.members_service.models import Trainer
from services.members_service.services.member_service import get_or_404
from services.payments_service.models import TrainerPayment
from services.payments_service.schemas import (
    TrainerPaymentCreate,
    TrainerPaymentResponse,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)
router = APIRouter(prefix="/trainers", tags=["trainer payments"])


@router.get("/{trainer_id}/payments", response_model=List[TrainerPaymentResponse])
async def list_trainer_payments(
    trainer_id: uuid.UUID,
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    await get_or_404(db, Trainer, trainer_id, "Trainer")
    result = await db.execute(
        select(TrainerPayment)
        .where(TrainerPayment.trainer_id == trainer_id)
        .order_by(TrainerPayment.payment_date.desc())
    )
    return result.scalars().all()


@router.post(
    "/{trainer_id}/payments",
    response_model=TrainerPaymentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_trainer_payment(
    trainer_id: uuid.UUID,
    payload: TrainerPaymentCreate,
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    trainer = await get_or_404(db, Trainer, trainer_id, "Trainer")
    data = payload.model_dump()
    data["payment_date"] = data["payment_date"] or utc_now()
    payout = TrainerPayment(trainer_id=trainer.id, **data)
    db.add(payout)
    await db.commit()
    await db.refresh(payout)
    logger.info(
        f"Recorded payout of {payout.amount} to trainer {trainer.trainer_id} "
        f"for {payout.month} {payout.year}"
    )
    return payout
