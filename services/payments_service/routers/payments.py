"""Payment processor endpoints: record, edit and delete member payments."""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from libs.auth.dependencies import require_staff
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.payments_service.models import PaymentRecordStatus, PlanType
from services.payments_service.schemas import (
    PaymentCreate,
    PaymentResponse,
    PaymentUpdate,
)
from services.payments_service.services.ledger import (
    create_payment,
    delete_payment,
    get_payment_or_404,
    list_payments,
    update_payment,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/payments", tags=["payments"])


@router.get("", response_model=List[PaymentResponse])
async def list_payments_endpoint(
    member_id: Optional[uuid.UUID] = None,
    plan_type: Optional[PlanType] = None,
    payment_status: Optional[PaymentRecordStatus] = None,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    return await list_payments(
        db,
        member_id=member_id,
        plan_type=plan_type,
        payment_status=payment_status,
        limit=limit,
        offset=offset,
    )


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def record_payment(
    payload: PaymentCreate,
    current_user: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    """
    Record a payment against a member's ledger.

    ``is_renewal`` (or ``activate_membership`` for a membership payment)
    starts a new membership cycle before the amount is applied.
    """
    created_by = current_user.email or current_user.user_id
    return await create_payment(db, payload, created_by=created_by)


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    payment_id: uuid.UUID,
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    return await get_payment_or_404(db, payment_id)


@router.put("/{payment_id}", response_model=PaymentResponse)
async def edit_payment(
    payment_id: uuid.UUID,
    payload: PaymentUpdate,
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    return await update_payment(db, payment_id, payload)


@router.delete("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_payment(
    payment_id: uuid.UUID,
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    await delete_payment(db, payment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
