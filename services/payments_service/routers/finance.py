"""Finance ledger endpoints: merged income/expense view and manual entries."""

import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from libs.auth.dependencies import require_staff
from libs.auth.models import AuthUser
from libs.common.errors import ValidationError
from libs.db.session import get_async_db
from services.payments_service.models import TransactionType
from services.payments_service.schemas import (
    FinanceLedger,
    TransactionCreate,
    TransactionResponse,
)
from services.payments_service.services.finance import (
    create_transaction,
    delete_transaction,
    finance_ledger,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/finance", tags=["finance"])


@router.get("", response_model=FinanceLedger)
async def get_finance_ledger(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    entry_type: Optional[TransactionType] = Query(None, alias="type"),
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    """Income and expenses across payments, payouts and manual entries."""
    if start_date and end_date and start_date > end_date:
        raise ValidationError("start_date must not be after end_date")
    return await finance_ledger(
        db, start_date=start_date, end_date=end_date, entry_type=entry_type
    )


@router.post(
    "/transactions",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_transaction(
    payload: TransactionCreate,
    current_user: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    created_by = current_user.email or current_user.user_id
    return await create_transaction(db, payload, created_by=created_by)


@router.delete("/transactions/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_transaction(
    transaction_id: uuid.UUID,
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    await delete_transaction(db, transaction_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
