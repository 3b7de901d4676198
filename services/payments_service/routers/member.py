"""Per-member ledger views: payment history and explicit recompute."""

import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import require_staff
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.members_service.schemas import MemberResponse
from services.members_service.services.member_service import to_member_response
from services.payments_service.calculations import calculate_balance
from services.payments_service.models import PaymentCategory
from services.payments_service.schemas import (
    LedgerSummary,
    MemberPaymentHistory,
    MemberRef,
    OffsetPagination,
    PaymentResponse,
)
from services.payments_service.services.ledger import (
    member_payment_history,
    recompute_member_totals,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/members", tags=["payments"])


@router.get("/{member_id}/payments", response_model=MemberPaymentHistory)
async def get_member_payments(
    member_id: uuid.UUID,
    category: Optional[PaymentCategory] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    member, payments, total = await member_payment_history(
        db,
        member_id,
        category=category,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset,
    )
    return MemberPaymentHistory(
        member=MemberRef.model_validate(member),
        summary=LedgerSummary(
            total_paid=member.total_paid or 0,
            balance=calculate_balance(
                member.total_plan_price, member.total_paid, member.admission_fee_amount
            ),
            payment_status=member.payment_status,
            total_plan_price=member.total_plan_price or 0,
            admission_fee_amount=member.admission_fee_amount or 0,
            membership_cycle=member.membership_cycle,
        ),
        payments=[PaymentResponse.model_validate(p) for p in payments],
        pagination=OffsetPagination(
            total=total,
            limit=limit,
            offset=offset,
            has_more=offset + limit < total,
        ),
    )


@router.post("/{member_id}/recompute", response_model=MemberResponse)
async def recompute_member(
    member_id: uuid.UUID,
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    """Re-sum the member's current-cycle payments and re-derive their status."""
    member = await recompute_member_totals(db, member_id)
    return to_member_response(member)
