"""Finance ledger: manual income/expense entries merged with payments and payouts."""

import uuid
from datetime import date
from typing import List, Optional

from libs.common.datetime_utils import day_bounds, utc_now
from libs.common.logging import get_logger
from services.members_service.models import Member, Trainer
from services.members_service.services.member_service import get_or_404
from services.payments_service.models import (
    Payment,
    PaymentRecordStatus,
    TrainerPayment,
    TrainerPaymentStatus,
    Transaction,
    TransactionType,
)
from services.payments_service.schemas import (
    FinanceLedger,
    FinanceRecord,
    FinanceSummary,
    TransactionCreate,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def create_transaction(
    db: AsyncSession, data: TransactionCreate, created_by: str = ""
) -> Transaction:
    values = data.model_dump()
    values["date"] = values["date"] or utc_now()
    transaction = Transaction(created_by=created_by, **values)
    db.add(transaction)
    await db.commit()
    await db.refresh(transaction)
    logger.info(
        "Recorded %s %s (%s) by %s",
        transaction.type.value,
        transaction.amount,
        transaction.title,
        created_by or "system",
    )
    return transaction


async def delete_transaction(db: AsyncSession, transaction_id: uuid.UUID) -> None:
    transaction = await get_or_404(db, Transaction, transaction_id, "Transaction")
    kind = transaction.type.value
    await db.delete(transaction)
    await db.commit()
    logger.info("Deleted %s entry %s", kind, transaction_id)


def _window(column, start_date: Optional[date], end_date: Optional[date]) -> list:
    conditions = []
    if start_date:
        conditions.append(column >= day_bounds(start_date)[0])
    if end_date:
        conditions.append(column < day_bounds(end_date)[1])
    return conditions


async def finance_ledger(
    db: AsyncSession,
    *,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    entry_type: Optional[TransactionType] = None,
) -> FinanceLedger:
    """
    Income and expenses from every source, newest first.

    Income is completed member payments plus manual income entries. Expenses
    are paid trainer payouts plus manual expense entries. Both date bounds are
    local calendar days and inclusive.
    """
    records: List[FinanceRecord] = []

    if entry_type in (None, TransactionType.INCOME):
        result = await db.execute(
            select(Payment, Member.name)
            .join(Member, Payment.member_id == Member.id)
            .where(
                Payment.payment_status == PaymentRecordStatus.COMPLETED,
                *_window(Payment.payment_date, start_date, end_date),
            )
        )
        records.extend(
            FinanceRecord(
                id=payment.id,
                date=payment.payment_date,
                title=f"Payment: {name}",
                amount=payment.amount,
                type=TransactionType.INCOME,
                category=payment.payment_category.value,
                mode=payment.payment_mode,
                is_system=True,
            )
            for payment, name in result.all()
        )

    if entry_type in (None, TransactionType.EXPENSE):
        result = await db.execute(
            select(TrainerPayment, Trainer.name)
            .join(Trainer, TrainerPayment.trainer_id == Trainer.id)
            .where(
                TrainerPayment.status == TrainerPaymentStatus.PAID,
                *_window(TrainerPayment.payment_date, start_date, end_date),
            )
        )
        records.extend(
            FinanceRecord(
                id=payout.id,
                date=payout.payment_date,
                title=f"Salary: {name}",
                amount=payout.amount,
                type=TransactionType.EXPENSE,
                category="Salary",
                mode=payout.payment_mode,
                is_system=True,
            )
            for payout, name in result.all()
        )

    query = select(Transaction).where(*_window(Transaction.date, start_date, end_date))
    if entry_type:
        query = query.where(Transaction.type == entry_type)
    result = await db.execute(query)
    records.extend(
        FinanceRecord(
            id=entry.id,
            date=entry.date,
            title=entry.title,
            amount=entry.amount,
            type=entry.type,
            category=entry.category,
            mode=entry.payment_mode,
            is_system=False,
        )
        for entry in result.scalars().all()
    )

    records.sort(key=lambda record: record.date, reverse=True)

    income = sum(r.amount for r in records if r.type == TransactionType.INCOME)
    expense = sum(r.amount for r in records if r.type == TransactionType.EXPENSE)
    return FinanceLedger(
        summary=FinanceSummary(
            total_income=income,
            total_expense=expense,
            net_balance=income - expense,
        ),
        records=records,
    )
