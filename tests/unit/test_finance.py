"""Unit tests for the merged finance ledger."""

from datetime import date, datetime, timedelta, timezone

import pytest
from libs.common.errors import NotFound
from services.payments_service.models import (
    PaymentRecordStatus,
    TrainerPayment,
    TrainerPaymentStatus,
    TransactionType,
)
from services.payments_service.schemas import TransactionCreate
from services.payments_service.services.finance import (
    create_transaction,
    delete_transaction,
    finance_ledger,
)
from tests.factories import MemberFactory, PaymentFactory, TrainerFactory

# 12:00 IST
NOW = datetime(2026, 3, 10, 6, 30, tzinfo=timezone.utc)


async def _seed(db):
    member = MemberFactory.create(name="Asha Roy")
    trainer = TrainerFactory.create(name="Kabir Singh")
    db.add_all([member, trainer])
    await db.commit()

    db.add_all(
        [
            PaymentFactory.create(
                member_id=member.id, amount=3000, payment_date=NOW - timedelta(days=2)
            ),
            PaymentFactory.create(
                member_id=member.id,
                amount=500,
                payment_date=NOW - timedelta(days=2),
                payment_status=PaymentRecordStatus.PENDING,
            ),
            TrainerPayment(
                trainer_id=trainer.id,
                amount=1800,
                month="March",
                year=2026,
                payment_date=NOW - timedelta(days=5),
            ),
            TrainerPayment(
                trainer_id=trainer.id,
                amount=700,
                month="March",
                year=2026,
                payment_date=NOW - timedelta(days=5),
                status=TrainerPaymentStatus.PENDING,
            ),
        ]
    )
    await db.commit()

    rent = await create_transaction(
        db,
        TransactionCreate(
            title="Rent",
            amount=1000,
            type=TransactionType.EXPENSE,
            category="Rent",
            date=NOW - timedelta(days=1),
        ),
        created_by="desk@example.com",
    )
    await create_transaction(
        db,
        TransactionCreate(
            title="Protein bars",
            amount=450,
            type=TransactionType.INCOME,
            date=NOW - timedelta(days=20),
        ),
    )
    return rent


@pytest.mark.asyncio
@pytest.mark.unit
async def test_ledger_merges_every_source_newest_first(db_session):
    rent = await _seed(db_session)
    assert rent.created_by == "desk@example.com"

    ledger = await finance_ledger(db_session)

    assert [r.title for r in ledger.records] == [
        "Rent",
        "Payment: Asha Roy",
        "Salary: Kabir Singh",
        "Protein bars",
    ]
    assert [r.is_system for r in ledger.records] == [False, True, True, False]
    assert ledger.summary.total_income == 3450
    assert ledger.summary.total_expense == 2800
    assert ledger.summary.net_balance == 650


@pytest.mark.asyncio
@pytest.mark.unit
async def test_ledger_filters_by_type(db_session):
    await _seed(db_session)

    income = await finance_ledger(db_session, entry_type=TransactionType.INCOME)
    expense = await finance_ledger(db_session, entry_type=TransactionType.EXPENSE)

    assert [r.title for r in income.records] == ["Payment: Asha Roy", "Protein bars"]
    assert income.summary.total_expense == 0
    assert [r.title for r in expense.records] == ["Rent", "Salary: Kabir Singh"]
    assert expense.summary.net_balance == -2800


@pytest.mark.asyncio
@pytest.mark.unit
async def test_ledger_date_bounds_are_inclusive_local_days(db_session):
    await _seed(db_session)

    ledger = await finance_ledger(
        db_session, start_date=date(2026, 3, 5), end_date=date(2026, 3, 8)
    )

    assert [r.title for r in ledger.records] == [
        "Payment: Asha Roy",
        "Salary: Kabir Singh",
    ]
    assert ledger.summary.net_balance == 1200


@pytest.mark.asyncio
@pytest.mark.unit
async def test_delete_transaction(db_session):
    rent = await _seed(db_session)
    rent_id = rent.id

    await delete_transaction(db_session, rent_id)

    ledger = await finance_ledger(db_session, entry_type=TransactionType.EXPENSE)
    assert [r.title for r in ledger.records] == ["Salary: Kabir Singh"]

    with pytest.raises(NotFound, match="Transaction not found"):
        await delete_transaction(db_session, rent_id)
