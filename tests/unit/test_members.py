"""Unit tests for member registration, listing, id sequences and salaries."""

import uuid
from datetime import date, datetime, timedelta, timezone

import pytest
from libs.common.errors import Conflict, NotFound
from services.attendance_service.models import (
    TrainerAttendance,
    TrainerAttendanceStatus,
)
from services.members_service.models import (
    CommissionType,
    MemberPaymentStatus,
    MemberStatus,
)
from services.members_service.schemas import MemberCreate, MemberUpdate
from services.members_service.services.member_service import (
    list_members,
    register_member,
    sweep_expired_members,
    update_member,
)
from services.members_service.services.salary import (
    get_trainer_salary,
    pt_payment_history,
    salary_history,
    trainer_clients,
)
from services.members_service.services.sequences import (
    format_sequence_id,
    next_member_id,
    next_trainer_id,
)
from services.payments_service.models import PaymentRecordStatus, PlanType
from tests.factories import (
    MemberFactory,
    PaymentFactory,
    PlanFactory,
    PTPlanFactory,
    TrainerFactory,
)

NOW = datetime(2026, 3, 10, 6, 30, tzinfo=timezone.utc)

# ---------------------------------------------------------------------------
# Sequences
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_format_sequence_id_pads_to_three_digits():
    assert format_sequence_id("MEM", 7) == "MEM007"
    assert format_sequence_id("MEM", 1000) == "MEM1000"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_sequences_are_consecutive_and_independent(db_session):
    assert await next_member_id(db_session) == "MEM001"
    assert await next_member_id(db_session) == "MEM002"
    assert await next_trainer_id(db_session) == "TRN001"
    assert await next_member_id(db_session) == "MEM003"


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_register_with_plan_snapshots_price_and_window(db_session):
    plan = PlanFactory.create(price=3000, duration=3)
    db_session.add(plan)
    await db_session.commit()

    member = await register_member(
        db_session,
        MemberCreate(
            name="Asha Roy",
            phone="9000000001",
            plan_id=plan.id,
            admission_fee_amount=500,
            join_date=datetime(2026, 1, 31, tzinfo=timezone.utc),
        ),
        now=NOW,
    )

    assert member.member_id == "MEM001"
    assert member.status == MemberStatus.ACTIVE
    assert member.total_plan_price == 3000
    assert member.payment_status == MemberPaymentStatus.UNPAID
    assert member.membership_end_date == datetime(2026, 4, 30, tzinfo=timezone.utc)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_register_without_plan_is_pending(db_session):
    member = await register_member(
        db_session, MemberCreate(name="Walk In", phone="9000000002"), now=NOW
    )

    assert member.status == MemberStatus.PENDING
    assert member.membership_end_date is None
    assert member.total_plan_price == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_register_with_unknown_plan(db_session):
    with pytest.raises(NotFound, match="Plan"):
        await register_member(
            db_session,
            MemberCreate(name="X", phone="9000000003", plan_id=uuid.uuid4()),
            now=NOW,
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_duplicate_email_conflicts(db_session):
    data = MemberCreate(name="A", phone="9000000004", email="a@example.com")
    await register_member(db_session, data, now=NOW)

    with pytest.raises(Conflict):
        await register_member(db_session, data, now=NOW)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_price_change_rederives_payment_status(db_session):
    member = MemberFactory.create(
        total_plan_price=3000, total_paid=2000, payment_status=MemberPaymentStatus.PARTIAL
    )
    db_session.add(member)
    await db_session.commit()

    member = await update_member(db_session, member.id, MemberUpdate(total_plan_price=2000))

    assert member.payment_status == MemberPaymentStatus.PAID


# ---------------------------------------------------------------------------
# Listing and the expiry sweep
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_sweep_expires_lapsed_active_members(db_session):
    lapsed = MemberFactory.create(membership_end_date=NOW - timedelta(days=1))
    current = MemberFactory.create(membership_end_date=NOW + timedelta(days=30))
    db_session.add_all([lapsed, current])
    await db_session.commit()

    assert await sweep_expired_members(db_session, now=NOW) == 1
    assert lapsed.status == MemberStatus.EXPIRED
    assert current.status == MemberStatus.ACTIVE


@pytest.mark.asyncio
@pytest.mark.unit
async def test_sweep_uses_plan_duration_when_end_date_missing(db_session):
    plan = PlanFactory.create(duration=1)
    member = MemberFactory.create(
        plan_id=plan.id,
        membership_start_date=NOW - timedelta(days=45),
        membership_end_date=None,
    )
    db_session.add_all([plan, member])
    await db_session.commit()

    assert await sweep_expired_members(db_session, now=NOW) == 1
    assert member.status == MemberStatus.EXPIRED
    assert member.membership_end_date is not None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_listing_runs_sweep_and_filters(db_session):
    db_session.add_all(
        [
            MemberFactory.create(member_id="MEM001", membership_end_date=NOW - timedelta(days=2)),
            MemberFactory.create(member_id="MEM002", membership_end_date=NOW + timedelta(days=5)),
            MemberFactory.create(member_id="MEM010", membership_end_date=NOW + timedelta(days=60)),
        ]
    )
    await db_session.commit()

    expired, page = await list_members(db_session, status="Expired", now=NOW)
    assert [m.member_id for m in expired] == ["MEM001"]
    assert page.total == 1

    expiring, _ = await list_members(db_session, status="Expiring Soon", now=NOW)
    assert [m.member_id for m in expiring] == ["MEM002"]

    everyone, page = await list_members(db_session, limit=2, now=NOW)
    assert [m.member_id for m in everyone] == ["MEM010", "MEM002"]
    assert page.total == 3
    assert page.total_pages == 2


# ---------------------------------------------------------------------------
# Salary
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_salary_counts_only_active_pt_clients(db_session):
    trainer = TrainerFactory.create(
        base_salary=15000, commission_type=CommissionType.PERCENTAGE, commission_value=40
    )
    pt_plan = PTPlanFactory.create(trainer_id=trainer.id, price=4000)
    db_session.add_all([trainer, pt_plan])
    await db_session.commit()
    db_session.add_all(
        [
            MemberFactory.create(trainer_id=trainer.id, pt_plan_id=pt_plan.id),
            MemberFactory.create(trainer_id=trainer.id, pt_plan_id=pt_plan.id),
            MemberFactory.create(
                trainer_id=trainer.id,
                pt_plan_id=pt_plan.id,
                status=MemberStatus.EXPIRED,
            ),
            MemberFactory.create(trainer_id=trainer.id),
        ]
    )
    await db_session.commit()

    salary = await get_trainer_salary(db_session, trainer.id)

    assert salary.active_members_count == 2
    assert salary.commission_amount == 3200
    assert salary.total_salary == 18200


@pytest.mark.asyncio
@pytest.mark.unit
async def test_salary_for_missing_trainer(db_session):
    with pytest.raises(NotFound):
        await get_trainer_salary(db_session, uuid.uuid4())


def _noon(year, month, day):
    return datetime(year, month, day, 6, 30, tzinfo=timezone.utc)


async def _pt_trainer_with_history(db):
    trainer = TrainerFactory.create(
        base_salary=31000,
        commission_type=CommissionType.PERCENTAGE,
        commission_value=10,
    )
    db.add(trainer)
    await db.commit()
    client = MemberFactory.create(
        member_id="MEM002", name="Asha Roy", trainer_id=trainer.id
    )
    other = MemberFactory.create(
        member_id="MEM001",
        name="Dev Patel",
        trainer_id=trainer.id,
        status=MemberStatus.EXPIRED,
    )
    db.add_all([client, other])
    await db.commit()

    def pt(amount, when, **extra):
        return PaymentFactory.create(
            member_id=client.id,
            amount=amount,
            payment_date=when,
            plan_type=PlanType.PT_PLAN,
            **extra,
        )

    db.add_all(
        [
            TrainerAttendance(
                trainer_id=trainer.id,
                date=day,
                status=TrainerAttendanceStatus.LEAVE,
            )
            for day in (date(2026, 3, 2), date(2026, 3, 3), date(2026, 2, 27))
        ]
        + [
            pt(4000, _noon(2026, 2, 25)),
            pt(2000, _noon(2026, 3, 15)),
            pt(3000, _noon(2026, 2, 10)),
            pt(9999, _noon(2026, 3, 1), payment_status=PaymentRecordStatus.PENDING),
            PaymentFactory.create(
                member_id=client.id, amount=5000, payment_date=_noon(2026, 3, 1)
            ),
        ]
    )
    await db.commit()
    return trainer.id


@pytest.mark.asyncio
@pytest.mark.unit
async def test_salary_history_prorates_leave_and_uses_commission_window(db_session):
    trainer_id = await _pt_trainer_with_history(db_session)

    history = await salary_history(db_session, trainer_id, months=2, now=NOW)

    march, february = history
    assert (march.year, march.month) == (2026, 3)
    assert march.days_in_month == 31
    assert march.leave_days == 2
    assert march.base_salary_prorated == 29000.0
    # Feb 21 - Mar 20: 4000 + 2000
    assert march.commission_amount == 600
    assert march.total_payable == 29600

    assert (february.year, february.month) == (2026, 2)
    assert february.days_in_month == 28
    assert february.leave_days == 1
    assert february.base_salary_prorated == 29892.86
    assert february.commission_amount == 300
    assert february.total_payable == pytest.approx(30192.86)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_trainer_clients_and_pt_history(db_session):
    trainer_id = await _pt_trainer_with_history(db_session)

    clients = await trainer_clients(db_session, trainer_id)
    assert [m.member_id for m in clients] == ["MEM001", "MEM002"]

    history = await pt_payment_history(db_session, trainer_id)
    assert [payment.amount for payment, _, _ in history] == [2000, 9999, 4000, 3000]
    assert {(code, name) for _, code, name in history} == {("MEM002", "Asha Roy")}


@pytest.mark.asyncio
@pytest.mark.unit
async def test_trainer_reads_for_missing_trainer(db_session):
    with pytest.raises(NotFound, match="Trainer not found"):
        await salary_history(db_session, uuid.uuid4(), now=NOW)
    with pytest.raises(NotFound, match="Trainer not found"):
        await trainer_clients(db_session, uuid.uuid4())
