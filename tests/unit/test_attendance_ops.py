"""Unit tests for the attendance state machine and trainer working days."""

from datetime import date, datetime, timedelta, timezone

import pytest
from libs.common.datetime_utils import local_day_end
from libs.common.errors import Conflict, NotFound, ValidationError
from services.attendance_service.models import (
    AttendanceRecord,
    AttendanceStatus,
    TrainerAttendanceStatus,
)
from services.attendance_service.schemas import TrainerAttendanceAction
from services.attendance_service.services.attendance_ops import (
    active_count,
    auto_checkout,
    check_in,
    check_out,
    self_service,
)
from services.attendance_service.services.trainer_days import (
    add_leave,
    list_leaves,
    record_action,
    remove_leave,
    trainer_history,
)
from sqlalchemy import select
from tests.factories import AttendanceFactory, MemberFactory, TrainerFactory

# 10:00 IST
NOW = datetime(2026, 3, 10, 4, 30, tzinfo=timezone.utc)
PHOTO = "https://cdn.example.com/kiosk/abc.jpg"


async def _member(db):
    member = MemberFactory.create(name="Asha Roy")
    db.add(member)
    await db.commit()
    return member


async def _records(db):
    result = await db.execute(select(AttendanceRecord))
    return result.scalars().all()


# ---------------------------------------------------------------------------
# Staff check-in / check-out
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_check_in_then_out_records_duration(db_session):
    member = await _member(db_session)

    record = await check_in(db_session, member.id, "Member", now=NOW)
    assert record.status == AttendanceStatus.CHECKED_IN
    assert record.date.isoformat() == "2026-03-10"

    closed = await check_out(db_session, record.id, now=NOW + timedelta(minutes=90))
    assert closed.status == AttendanceStatus.CHECKED_OUT
    assert closed.duration == 90


@pytest.mark.asyncio
@pytest.mark.unit
async def test_second_check_in_conflicts(db_session):
    member = await _member(db_session)
    await check_in(db_session, member.id, "Member", now=NOW)

    with pytest.raises(Conflict, match="already checked in"):
        await check_in(db_session, member.id, "Member", now=NOW + timedelta(minutes=5))

    assert await active_count(db_session) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_stale_session_from_yesterday_still_blocks_check_in(db_session):
    member = await _member(db_session)
    db_session.add(
        AttendanceFactory.create(user_id=member.id, check_in_time=NOW - timedelta(days=1))
    )
    await db_session.commit()

    with pytest.raises(Conflict):
        await check_in(db_session, member.id, "Member", now=NOW)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_check_out_twice_conflicts(db_session):
    member = await _member(db_session)
    record = await check_in(db_session, member.id, "Member", now=NOW)
    await check_out(db_session, record.id, now=NOW + timedelta(minutes=30))

    with pytest.raises(Conflict):
        await check_out(db_session, record.id, now=NOW + timedelta(minutes=40))


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize(
    "user_type,error",
    [(None, ValidationError), ("Visitor", ValidationError), ("Trainer", NotFound)],
)
async def test_check_in_rejects_bad_user(db_session, user_type, error):
    member = await _member(db_session)
    with pytest.raises(error):
        await check_in(db_session, member.id, user_type, now=NOW)


# ---------------------------------------------------------------------------
# End-of-day sweep
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_auto_checkout_closes_everything_once(db_session):
    first = await _member(db_session)
    second = await _member(db_session)
    await check_in(db_session, first.id, "Member", now=NOW)
    await check_in(db_session, second.id, "Member", now=NOW)

    assert await auto_checkout(db_session, now=NOW) == 2
    assert await auto_checkout(db_session, now=NOW) == 0
    assert await active_count(db_session) == 0

    for record in await _records(db_session):
        await db_session.refresh(record)
        assert record.status == AttendanceStatus.CHECKED_OUT
        assert record.check_out_time == local_day_end(NOW)
        # 10:00 to 23:59:59.999 local
        assert record.duration == 840


# ---------------------------------------------------------------------------
# Kiosk self-service
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_self_service_requires_photo(db_session):
    member = await _member(db_session)

    with pytest.raises(ValidationError, match="Photo"):
        await self_service(db_session, member.id, "Member", "checkin", None, now=NOW)

    assert await _records(db_session) == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_self_service_rejects_unknown_action(db_session):
    member = await _member(db_session)
    with pytest.raises(ValidationError):
        await self_service(db_session, member.id, "Member", "wave", PHOTO, now=NOW)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_self_service_round_trip_and_one_visit_per_day(db_session):
    member = await _member(db_session)

    checked_in = await self_service(
        db_session, member.id, "Member", "checkin", PHOTO, now=NOW
    )
    assert checked_in.message.startswith("Welcome Asha Roy!")

    checked_out = await self_service(
        db_session, member.id, "Member", "checkout", PHOTO, now=NOW + timedelta(minutes=75)
    )
    assert checked_out.duration == 75
    assert "Time spent: 1h 15m" in checked_out.message

    with pytest.raises(Conflict, match="Only one check-in per day"):
        await self_service(
            db_session, member.id, "Member", "checkin", PHOTO, now=NOW + timedelta(hours=3)
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_self_service_checkout_without_session(db_session):
    member = await _member(db_session)
    with pytest.raises(NotFound, match="not currently checked in"):
        await self_service(db_session, member.id, "Member", "checkout", PHOTO, now=NOW)


# ---------------------------------------------------------------------------
# Trainer working days
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_trainer_day_check_in_and_out(db_session):
    trainer = TrainerFactory.create()
    db_session.add(trainer)
    await db_session.commit()
    trainer_id = trainer.id

    row = await record_action(
        db_session, trainer_id, TrainerAttendanceAction.CHECKIN, PHOTO, now=NOW
    )
    assert row.check_in == NOW
    assert row.check_out is None

    with pytest.raises(Conflict, match="Already checked in"):
        await record_action(
            db_session, trainer_id, TrainerAttendanceAction.CHECKIN, now=NOW
        )

    later = NOW + timedelta(hours=8)
    row = await record_action(
        db_session, trainer_id, TrainerAttendanceAction.CHECKOUT, PHOTO, now=later
    )
    assert row.check_out == later

    with pytest.raises(Conflict, match="Already checked out"):
        await record_action(
            db_session, trainer_id, TrainerAttendanceAction.CHECKOUT, now=later
        )

    days = await trainer_history(db_session, trainer_id)
    assert len(days) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_trainer_checkout_before_check_in(db_session):
    trainer = TrainerFactory.create()
    db_session.add(trainer)
    await db_session.commit()

    with pytest.raises(Conflict, match="Not checked in yet"):
        await record_action(
            db_session, trainer.id, TrainerAttendanceAction.CHECKOUT, now=NOW
        )


# ---------------------------------------------------------------------------
# Trainer leaves
# ---------------------------------------------------------------------------


async def _trainer_id(db):
    trainer = TrainerFactory.create(name="Kabir Singh")
    db.add(trainer)
    await db.commit()
    return trainer.id


@pytest.mark.asyncio
@pytest.mark.unit
async def test_add_leave_is_idempotent(db_session):
    trainer_id = await _trainer_id(db_session)
    day = date(2026, 3, 12)

    first = await add_leave(db_session, trainer_id, day)
    second = await add_leave(db_session, trainer_id, day)

    assert first.status == TrainerAttendanceStatus.LEAVE
    assert second.id == first.id
    assert await list_leaves(db_session, trainer_id) == [day]
    assert await list_leaves(db_session, trainer_id, end_date=date(2026, 3, 11)) == []


@pytest.mark.asyncio
@pytest.mark.unit
async def test_leave_on_worked_day_conflicts(db_session):
    trainer_id = await _trainer_id(db_session)
    await record_action(
        db_session, trainer_id, TrainerAttendanceAction.CHECKIN, PHOTO, now=NOW
    )

    with pytest.raises(Conflict, match="already checked in"):
        await add_leave(db_session, trainer_id, date(2026, 3, 10))


@pytest.mark.asyncio
@pytest.mark.unit
async def test_remove_leave(db_session):
    trainer_id = await _trainer_id(db_session)
    day = date(2026, 3, 12)
    await add_leave(db_session, trainer_id, day)

    await remove_leave(db_session, trainer_id, day)
    assert await list_leaves(db_session, trainer_id) == []

    with pytest.raises(NotFound, match="No leave recorded"):
        await remove_leave(db_session, trainer_id, day)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_check_in_on_leave_day_marks_present(db_session):
    trainer_id = await _trainer_id(db_session)
    await add_leave(db_session, trainer_id, date(2026, 3, 10))

    row = await record_action(
        db_session, trainer_id, TrainerAttendanceAction.CHECKIN, PHOTO, now=NOW
    )

    assert row.status == TrainerAttendanceStatus.PRESENT
    assert await list_leaves(db_session, trainer_id) == []
