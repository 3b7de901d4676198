"""Unit tests for kiosk identifier lookup."""

from datetime import datetime, timedelta, timezone

import pytest
from libs.common.errors import NotFound, ValidationError
from services.attendance_service.models import UserType
from services.attendance_service.schemas import TrainerAttendanceAction
from services.attendance_service.services.attendance_ops import check_in
from services.attendance_service.services.lookup import (
    clean_identifier,
    lookup,
    numeric_candidates,
)
from services.attendance_service.services.trainer_days import record_action
from services.members_service.models import MemberStatus
from tests.factories import MemberFactory, TrainerFactory

NOW = datetime(2026, 3, 10, 4, 30, tzinfo=timezone.utc)


@pytest.mark.unit
def test_clean_identifier_drops_spaces_and_hyphens():
    assert clean_identifier(" MEM-0 59 ") == "MEM059"


@pytest.mark.unit
def test_numeric_candidates_order():
    assert numeric_candidates("MEM", "59") == ["MEM59", "MEM059", "MEM0059", "59"]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_digits_resolve_to_padded_member_id(db_session):
    member = MemberFactory.create(member_id="MEM059", name="Ravi Das")
    db_session.add(member)
    await db_session.commit()

    result = await lookup(db_session, "59", now=NOW)

    assert result.user_id == member.id
    assert result.identifier == "MEM059"
    assert result.user_type == UserType.MEMBER
    assert result.is_checked_in is False
    assert result.has_checked_in_today is False
    assert result.status == MemberStatus.ACTIVE.value


@pytest.mark.asyncio
@pytest.mark.unit
async def test_digits_fall_back_to_trainers(db_session):
    trainer = TrainerFactory.create(trainer_id="TRN007", name="Kabir Sen")
    db_session.add(trainer)
    await db_session.commit()

    result = await lookup(db_session, "7", now=NOW)

    assert result.user_type == UserType.TRAINER
    assert result.identifier == "TRN007"
    assert result.status is None


@pytest.mark.asyncio
@pytest.mark.unit
async def test_text_matches_id_case_insensitively_then_name(db_session):
    member = MemberFactory.create(member_id="MEM120", name="Priya Ghosh")
    db_session.add(member)
    await db_session.commit()

    by_id = await lookup(db_session, "mem-120", now=NOW)
    by_name = await lookup(db_session, "ghosh", now=NOW)

    assert by_id.user_id == member.id
    assert by_name.user_id == member.id


@pytest.mark.asyncio
@pytest.mark.unit
async def test_phone_match(db_session):
    member = MemberFactory.create(phone="9876543210")
    db_session.add(member)
    await db_session.commit()

    result = await lookup(db_session, "9876543210", now=NOW)
    assert result.user_id == member.id


@pytest.mark.asyncio
@pytest.mark.unit
async def test_member_with_open_session(db_session):
    member = MemberFactory.create(
        member_id="MEM003", membership_end_date=NOW + timedelta(days=2, hours=1)
    )
    db_session.add(member)
    await db_session.commit()
    record = await check_in(db_session, member.id, "Member", now=NOW)

    result = await lookup(db_session, "MEM003", now=NOW + timedelta(minutes=45))

    assert result.is_checked_in is True
    assert result.attendance_id == record.id
    assert result.current_duration == 45
    assert result.has_checked_in_today is True
    assert result.days_until_expiry == 3
    assert result.membership_expired is False


@pytest.mark.asyncio
@pytest.mark.unit
async def test_expired_membership_is_flagged(db_session):
    member = MemberFactory.create(
        member_id="MEM004", membership_end_date=NOW - timedelta(days=3)
    )
    db_session.add(member)
    await db_session.commit()

    result = await lookup(db_session, "MEM004", now=NOW)

    assert result.membership_expired is True
    assert result.days_until_expiry < 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_trainer_state_comes_from_working_day(db_session):
    trainer = TrainerFactory.create(trainer_id="TRN002")
    db_session.add(trainer)
    await db_session.commit()
    await record_action(
        db_session, trainer.id, TrainerAttendanceAction.CHECKIN, now=NOW
    )

    result = await lookup(db_session, "TRN002", now=NOW + timedelta(minutes=30))

    assert result.is_checked_in is True
    assert result.has_checked_in_today is True
    assert result.current_duration == 30


@pytest.mark.asyncio
@pytest.mark.unit
async def test_unknown_identifier(db_session):
    with pytest.raises(NotFound, match="User not found"):
        await lookup(db_session, "99999", now=NOW)


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize("identifier", [None, "", " - "])
async def test_blank_identifier(db_session, identifier):
    with pytest.raises(ValidationError):
        await lookup(db_session, identifier, now=NOW)


@pytest.mark.asyncio
@pytest.mark.unit
@pytest.mark.parametrize("identifier", ["%", "_", "a%"])
async def test_like_wildcards_match_literally(db_session, identifier):
    db_session.add(MemberFactory.create(member_id="MEM001", name="Aarav Shah"))
    await db_session.commit()

    with pytest.raises(NotFound):
        await lookup(db_session, identifier, now=NOW)
