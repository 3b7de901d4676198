"""Kiosk identifier lookup: resolve a typed ID, phone or name to a gym user.

Numeric input ``59`` is tried as ``MEM59``, ``MEM059``, ``MEM0059``, raw
``59`` and finally as a phone number, against members and then trainers
(``TRN`` prefix). Other input is tried as a case-insensitive id, a phone
number, then a case-insensitive name fragment. The first hit wins.
"""

import re
from datetime import datetime
from typing import List, Optional, Type, Union

from libs.common.config import get_settings
from libs.common.datetime_utils import days_until, local_date, minutes_between, utc_now
from libs.common.errors import NotFound, ValidationError
from libs.common.logging import get_logger
from services.attendance_service.models import TrainerAttendance, UserType
from services.attendance_service.schemas import LookupResult
from services.attendance_service.services.attendance_ops import (
    get_active_session,
    has_record_on,
)
from services.members_service.models import Member, MemberStatus, Trainer
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

_SEPARATORS = re.compile(r"[\s-]")

GymUser = Union[Member, Trainer]


def clean_identifier(identifier: str) -> str:
    return _SEPARATORS.sub("", identifier)


def numeric_candidates(prefix: str, digits: str) -> List[str]:
    """Ids to try, in order, for an all-digit identifier."""
    return [f"{prefix}{digits}", f"{prefix}0{digits}", f"{prefix}00{digits}", digits]


async def _first(db: AsyncSession, query) -> Optional[GymUser]:
    result = await db.execute(query.limit(1))
    return result.scalars().first()


async def _find_numeric(
    db: AsyncSession, model: Type[GymUser], id_column, prefix: str, digits: str, phone: str
) -> Optional[GymUser]:
    for candidate in numeric_candidates(prefix, digits):
        user = await _first(db, select(model).where(id_column == candidate))
        if user:
            return user
    return await _first(db, select(model).where(model.phone == phone))


async def _find_text(
    db: AsyncSession, model: Type[GymUser], id_column, clean: str, raw: str
) -> Optional[GymUser]:
    user = await _first(db, select(model).where(func.upper(id_column) == clean.upper()))
    if user:
        return user
    user = await _first(db, select(model).where(model.phone == raw))
    if user:
        return user
    return await _first(
        db,
        select(model)
        .where(model.name.icontains(raw, autoescape=True))
        .order_by(model.name),
    )


async def find_user(db: AsyncSession, identifier: str) -> tuple[GymUser, UserType]:
    settings = get_settings()
    raw = identifier.strip()
    clean = clean_identifier(raw)
    if not clean:
        raise ValidationError("Membership ID or phone number is required")

    searches = (
        (Member, Member.member_id, settings.MEMBER_ID_PREFIX, UserType.MEMBER),
        (Trainer, Trainer.trainer_id, settings.TRAINER_ID_PREFIX, UserType.TRAINER),
    )
    for model, id_column, prefix, kind in searches:
        if clean.isdigit():
            user = await _find_numeric(db, model, id_column, prefix, clean, raw)
        else:
            user = await _find_text(db, model, id_column, clean, raw)
        if user:
            return user, kind

    raise NotFound("User not found. Please check your ID or phone number.")


async def lookup(
    db: AsyncSession, identifier: Optional[str], *, now: Optional[datetime] = None
) -> LookupResult:
    """Resolve ``identifier`` and report the user's attendance state for today."""
    if not identifier:
        raise ValidationError("Membership ID or phone number is required")
    now = now or utc_now()
    today = local_date(now)

    user, kind = await find_user(db, identifier)
    logger.info("Lookup %r resolved to %s %s", identifier, kind.value, user.name)

    is_checked_in = False
    has_checked_in_today = False
    current_duration = None
    attendance_id = None

    if kind == UserType.MEMBER:
        active = await get_active_session(db, user.id)
        if active:
            is_checked_in = True
            attendance_id = active.id
            current_duration = minutes_between(active.check_in_time, now)
        has_checked_in_today = await has_record_on(db, user.id, today)
    else:
        result = await db.execute(
            select(TrainerAttendance).where(
                TrainerAttendance.trainer_id == user.id,
                TrainerAttendance.date == today,
            )
        )
        day_row = result.scalar_one_or_none()
        if day_row and day_row.check_in:
            has_checked_in_today = True
            if not day_row.check_out:
                is_checked_in = True
                attendance_id = day_row.id
                current_duration = minutes_between(day_row.check_in, now)

    result = LookupResult(
        user_id=user.id,
        name=user.name,
        phone=user.phone,
        identifier=user.member_id if kind == UserType.MEMBER else user.trainer_id,
        user_type=kind,
        is_checked_in=is_checked_in,
        current_duration=current_duration,
        attendance_id=attendance_id,
        has_checked_in_today=has_checked_in_today,
    )

    if kind == UserType.MEMBER:
        result.status = user.status.value
        if user.membership_end_date:
            result.membership_end_date = user.membership_end_date
            result.days_until_expiry = days_until(user.membership_end_date, now)
            result.membership_expired = result.days_until_expiry < 0
        else:
            result.membership_expired = user.status == MemberStatus.EXPIRED

    return result
