"""Attendance state machine: check-in, check-out and the end-of-day sweep.

Per user the lifecycle is ``none -> checked-in -> checked-out``. Transitions
out of ``checked-in`` are conditional updates (``WHERE status = 'checked-in'``)
so a concurrent checkout or sweep can never close a session twice, and the
partial unique index on ``attendance(user_id)`` rejects a second open session.
"""

import uuid
from datetime import datetime
from typing import Optional, Union

from libs.common.datetime_utils import (
    local_date,
    local_day_end,
    minutes_between,
    utc_now,
)
from libs.common.errors import Conflict, NotFound, ValidationError
from libs.common.logging import get_logger
from services.attendance_service.models import (
    AttendanceRecord,
    AttendanceStatus,
    UserType,
)
from services.attendance_service.schemas import SelfServiceAction, SelfServiceResponse
from services.members_service.models import Member, Trainer
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

GymUser = Union[Member, Trainer]

_USER_MODELS = {
    UserType.MEMBER: Member,
    UserType.TRAINER: Trainer,
}


def parse_user_type(user_type: Optional[str]) -> UserType:
    if not user_type:
        raise ValidationError("user_type is required")
    try:
        return UserType(user_type)
    except ValueError:
        raise ValidationError('user_type must be either "Member" or "Trainer"')


async def resolve_user(
    db: AsyncSession, user_id: Optional[uuid.UUID], user_type: Optional[str]
) -> tuple[GymUser, UserType]:
    """Validate the (id, type) pair and load the member or trainer."""
    if not user_id:
        raise ValidationError("user_id is required")
    kind = parse_user_type(user_type)
    user = await db.get(_USER_MODELS[kind], user_id)
    if user is None:
        raise NotFound(f"{kind.value} not found")
    return user, kind


async def get_active_session(
    db: AsyncSession, user_id: uuid.UUID
) -> Optional[AttendanceRecord]:
    result = await db.execute(
        select(AttendanceRecord).where(
            AttendanceRecord.user_id == user_id,
            AttendanceRecord.status == AttendanceStatus.CHECKED_IN,
        )
    )
    return result.scalar_one_or_none()


async def has_record_on(db: AsyncSession, user_id: uuid.UUID, day) -> bool:
    result = await db.execute(
        select(AttendanceRecord.id)
        .where(AttendanceRecord.user_id == user_id, AttendanceRecord.date == day)
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def _open_session(
    db: AsyncSession,
    user: GymUser,
    kind: UserType,
    now: datetime,
    *,
    photo_url: Optional[str] = None,
    notes: str = "",
) -> AttendanceRecord:
    name = user.name
    record = AttendanceRecord(
        user_id=user.id,
        user_type=kind,
        check_in_time=now,
        status=AttendanceStatus.CHECKED_IN,
        date=local_date(now),
        check_in_photo=photo_url,
        notes=notes,
    )
    db.add(record)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise Conflict(f"{name} is already checked in") from exc
    await db.refresh(record)
    return record


async def _close_session(
    db: AsyncSession,
    record_id: uuid.UUID,
    check_in_time: datetime,
    check_out_time: datetime,
    photo_url: Optional[str] = None,
) -> bool:
    """Conditionally move one record to checked-out. False if it already was."""
    values = {
        "check_out_time": check_out_time,
        "status": AttendanceStatus.CHECKED_OUT,
        "duration": minutes_between(check_in_time, check_out_time),
        "updated_at": utc_now(),
    }
    if photo_url is not None:
        values["check_out_photo"] = photo_url

    result = await db.execute(
        update(AttendanceRecord)
        .where(
            AttendanceRecord.id == record_id,
            AttendanceRecord.status == AttendanceStatus.CHECKED_IN,
        )
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


# ---------------------------------------------------------------------------
# Staff flow
# ---------------------------------------------------------------------------


async def check_in(
    db: AsyncSession,
    user_id: Optional[uuid.UUID],
    user_type: Optional[str],
    *,
    notes: str = "",
    now: Optional[datetime] = None,
) -> AttendanceRecord:
    """Open a session. Conflict if the user has an open session on any day."""
    now = now or utc_now()
    user, kind = await resolve_user(db, user_id, user_type)

    if await get_active_session(db, user.id):
        raise Conflict(f"{user.name} is already checked in")

    record = await _open_session(db, user, kind, now, notes=notes)
    logger.info("%s %s checked in (attendance %s)", kind.value, user.name, record.id)
    return record


async def check_out(
    db: AsyncSession, attendance_id: uuid.UUID, *, now: Optional[datetime] = None
) -> AttendanceRecord:
    now = now or utc_now()
    record = await db.get(AttendanceRecord, attendance_id)
    if record is None:
        raise NotFound("Attendance record not found")
    if record.status == AttendanceStatus.CHECKED_OUT:
        raise Conflict("User is already checked out")

    closed = await _close_session(db, record.id, record.check_in_time, now)
    if not closed:
        await db.rollback()
        raise Conflict("User is already checked out")
    await db.commit()
    await db.refresh(record)

    logger.info("Attendance %s checked out after %s min", record.id, record.duration)
    return record


async def check_out_user(
    db: AsyncSession,
    user: GymUser,
    *,
    photo_url: Optional[str] = None,
    now: Optional[datetime] = None,
) -> AttendanceRecord:
    """Close the user's open session, whichever day it was opened."""
    now = now or utc_now()
    name = user.name
    record = await get_active_session(db, user.id)
    if record is None:
        raise NotFound(f"{name} is not currently checked in")

    closed = await _close_session(
        db, record.id, record.check_in_time, now, photo_url=photo_url
    )
    if not closed:
        await db.rollback()
        raise Conflict(f"{name} is already checked out")
    await db.commit()
    await db.refresh(record)
    return record


# ---------------------------------------------------------------------------
# Self-service (kiosk) flow
# ---------------------------------------------------------------------------


async def self_service(
    db: AsyncSession,
    user_id: Optional[uuid.UUID],
    user_type: Optional[str],
    action: Optional[str],
    photo_url: Optional[str],
    *,
    now: Optional[datetime] = None,
) -> SelfServiceResponse:
    """
    Kiosk check-in/out with a mandatory photo.

    1. Validate inputs (nothing is written without a photo)
    2. Load the user
    3. checkin: refuse if a session is open or any visit exists today
    4. checkout: close the open session and report the time spent
    """
    now = now or utc_now()
    if not user_id or not user_type or not action:
        raise ValidationError("user_id, user_type, and action are required")
    if not photo_url:
        raise ValidationError("Photo verification is required")
    try:
        step = SelfServiceAction(action)
    except ValueError:
        raise ValidationError('Invalid action. Use "checkin" or "checkout"')

    user, kind = await resolve_user(db, user_id, user_type)

    if step == SelfServiceAction.CHECKIN:
        if await get_active_session(db, user.id):
            raise Conflict(f"{user.name} is already checked in")
        if await has_record_on(db, user.id, local_date(now)):
            raise Conflict(
                f"{user.name} has already checked in today. "
                "Only one check-in per day is allowed."
            )
        record = await _open_session(db, user, kind, now, photo_url=photo_url)
        logger.info("Self-service check-in: %s %s", kind.value, user.name)
        return SelfServiceResponse(
            attendance_id=record.id,
            message=f"Welcome {user.name}! You have been checked in successfully.",
            check_in_time=record.check_in_time,
        )

    record = await check_out_user(db, user, photo_url=photo_url, now=now)
    hours, minutes = divmod(record.duration or 0, 60)
    logger.info("Self-service check-out: %s %s", kind.value, user.name)
    return SelfServiceResponse(
        attendance_id=record.id,
        message=(
            f"Goodbye {user.name}! You have been checked out. "
            f"Time spent: {hours}h {minutes}m"
        ),
        check_out_time=record.check_out_time,
        duration=record.duration,
    )


# ---------------------------------------------------------------------------
# End-of-day sweep
# ---------------------------------------------------------------------------


async def auto_checkout(db: AsyncSession, *, now: Optional[datetime] = None) -> int:
    """Close every open session at 23:59:59.999 local today.

    Returns how many records this run actually transitioned; sessions closed
    by someone else in the meantime are skipped.
    """
    now = now or utc_now()
    checkout_time = local_day_end(now)

    result = await db.execute(
        select(AttendanceRecord.id, AttendanceRecord.check_in_time).where(
            AttendanceRecord.status == AttendanceStatus.CHECKED_IN
        )
    )
    open_sessions = result.all()
    if not open_sessions:
        return 0

    closed = 0
    for record_id, check_in_time in open_sessions:
        if await _close_session(db, record_id, check_in_time, checkout_time):
            closed += 1
    await db.commit()

    logger.info(
        "Auto-checkout closed %d of %d open session(s)", closed, len(open_sessions)
    )
    return closed


async def active_count(db: AsyncSession) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(AttendanceRecord)
        .where(AttendanceRecord.status == AttendanceStatus.CHECKED_IN)
    )
    return result.scalar_one()
