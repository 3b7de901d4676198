"""Read-side views over attendance: daily desk listing and paginated history."""

import math
import uuid
from datetime import date, datetime
from typing import List, Optional, Sequence, Tuple

from libs.common.datetime_utils import local_date, minutes_between, utc_now
from libs.common.errors import NotFound, ValidationError
from services.attendance_service.models import (
    AttendanceRecord,
    AttendanceStatus,
    TrainerAttendance,
    UserType,
)
from services.attendance_service.schemas import AttendanceView, HistoryStats
from services.members_service.models import Member, Trainer
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession


def attendance_view(
    record: AttendanceRecord,
    name: Optional[str],
    phone: Optional[str],
    now: datetime,
) -> AttendanceView:
    """Row view with ``current_duration`` projected for open sessions."""
    current = None
    if record.status == AttendanceStatus.CHECKED_IN:
        current = minutes_between(record.check_in_time, now)
    return AttendanceView(
        id=record.id,
        user_id=record.user_id,
        user_type=record.user_type,
        user_name=name,
        user_phone=phone,
        check_in_time=record.check_in_time,
        check_out_time=record.check_out_time,
        status=record.status.value,
        duration=record.duration,
        current_duration=current,
        date=record.date,
        check_in_photo=record.check_in_photo,
        check_out_photo=record.check_out_photo,
        notes=record.notes or "",
    )


def trainer_day_view(
    row: TrainerAttendance,
    name: Optional[str],
    phone: Optional[str],
    now: datetime,
) -> AttendanceView:
    """Map a trainer's day row into the shared attendance shape."""
    status = row.status.value
    duration = None
    current = None
    if row.check_in and not row.check_out:
        status = AttendanceStatus.CHECKED_IN.value
        current = minutes_between(row.check_in, now)
    elif row.check_in and row.check_out:
        status = AttendanceStatus.CHECKED_OUT.value
        duration = minutes_between(row.check_in, row.check_out)
        current = duration
    return AttendanceView(
        id=row.id,
        user_id=row.trainer_id,
        user_type=UserType.TRAINER,
        user_name=name,
        user_phone=phone,
        check_in_time=row.check_in,
        check_out_time=row.check_out,
        status=status,
        duration=duration,
        current_duration=current,
        date=row.date,
        check_in_photo=row.check_in_photo,
        check_out_photo=row.check_out_photo,
    )


def _attendance_query():
    """Records joined to whichever user table ``user_type`` points at."""
    return (
        select(
            AttendanceRecord,
            func.coalesce(Member.name, Trainer.name).label("name"),
            func.coalesce(Member.phone, Trainer.phone).label("phone"),
        )
        .outerjoin(
            Member,
            (AttendanceRecord.user_id == Member.id)
            & (AttendanceRecord.user_type == UserType.MEMBER),
        )
        .outerjoin(
            Trainer,
            (AttendanceRecord.user_id == Trainer.id)
            & (AttendanceRecord.user_type == UserType.TRAINER),
        )
    )


def _parse_status(status: Optional[str]) -> Optional[AttendanceStatus]:
    if not status:
        return None
    try:
        return AttendanceStatus(status)
    except ValueError:
        raise ValidationError('status must be "checked-in" or "checked-out"')


async def list_day(
    db: AsyncSession,
    *,
    day: Optional[date] = None,
    user_type: Optional[UserType] = None,
    status: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[AttendanceView]:
    """Attendance for one local day (default today), newest check-in first.

    ``user_type=Trainer`` reads the trainers' daily rows instead.
    """
    now = now or utc_now()
    day = day or local_date(now)
    wanted = _parse_status(status)

    if user_type == UserType.TRAINER:
        query = (
            select(TrainerAttendance, Trainer.name, Trainer.phone)
            .join(Trainer, TrainerAttendance.trainer_id == Trainer.id)
            .where(TrainerAttendance.date == day)
        )
        if wanted == AttendanceStatus.CHECKED_IN:
            query = query.where(
                TrainerAttendance.check_in.is_not(None),
                TrainerAttendance.check_out.is_(None),
            )
        elif wanted == AttendanceStatus.CHECKED_OUT:
            query = query.where(TrainerAttendance.check_out.is_not(None))
        query = query.order_by(TrainerAttendance.check_in.desc())
        rows = (await db.execute(query)).all()
        return [trainer_day_view(row, name, phone, now) for row, name, phone in rows]

    query = _attendance_query().where(AttendanceRecord.date == day)
    if user_type:
        query = query.where(AttendanceRecord.user_type == user_type)
    if wanted:
        query = query.where(AttendanceRecord.status == wanted)
    query = query.order_by(AttendanceRecord.check_in_time.desc())

    rows = (await db.execute(query)).all()
    return [attendance_view(record, name, phone, now) for record, name, phone in rows]


async def history(
    db: AsyncSession,
    *,
    user_id: Optional[uuid.UUID] = None,
    user_type: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    page: int = 1,
    limit: int = 50,
    now: Optional[datetime] = None,
) -> Tuple[List[AttendanceView], HistoryStats]:
    """
    Paginated visit history across members and trainers.

    ``user_type`` is ``Member``, ``Trainer`` or ``all``/None. Trainer entries
    come from the daily trainer rows. For ``all`` both sources are read up to
    the end of the requested page, merged by check-in time and sliced.
    """
    now = now or utc_now()
    if user_type in (None, "", "all"):
        kinds = {UserType.MEMBER, UserType.TRAINER}
    else:
        try:
            kinds = {UserType(user_type)}
        except ValueError:
            raise ValidationError('user_type must be "Member", "Trainer" or "all"')

    skip = (page - 1) * limit
    merged = len(kinds) > 1
    fetch_skip, fetch_limit = (0, skip + limit) if merged else (skip, limit)

    member_conditions = []
    trainer_conditions = []
    if user_id:
        member_conditions.append(AttendanceRecord.user_id == user_id)
        trainer_conditions.append(TrainerAttendance.trainer_id == user_id)
    if start_date:
        member_conditions.append(AttendanceRecord.date >= start_date)
        trainer_conditions.append(TrainerAttendance.date >= start_date)
    if end_date:
        member_conditions.append(AttendanceRecord.date <= end_date)
        trainer_conditions.append(TrainerAttendance.date <= end_date)

    views: List[AttendanceView] = []
    total = 0

    if UserType.MEMBER in kinds:
        # The generic attendance table also holds staff-desk trainer visits
        query = (
            _attendance_query()
            .where(*member_conditions)
            .order_by(AttendanceRecord.check_in_time.desc())
            .offset(fetch_skip)
            .limit(fetch_limit)
        )
        rows = (await db.execute(query)).all()
        views.extend(attendance_view(r, name, phone, now) for r, name, phone in rows)
        total += await _count(db, AttendanceRecord, member_conditions)

    if UserType.TRAINER in kinds:
        query = (
            select(TrainerAttendance, Trainer.name, Trainer.phone)
            .join(Trainer, TrainerAttendance.trainer_id == Trainer.id)
            .where(*trainer_conditions)
            .order_by(TrainerAttendance.check_in.desc())
            .offset(fetch_skip)
            .limit(fetch_limit)
        )
        rows = (await db.execute(query)).all()
        views.extend(trainer_day_view(r, name, phone, now) for r, name, phone in rows)
        total += await _count(db, TrainerAttendance, trainer_conditions)

    if merged:
        views.sort(key=_check_in_sort_key, reverse=True)
        views = views[skip : skip + limit]

    stats = HistoryStats(
        total_records=total,
        total_pages=math.ceil(total / limit) if limit else 0,
        current_page=page,
        records_per_page=limit,
    )
    if user_id and UserType.MEMBER in kinds:
        await _add_visit_stats(db, stats, member_conditions)
    elif user_id:
        stats.total_visits = total

    return views, stats


def _check_in_sort_key(view: AttendanceView) -> float:
    return view.check_in_time.timestamp() if view.check_in_time else 0.0


async def _count(db: AsyncSession, model, conditions: Sequence) -> int:
    result = await db.execute(select(func.count()).select_from(model).where(*conditions))
    return result.scalar_one()


async def _add_visit_stats(
    db: AsyncSession, stats: HistoryStats, conditions: Sequence
) -> None:
    result = await db.execute(
        select(
            func.count(AttendanceRecord.id),
            func.coalesce(func.sum(AttendanceRecord.duration), 0),
            func.avg(AttendanceRecord.duration),
        ).where(*conditions)
    )
    visits, total_duration, avg_duration = result.one()
    stats.total_visits = visits
    stats.total_duration = int(total_duration or 0)
    stats.avg_duration = math.floor((avg_duration or 0) + 0.5)


async def get_view(
    db: AsyncSession, attendance_id: uuid.UUID, *, now: Optional[datetime] = None
) -> AttendanceView:
    result = await db.execute(
        _attendance_query().where(AttendanceRecord.id == attendance_id)
    )
    row = result.one_or_none()
    if row is None:
        raise NotFound("Attendance record not found")
    record, name, phone = row
    return attendance_view(record, name, phone, now or utc_now())
