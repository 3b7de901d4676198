"""Trainer working days: one row per trainer per local day."""

import uuid
from datetime import date, datetime
from typing import List, Optional

from libs.common.datetime_utils import local_date, utc_now
from libs.common.errors import Conflict, NotFound
from libs.common.logging import get_logger
from services.attendance_service.models import (
    TrainerAttendance,
    TrainerAttendanceStatus,
)
from services.attendance_service.schemas import TrainerAttendanceAction
from services.members_service.models import Trainer
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def _get_trainer_or_404(db: AsyncSession, trainer_id: uuid.UUID) -> Trainer:
    trainer = await db.get(Trainer, trainer_id)
    if trainer is None:
        raise NotFound("Trainer not found")
    return trainer


async def _select_day(
    db: AsyncSession, trainer_id: uuid.UUID, day
) -> Optional[TrainerAttendance]:
    result = await db.execute(
        select(TrainerAttendance).where(
            TrainerAttendance.trainer_id == trainer_id,
            TrainerAttendance.date == day,
        )
    )
    return result.scalar_one_or_none()


async def get_or_create_day(
    db: AsyncSession, trainer_id: uuid.UUID, day
) -> TrainerAttendance:
    """Return today's row, creating it if needed.

    Two concurrent first actions race on ``uq_trainer_attendance_day``; the
    loser falls back to the row the winner inserted.
    """
    row = await _select_day(db, trainer_id, day)
    if row:
        return row

    row = TrainerAttendance(
        trainer_id=trainer_id, date=day, status=TrainerAttendanceStatus.PRESENT
    )
    try:
        async with db.begin_nested():
            db.add(row)
    except IntegrityError:
        row = await _select_day(db, trainer_id, day)
        if row is None:
            raise
    return row


async def record_action(
    db: AsyncSession,
    trainer_id: uuid.UUID,
    action: TrainerAttendanceAction,
    photo_url: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
) -> TrainerAttendance:
    now = now or utc_now()
    trainer = await _get_trainer_or_404(db, trainer_id)
    name = trainer.name
    row = await get_or_create_day(db, trainer_id, local_date(now))
    row_id = row.id

    if action == TrainerAttendanceAction.CHECKIN:
        result = await db.execute(
            update(TrainerAttendance)
            .where(TrainerAttendance.id == row_id, TrainerAttendance.check_in.is_(None))
            .values(
                check_in=now,
                check_in_photo=photo_url,
                status=TrainerAttendanceStatus.PRESENT,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await db.rollback()
            raise Conflict("Already checked in")
    else:
        if row.check_in is None:
            await db.rollback()
            raise Conflict("Not checked in yet")
        result = await db.execute(
            update(TrainerAttendance)
            .where(
                TrainerAttendance.id == row_id,
                TrainerAttendance.check_in.is_not(None),
                TrainerAttendance.check_out.is_(None),
            )
            .values(check_out=now, check_out_photo=photo_url, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await db.rollback()
            raise Conflict("Already checked out")

    await db.commit()
    row = await db.get(TrainerAttendance, row_id, populate_existing=True)
    logger.info("Trainer %s %s at %s", name, action.value, now.isoformat())
    return row


async def trainer_history(
    db: AsyncSession, trainer_id: uuid.UUID, *, limit: int = 100
) -> List[TrainerAttendance]:
    """A trainer's days, newest first."""
    await _get_trainer_or_404(db, trainer_id)
    result = await db.execute(
        select(TrainerAttendance)
        .where(TrainerAttendance.trainer_id == trainer_id)
        .order_by(TrainerAttendance.date.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Leaves
# ---------------------------------------------------------------------------


async def add_leave(
    db: AsyncSession, trainer_id: uuid.UUID, day: date
) -> TrainerAttendance:
    """Mark ``day`` as a leave day. Marking the same day twice is a no-op."""
    trainer = await _get_trainer_or_404(db, trainer_id)
    name = trainer.name

    row = await _select_day(db, trainer_id, day)
    if row is None:
        row = TrainerAttendance(
            trainer_id=trainer_id, date=day, status=TrainerAttendanceStatus.LEAVE
        )
        db.add(row)
    elif row.check_in is not None:
        raise Conflict("Trainer already checked in on that day")
    else:
        row.status = TrainerAttendanceStatus.LEAVE

    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise Conflict("Attendance for that day was recorded concurrently") from exc

    await db.refresh(row)
    logger.info("Trainer %s on leave %s", name, day.isoformat())
    return row


async def remove_leave(db: AsyncSession, trainer_id: uuid.UUID, day: date) -> None:
    await _get_trainer_or_404(db, trainer_id)
    result = await db.execute(
        delete(TrainerAttendance)
        .where(
            TrainerAttendance.trainer_id == trainer_id,
            TrainerAttendance.date == day,
            TrainerAttendance.status == TrainerAttendanceStatus.LEAVE,
            TrainerAttendance.check_in.is_(None),
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await db.rollback()
        raise NotFound("No leave recorded on that day")
    await db.commit()
    logger.info("Trainer %s leave on %s removed", trainer_id, day.isoformat())


async def list_leaves(
    db: AsyncSession,
    trainer_id: uuid.UUID,
    *,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[date]:
    """Leave days in ascending order, optionally bounded (inclusive)."""
    await _get_trainer_or_404(db, trainer_id)
    query = select(TrainerAttendance.date).where(
        TrainerAttendance.trainer_id == trainer_id,
        TrainerAttendance.status == TrainerAttendanceStatus.LEAVE,
    )
    if start_date:
        query = query.where(TrainerAttendance.date >= start_date)
    if end_date:
        query = query.where(TrainerAttendance.date <= end_date)
    result = await db.execute(query.order_by(TrainerAttendance.date))
    return list(result.scalars().all())
