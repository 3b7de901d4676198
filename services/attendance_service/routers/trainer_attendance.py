"""Trainer daily attendance and leave days."""

import uuid
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from libs.auth.dependencies import require_staff
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.attendance_service.schemas import (
    LeaveRequest,
    TrainerAttendanceRequest,
    TrainerAttendanceResponse,
)
from services.attendance_service.services.trainer_days import (
    add_leave,
    list_leaves,
    record_action,
    remove_leave,
    trainer_history,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/trainers", tags=["trainer-attendance"])


@router.get("/{trainer_id}/attendance", response_model=List[TrainerAttendanceResponse])
async def list_trainer_attendance(
    trainer_id: uuid.UUID,
    limit: int = Query(100, ge=1, le=366),
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    return await trainer_history(db, trainer_id, limit=limit)


@router.post("/{trainer_id}/attendance", response_model=TrainerAttendanceResponse)
async def mark_trainer_attendance(
    trainer_id: uuid.UUID,
    payload: TrainerAttendanceRequest,
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    return await record_action(db, trainer_id, payload.action, payload.photo_url)


@router.get("/{trainer_id}/leaves", response_model=List[date])
async def get_trainer_leaves(
    trainer_id: uuid.UUID,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    return await list_leaves(db, trainer_id, start_date=start_date, end_date=end_date)


@router.post(
    "/{trainer_id}/leaves",
    response_model=TrainerAttendanceResponse,
    status_code=status.HTTP_201_CREATED,
)
async def mark_trainer_leave(
    trainer_id: uuid.UUID,
    payload: LeaveRequest,
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    return await add_leave(db, trainer_id, payload.date)


@router.delete("/{trainer_id}/leaves/{day}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_trainer_leave(
    trainer_id: uuid.UUID,
    day: date,
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    await remove_leave(db, trainer_id, day)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
