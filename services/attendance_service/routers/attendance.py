"""Front-desk attendance endpoints: daily list, check-in/out, sweep, history."""

import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import require_staff
from libs.auth.models import AuthUser
from libs.common.datetime_utils import utc_now
from libs.db.session import get_async_db
from services.attendance_service.models import UserType
from services.attendance_service.schemas import (
    AttendanceView,
    AutoCheckoutResult,
    AutoCheckoutStatus,
    CheckInRequest,
    DayAttendanceResponse,
    HistoryResponse,
)
from services.attendance_service.services.attendance_ops import (
    active_count,
    auto_checkout,
    check_in,
    check_out,
)
from services.attendance_service.services.listing import get_view, history, list_day
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/attendance", tags=["attendance"])


@router.get("", response_model=DayAttendanceResponse)
async def list_attendance(
    day: Optional[date] = Query(None, alias="date"),
    user_type: Optional[UserType] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    """Attendance for one local day (default today)."""
    views = await list_day(db, day=day, user_type=user_type, status=status_filter)
    return DayAttendanceResponse(data=views, count=len(views))


@router.post("", response_model=AttendanceView, status_code=status.HTTP_201_CREATED)
async def staff_check_in(
    payload: CheckInRequest,
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    record = await check_in(db, payload.user_id, payload.user_type, notes=payload.notes)
    return await get_view(db, record.id)


@router.post("/auto-checkout", response_model=AutoCheckoutResult)
async def run_auto_checkout(
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    """Close every open session at the end of the local day. Safe to re-run."""
    count = await auto_checkout(db)
    return AutoCheckoutResult(
        count=count, message=f"Successfully checked out {count} user(s)"
    )


@router.get("/auto-checkout", response_model=AutoCheckoutStatus)
async def auto_checkout_status(
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    return AutoCheckoutStatus(active_check_ins=await active_count(db), timestamp=utc_now())


@router.get("/history", response_model=HistoryResponse)
async def attendance_history(
    user_id: Optional[uuid.UUID] = None,
    user_type: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    views, stats = await history(
        db,
        user_id=user_id,
        user_type=user_type,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
    )
    return HistoryResponse(data=views, stats=stats)


@router.get("/{attendance_id}", response_model=AttendanceView)
async def get_attendance(
    attendance_id: uuid.UUID,
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    return await get_view(db, attendance_id)


@router.put("/{attendance_id}/checkout", response_model=AttendanceView)
async def staff_check_out(
    attendance_id: uuid.UUID,
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    record = await check_out(db, attendance_id)
    return await get_view(db, record.id)
