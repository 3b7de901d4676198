"""Public kiosk endpoints. No login; rate limited per client IP."""

from fastapi import APIRouter, Depends, Request
from libs.common.rate_limit import kiosk_limit
from libs.db.session import get_async_db
from services.attendance_service.schemas import (
    LookupRequest,
    LookupResult,
    SelfServiceRequest,
    SelfServiceResponse,
)
from services.attendance_service.services.attendance_ops import self_service
from services.attendance_service.services.lookup import lookup
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/attendance", tags=["kiosk"])


@router.post("/lookup", response_model=LookupResult)
@kiosk_limit
async def kiosk_lookup(
    request: Request,
    payload: LookupRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """Find a member or trainer by membership ID, phone number or name."""
    return await lookup(db, payload.identifier)


@router.post("/self-service", response_model=SelfServiceResponse)
@kiosk_limit
async def kiosk_self_service(
    request: Request,
    payload: SelfServiceRequest,
    db: AsyncSession = Depends(get_async_db),
):
    """Photo-verified check-in or check-out. One check-in per local day."""
    return await self_service(
        db,
        payload.user_id,
        payload.user_type,
        payload.action,
        payload.photo_url,
    )
