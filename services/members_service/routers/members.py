"""Members router: registration, listing (with expiry sweep), read and update."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import require_staff
from libs.auth.models import AuthUser
from libs.common.datetime_utils import utc_now
from libs.db.session import get_async_db
from services.members_service.schemas import (
    MemberCreate,
    MemberListResponse,
    MemberResponse,
    MemberUpdate,
)
from services.members_service.services.member_service import (
    get_member_or_404,
    list_members,
    register_member,
    to_member_response,
    update_member,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/members", tags=["members"])


@router.get("", response_model=MemberListResponse)
async def list_members_endpoint(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    search: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    payment_status: Optional[str] = None,
    member_type: Optional[str] = Query(None, alias="type", pattern="^(all|pt|non-pt)$"),
    sort_by: str = "member_id",
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    """
    List members. Active members past their end date are marked Expired
    before the page is read.
    """
    now = utc_now()
    members, pagination = await list_members(
        db,
        page=page,
        limit=limit,
        search=search,
        status=status_filter,
        payment_status=payment_status,
        member_type=member_type,
        sort_by=sort_by,
        sort_order=sort_order,
        now=now,
    )
    return MemberListResponse(
        data=[to_member_response(m, now=now) for m in members],
        pagination=pagination,
    )


@router.post("", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
async def create_member(
    member_in: MemberCreate,
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    member = await register_member(db, member_in)
    return to_member_response(member)


@router.get("/{member_id}", response_model=MemberResponse)
async def get_member(
    member_id: uuid.UUID,
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    member = await get_member_or_404(db, member_id)
    return to_member_response(member)


@router.patch("/{member_id}", response_model=MemberResponse)
async def patch_member(
    member_id: uuid.UUID,
    member_in: MemberUpdate,
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    member = await update_member(db, member_id, member_in)
    return to_member_response(member)
