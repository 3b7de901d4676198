"""Analytics endpoints: financial summary and AI insights."""

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import require_staff
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.ai_service.analytics.insights import get_insights
from services.ai_service.analytics.summary import financial_summary
from services.ai_service.providers.weather import WeatherClient, get_weather_client
from services.ai_service.schemas import FinancialSummary, InsightsResponse
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/summary", response_model=FinancialSummary)
async def get_summary(
    months: int = Query(12, ge=1, le=60),
    _: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
):
    return await financial_summary(db, months)


@router.get("/ai", response_model=InsightsResponse)
async def get_ai_insights(
    months: int = Query(12, ge=1, le=60),
    force: bool = False,
    current_user: AuthUser = Depends(require_staff),
    db: AsyncSession = Depends(get_async_db),
    weather: WeatherClient = Depends(get_weather_client),
):
    """
    AI predictions for the window.

    Returns ``source="fallback"`` when no model is configured. Provider
    timeouts return 504 and provider failures 502.
    """
    return await get_insights(
        db,
        weather,
        months=months,
        force=force,
        requested_by=current_user.email or current_user.user_id,
    )
