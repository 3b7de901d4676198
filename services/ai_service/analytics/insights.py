"""AI-generated business insights on top of the financial summary.

Without a configured model the rule-based fallback is returned, labelled
``source="fallback"``. A configured model that times out or fails surfaces
as ``UpstreamTimeout``/``UpstreamError``; it never degrades to the fallback.
Successful model output is cached per window for ``AI_INSIGHTS_CACHE_DAYS``.
"""

import json
from datetime import datetime, timedelta
from typing import Optional

import pydantic
from libs.common.config import get_settings
from libs.common.datetime_utils import local_date, utc_now
from libs.common.errors import UpstreamError
from libs.common.logging import get_logger
from services.ai_service.analytics.summary import financial_summary
from services.ai_service.models import AIInsight
from services.ai_service.providers.base import call_llm
from services.ai_service.providers.weather import WeatherClient
from services.ai_service.schemas import (
    ChurnRisk,
    FinancialSummary,
    Insights,
    InsightsResponse,
    PricingOptimization,
    PricingRecommendation,
    RevenueOpportunity,
    WeatherSnapshot,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

INSIGHT_KIND = "predictions"

SYSTEM_PROMPT = """You are a business analytics assistant for an independent gym.
You receive a financial summary and return predictions and local insights.
Return ONLY valid JSON matching the requested structure, no markdown."""

USER_PROMPT_TEMPLATE = """Gym location: {location}
Current date: {today}

FINANCIAL DATA (last {months} months):
- Total revenue: {revenue_total:.0f}
- Membership revenue: {revenue_membership:.0f}
- PT revenue: {revenue_pt:.0f}
- Revenue by category: {by_category}
- Monthly revenue trend: {trend}
- Outstanding member balance: {outstanding:.0f}
- Trainer payouts: {payouts:.0f}
- Membership margin: {membership_margin}%
- PT margin: {pt_margin}%

MEMBER DATA:
- Total members: {members_total}
- By status: {by_status}
- By payment status: {by_payment_status}

WEATHER: {weather}

Return JSON with this exact structure:
{{
    "churn_risk": {{
        "high_risk_count": <number>,
        "medium_risk_count": <number>,
        "low_risk_count": <number>,
        "top_reasons": ["..."],
        "recommendations": ["..."]
    }},
    "pricing_optimization": {{
        "current_strategy": "<analysis>",
        "recommendations": [
            {{"type": "<membership|pt|general>", "suggestion": "...", "expected_impact": "...", "priority": "<high|medium|low>"}}
        ],
        "competitive_analysis": "..."
    }},
    "revenue_opportunities": [
        {{"opportunity": "...", "potential_revenue": <number>, "effort": "<low|medium|high>", "timeline": "..."}}
    ],
    "local_insights": {{
        "seasonal_analysis": [{{"season": "...", "impact": "...", "recommendation": "..."}}],
        "upcoming_events": [{{"event": "...", "date": "...", "prediction": "..."}}]
    }}
}}

Base churn risk on payment status and member counts. Explain dips in the
monthly trend with the most plausible local cause (weather, exams, festivals)
and look ahead from the current date."""


def fallback_insights(members_total: int) -> Insights:
    """Rule-based insights used when no AI model is configured."""
    return Insights(
        churn_risk=ChurnRisk(
            high_risk_count=round(members_total * 0.15),
            medium_risk_count=round(members_total * 0.25),
            low_risk_count=round(members_total * 0.60),
            top_reasons=[
                "Irregular payment patterns",
                "Low attendance frequency",
                "No recent engagement",
            ],
            recommendations=[
                "Follow up with members who have an outstanding balance",
                "Offer limited-time renewal discounts",
                "Schedule one-on-one check-ins",
            ],
        ),
        pricing_optimization=PricingOptimization(
            current_strategy="Current pricing appears competitive for the local market",
            recommendations=[
                PricingRecommendation(
                    type="membership",
                    suggestion="Introduce quarterly plans at 10% discount",
                    expected_impact="Increase upfront revenue",
                    priority="high",
                ),
                PricingRecommendation(
                    type="pt",
                    suggestion="Create PT package bundles",
                    expected_impact="Higher average transaction value",
                    priority="medium",
                ),
            ],
            competitive_analysis="Position as a gym with a personal training focus",
        ),
        revenue_opportunities=[
            RevenueOpportunity(
                opportunity="Group fitness classes",
                potential_revenue=50000,
                effort="medium",
                timeline="2-3 months",
            ),
            RevenueOpportunity(
                opportunity="Nutrition consultation add-on",
                potential_revenue=30000,
                effort="low",
                timeline="1 month",
            ),
        ],
        local_insights={
            "seasonal_analysis": [
                {
                    "season": "Monsoon (Jun-Sep)",
                    "impact": "Possible attendance drop due to weather",
                    "recommendation": "Promote indoor group activities and challenges",
                }
            ],
        },
    )


def build_prompt(
    summary: FinancialSummary, weather: Optional[WeatherSnapshot], now: datetime
) -> str:
    settings = get_settings()
    trend = ", ".join(f"{m.month}: {m.amount:.0f}" for m in summary.monthly_revenue)
    weather_line = (
        f"{weather.temperature:.1f}C, {weather.humidity:.0f}% humidity, {weather.description}"
        if weather
        else "not available"
    )
    return USER_PROMPT_TEMPLATE.format(
        location=settings.GYM_LOCATION,
        today=local_date(now).strftime("%A, %d %B %Y"),
        months=summary.months,
        revenue_total=summary.revenue.total,
        revenue_membership=summary.revenue.membership,
        revenue_pt=summary.revenue.pt,
        by_category=json.dumps(summary.revenue_by_category),
        trend=trend or "no payments",
        outstanding=summary.outstanding_balance,
        payouts=summary.trainer_payouts.total,
        membership_margin=summary.membership_margin,
        pt_margin=summary.pt_margin,
        members_total=summary.members_total,
        by_status=json.dumps(summary.members_by_status),
        by_payment_status=json.dumps(summary.members_by_payment_status),
        weather=weather_line,
    )


async def _cached(
    db: AsyncSession, months: int, now: datetime
) -> Optional[AIInsight]:
    cutoff = now - timedelta(days=get_settings().AI_INSIGHTS_CACHE_DAYS)
    result = await db.execute(
        select(AIInsight)
        .where(
            AIInsight.kind == INSIGHT_KIND,
            AIInsight.months == months,
            AIInsight.source == "ai",
            AIInsight.created_at >= cutoff,
        )
        .order_by(AIInsight.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def get_insights(
    db: AsyncSession,
    weather_client: WeatherClient,
    *,
    months: int = 12,
    force: bool = False,
    requested_by: Optional[str] = None,
    now: Optional[datetime] = None,
) -> InsightsResponse:
    """
    Produce insights for the trailing ``months`` window.

    1. Serve a recent cached AI result unless ``force``
    2. Build the financial summary
    3. No model configured: return the labelled fallback
    4. Fetch weather (if configured) and call the model
    5. Validate the JSON and cache it
    """
    settings = get_settings()
    now = now or utc_now()

    if not force and settings.ai_configured:
        cached = await _cached(db, months, now)
        if cached:
            return InsightsResponse(
                source="ai",
                model=cached.model_name,
                cached=True,
                generated_at=cached.created_at,
                summary=FinancialSummary.model_validate(cached.input_summary),
                data=Insights.model_validate(cached.output_data),
            )

    summary = await financial_summary(db, months, now=now)

    if not settings.ai_configured:
        logger.info("AI model not configured; returning fallback insights")
        return InsightsResponse(
            source="fallback",
            generated_at=now,
            summary=summary,
            data=fallback_insights(summary.members_total),
        )

    weather = await weather_client.current()
    ai_response = await call_llm(
        system_prompt=SYSTEM_PROMPT,
        user_prompt=build_prompt(summary, weather, now),
    )
    parsed = ai_response.parse_json()
    try:
        insights = Insights.model_validate(parsed)
    except pydantic.ValidationError as exc:
        raise UpstreamError("AI response did not match the insights schema") from exc

    db.add(
        AIInsight(
            kind=INSIGHT_KIND,
            months=months,
            source="ai",
            model_name=ai_response.model,
            input_summary=summary.model_dump(mode="json"),
            output_data=insights.model_dump(mode="json"),
            latency_ms=ai_response.latency_ms,
            input_tokens=ai_response.input_tokens,
            output_tokens=ai_response.output_tokens,
            requested_by=requested_by,
            created_at=now,
        )
    )
    await db.commit()
    logger.info(
        f"Generated AI insights for {months} months with {ai_response.model} "
        f"in {ai_response.latency_ms}ms"
    )

    return InsightsResponse(
        source="ai",
        model=ai_response.model,
        generated_at=now,
        summary=summary,
        weather=weather,
        data=insights,
    )
