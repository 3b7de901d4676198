"""Pydantic schemas for the AI Service API."""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

# ============================================================================
# FINANCIAL SUMMARY
# ============================================================================


class RevenueBreakdown(BaseModel):
    membership: float = 0
    pt: float = 0
    total: float = 0


class MonthlyRevenue(BaseModel):
    month: str = Field(..., description="YYYY-MM in the gym's timezone")
    amount: float


class TrainerPayouts(BaseModel):
    total: float = 0
    base_salary: float = 0
    commission: float = 0
    count: int = 0


class FinancialSummary(BaseModel):
    months: int
    start_date: datetime
    end_date: datetime
    revenue: RevenueBreakdown
    revenue_by_category: dict[str, float]
    monthly_revenue: list[MonthlyRevenue]
    payment_count: int
    outstanding_balance: float
    members_total: int
    members_by_status: dict[str, int]
    members_by_payment_status: dict[str, int]
    trainer_payouts: TrainerPayouts
    pt_margin: float = Field(0, description="Percent of PT revenue left after commission")
    membership_margin: float = Field(
        0, description="Percent of membership revenue left after base salaries"
    )


# ============================================================================
# WEATHER
# ============================================================================


class WeatherSnapshot(BaseModel):
    temperature: float
    humidity: float
    description: str = ""
    observed_at: datetime


# ============================================================================
# AI INSIGHTS
# ============================================================================


class ChurnRisk(BaseModel):
    high_risk_count: int = 0
    medium_risk_count: int = 0
    low_risk_count: int = 0
    top_reasons: list[str] = []
    recommendations: list[str] = []


class PricingRecommendation(BaseModel):
    type: str = "general"
    suggestion: str
    expected_impact: str = ""
    priority: str = "medium"


class PricingOptimization(BaseModel):
    current_strategy: str = ""
    recommendations: list[PricingRecommendation] = []
    competitive_analysis: str = ""


class RevenueOpportunity(BaseModel):
    opportunity: str
    potential_revenue: float = 0
    effort: str = "medium"
    timeline: str = ""


class Insights(BaseModel):
    churn_risk: ChurnRisk
    pricing_optimization: PricingOptimization
    revenue_opportunities: list[RevenueOpportunity] = []
    local_insights: dict[str, Any] = {}


class InsightsResponse(BaseModel):
    source: Literal["ai", "fallback"]
    model: Optional[str] = None
    cached: bool = False
    generated_at: datetime
    summary: FinancialSummary
    weather: Optional[WeatherSnapshot] = None
    data: Insights
