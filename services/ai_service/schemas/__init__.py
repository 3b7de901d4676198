"""AI Service schemas package."""

from services.ai_service.schemas.main import (
    ChurnRisk,
    FinancialSummary,
    Insights,
    InsightsResponse,
    MonthlyRevenue,
    PricingOptimization,
    PricingRecommendation,
    RevenueBreakdown,
    RevenueOpportunity,
    TrainerPayouts,
    WeatherSnapshot,
)

__all__ = [
    "ChurnRisk",
    "FinancialSummary",
    "Insights",
    "InsightsResponse",
    "MonthlyRevenue",
    "PricingOptimization",
    "PricingRecommendation",
    "RevenueBreakdown",
    "RevenueOpportunity",
    "TrainerPayouts",
    "WeatherSnapshot",
]
