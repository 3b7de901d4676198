"""AI service routers."""

from services.ai_service.routers.analytics import router as analytics_router

__all__ = ["analytics_router"]
