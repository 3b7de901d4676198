"""AI Service models package."""

from services.ai_service.models.core import AIInsight

__all__ = ["AIInsight"]
