"""Members service routers package."""

from services.members_service.routers.members import router as members_router
from services.members_service.routers.plans import router as plans_router
from services.members_service.routers.trainers import router as trainers_router

__all__ = ["members_router", "plans_router", "trainers_router"]
