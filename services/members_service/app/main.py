"""FastAPI application for the Members Service."""

from fastapi import FastAPI

from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.db.config import database_lifespan
from services.members_service.routers import (
    members_router,
    plans_router,
    trainers_router,
)


def create_app() -> FastAPI:
    """Create and configure the Members Service FastAPI app."""
    app = FastAPI(
        title="GymDesk Members Service",
        version="0.1.0",
        description="Members, plans, trainers and salary calculation.",
        lifespan=database_lifespan,
    )

    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "members"}

    app.include_router(members_router)
    app.include_router(plans_router)
    app.include_router(trainers_router)

    return app


app = create_app()
