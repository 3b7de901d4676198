"""FastAPI application for the AI Service."""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.db.config import database_lifespan
from services.ai_service.providers.weather import WeatherClient
from services.ai_service.routers import analytics_router


@asynccontextmanager
async def ai_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Database plus the shared weather client."""
    async with database_lifespan(app):
        app.state.weather = WeatherClient()
        try:
            yield
        finally:
            await app.state.weather.aclose()


def create_app() -> FastAPI:
    """Create and configure the AI Service FastAPI app."""
    app = FastAPI(
        title="GymDesk AI Service",
        version="0.1.0",
        description="Financial analytics and AI-assisted business insights.",
        lifespan=ai_lifespan,
    )

    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "ai"}

    app.include_router(analytics_router)

    return app


app = create_app()
