"""FastAPI application entrypoint for the GymDesk gateway.

Serves every service's routers in one process under ``/api/v1``. Each
service can still run on its own through its ``app/main.py``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

load_dotenv()

from libs.common.config import get_settings  # noqa: E402
from libs.common.error_handler import add_exception_handlers  # noqa: E402
from libs.common.middleware import add_observability_middleware  # noqa: E402
from libs.common.rate_limit import limiter, rate_limit_exceeded_handler  # noqa: E402
from libs.db.config import database_lifespan  # noqa: E402
from services.ai_service.providers.weather import WeatherClient  # noqa: E402
from services.ai_service.routers import analytics_router  # noqa: E402
from services.attendance_service.routers import (  # noqa: E402
    attendance_router,
    kiosk_router,
    trainer_attendance_router,
)
from services.members_service.routers import (  # noqa: E402
    members_router,
    plans_router,
    trainers_router,
)
from services.payments_service.routers import (  # noqa: E402
    finance_router,
    member_ledger_router,
    payments_router,
    trainer_payments_router,
)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def gateway_lifespan(app: FastAPI) -> AsyncIterator[None]:
    async with database_lifespan(app):
        app.state.weather = WeatherClient()
        try:
            yield
        finally:
            await app.state.weather.aclose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    settings = get_settings()
    app = FastAPI(
        title="GymDesk Gateway Service",
        version="0.1.0",
        description="Gym back office: members, payments, attendance and analytics.",
        lifespan=gateway_lifespan,
    )

    # Add rate limiter state to app
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability (structured logging + request tracing)
    add_observability_middleware(app)

    # Add global exception handlers for consistent error responses
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Simple readiness endpoint."""
        return {"status": "ok"}

    # Members service
    app.include_router(members_router, prefix=API_PREFIX)
    app.include_router(plans_router, prefix=API_PREFIX)
    app.include_router(trainers_router, prefix=API_PREFIX)

    # Payments service
    app.include_router(payments_router, prefix=API_PREFIX)
    app.include_router(member_ledger_router, prefix=API_PREFIX)
    app.include_router(trainer_payments_router, prefix=API_PREFIX)
    app.include_router(finance_router, prefix=API_PREFIX)

    # Attendance service; kiosk routes before /attendance/{attendance_id}
    app.include_router(kiosk_router, prefix=API_PREFIX)
    app.include_router(attendance_router, prefix=API_PREFIX)
    app.include_router(trainer_attendance_router, prefix=API_PREFIX)

    # AI service
    app.include_router(analytics_router, prefix=API_PREFIX)

    return app


app = create_app()
