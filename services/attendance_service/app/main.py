"""FastAPI application for the Attendance Service."""

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded

from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import limiter, rate_limit_exceeded_handler
from libs.db.config import database_lifespan
from services.attendance_service.routers import (
    attendance_router,
    kiosk_router,
    trainer_attendance_router,
)


def create_app() -> FastAPI:
    """Create and configure the Attendance Service FastAPI app."""
    app = FastAPI(
        title="GymDesk Attendance Service",
        version="0.1.0",
        description="Front-desk and kiosk check-in/out for members and trainers.",
        lifespan=database_lifespan,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "attendance"}

    # Kiosk routes first so /attendance/lookup never reaches /{attendance_id}
    app.include_router(kiosk_router)
    app.include_router(attendance_router)
    app.include_router(trainer_attendance_router)

    return app


app = create_app()
