"""FastAPI application for the Payments Service."""

from fastapi import FastAPI

from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.db.config import database_lifespan
from services.payments_service.routers import (
    finance_router,
    member_ledger_router,
    payments_router,
    trainer_payments_router,
)


def create_app() -> FastAPI:
    """Create and configure the Payments Service FastAPI app."""
    app = FastAPI(
        title="GymDesk Payments Service",
        version="0.1.0",
        description="Member payments, ledger reconciliation, trainer payouts and finance.",
        lifespan=database_lifespan,
    )

    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "payments"}

    app.include_router(payments_router)
    app.include_router(member_ledger_router)
    app.include_router(trainer_payments_router)
    app.include_router(finance_router)

    return app


app = create_app()
