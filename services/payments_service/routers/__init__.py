"""Payments service routers package."""

from services.payments_service.routers.finance import router as finance_router
from services.payments_service.routers.member import router as member_ledger_router
from services.payments_service.routers.payments import router as payments_router
from services.payments_service.routers.trainer_payments import (
    router as trainer_payments_router,
)

__all__ = [
    "finance_router",
    "member_ledger_router",
    "payments_router",
    "trainer_payments_router",
]
