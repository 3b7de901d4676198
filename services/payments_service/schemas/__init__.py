"""Payments Service schemas package."""

from services.payments_service.schemas.main import (
    FinanceLedger,
    FinanceRecord,
    FinanceSummary,
    LedgerSummary,
    MemberPaymentHistory,
    MemberRef,
    OffsetPagination,
    PaymentCreate,
    PaymentResponse,
    PaymentUpdate,
    TrainerPaymentCreate,
    TrainerPaymentResponse,
    TransactionCreate,
    TransactionResponse,
)

__all__ = [
    "FinanceLedger",
    "FinanceRecord",
    "FinanceSummary",
    "LedgerSummary",
    "MemberPaymentHistory",
    "MemberRef",
    "OffsetPagination",
    "PaymentCreate",
    "PaymentResponse",
    "PaymentUpdate",
    "TrainerPaymentCreate",
    "TrainerPaymentResponse",
    "TransactionCreate",
    "TransactionResponse",
]
