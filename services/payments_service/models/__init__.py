"""Payments Service models package."""

from services.payments_service.models.core import Payment, TrainerPayment, Transaction
from services.payments_service.models.enums import (
    MembershipAction,
    PaymentCategory,
    PaymentMode,
    PaymentRecordStatus,
    PlanType,
    TrainerPaymentStatus,
    TransactionType,
)

__all__ = [
    "MembershipAction",
    "Payment",
    "PaymentCategory",
    "PaymentMode",
    "PaymentRecordStatus",
    "PlanType",
    "TrainerPayment",
    "TrainerPaymentStatus",
    "Transaction",
    "TransactionType",
]
