"""Enum definitions for payments service models."""

import enum

from services.members_service.models.enums import enum_values

__all__ = [
    "MembershipAction",
    "PaymentCategory",
    "PaymentMode",
    "PaymentRecordStatus",
    "PlanType",
    "TrainerPaymentStatus",
    "TransactionType",
    "enum_values",
]


class PaymentMode(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    UPI = "upi"
    BANK_TRANSFER = "bank_transfer"
    CHEQUE = "cheque"


class PaymentCategory(str, enum.Enum):
    PLAN = "Plan"
    TRAINER = "Trainer"
    ADMISSION_FEE = "Admission Fee"
    DUE_AMOUNT = "Due Amount"
    OTHER = "Other"


class PlanType(str, enum.Enum):
    MEMBERSHIP = "membership"
    PT_PLAN = "pt_plan"


class MembershipAction(str, enum.Enum):
    NEW = "new"
    RENEWAL = "renewal"
    NONE = "none"


class PaymentRecordStatus(str, enum.Enum):
    """Status of a single payment row (not the member's ledger status)."""

    COMPLETED = "completed"
    PENDING = "pending"
    FAILED = "failed"


class TrainerPaymentStatus(str, enum.Enum):
    PAID = "paid"
    PENDING = "pending"


class TransactionType(str, enum.Enum):
    INCOME = "income"
    EXPENSE = "expense"
