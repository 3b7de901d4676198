"""Enum definitions for members service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class MemberStatus(str, enum.Enum):
    ACTIVE = "Active"
    EXPIRED = "Expired"
    PENDING = "Pending"


class MemberPaymentStatus(str, enum.Enum):
    PAID = "paid"
    PARTIAL = "partial"
    UNPAID = "unpaid"


class TrainerRole(str, enum.Enum):
    MANAGEMENT = "Management"
    TRAINER = "Trainer"
    SUPPORT_STAFF = "Support Staff"
    OTHER = "Other"


class CommissionType(str, enum.Enum):
    FIXED = "fixed"
    PERCENTAGE = "percentage"


class DiscountType(str, enum.Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"
