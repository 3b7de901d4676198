"""Members Service models package."""

from services.members_service.models.core import (
    Discount,
    Member,
    Plan,
    PTPlan,
    SequenceCounter,
    Trainer,
)
from services.members_service.models.enums import (
    CommissionType,
    DiscountType,
    MemberPaymentStatus,
    MemberStatus,
    TrainerRole,
)

__all__ = [
    "CommissionType",
    "Discount",
    "DiscountType",
    "Member",
    "MemberPaymentStatus",
    "MemberStatus",
    "PTPlan",
    "Plan",
    "SequenceCounter",
    "Trainer",
    "TrainerRole",
]
