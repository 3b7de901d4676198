"""Members Service schemas package."""

from services.members_service.schemas.main import (
    DiscountCreate,
    DiscountResponse,
    MemberCreate,
    MemberListResponse,
    MemberResponse,
    MemberUpdate,
    Pagination,
    PlanCreate,
    PlanResponse,
    PlanUpdate,
    PTPlanCreate,
    PTPaymentEntry,
    PTPlanResponse,
    SalaryMemberDetail,
    SalaryMonth,
    SalaryResponse,
    TrainerClient,
    TrainerCreate,
    TrainerResponse,
    TrainerUpdate,
)

__all__ = [
    "DiscountCreate",
    "DiscountResponse",
    "MemberCreate",
    "MemberListResponse",
    "MemberResponse",
    "MemberUpdate",
    "PTPaymentEntry",
    "PTPlanCreate",
    "PTPlanResponse",
    "Pagination",
    "PlanCreate",
    "PlanResponse",
    "PlanUpdate",
    "SalaryMemberDetail",
    "SalaryMonth",
    "SalaryResponse",
    "TrainerClient",
    "TrainerCreate",
    "TrainerResponse",
    "TrainerUpdate",
]
