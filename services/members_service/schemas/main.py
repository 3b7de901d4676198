import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from services.members_service.models.enums import (
    CommissionType,
    DiscountType,
    MemberPaymentStatus,
    MemberStatus,
    TrainerRole,
)

# ---------------------------------------------------------------------------
# Plans & reference data
# ---------------------------------------------------------------------------


class PlanBase(BaseModel):
    name: str
    price: float = Field(..., ge=0)
    duration: int = Field(..., gt=0, description="Duration in months")
    features: List[str] = []


class PlanCreate(PlanBase):
    pass


class PlanUpdate(BaseModel):
    name: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    duration: Optional[int] = Field(None, gt=0)
    features: Optional[List[str]] = None

    @field_validator("name", "price", "duration", "features")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("must not be null")
        return value


class PlanResponse(PlanBase):
    id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PTPlanCreate(BaseModel):
    name: str
    price: float = Field(..., ge=0)
    sessions: int = Field(..., gt=0)
    trainer_id: Optional[uuid.UUID] = None
    specialization: str = ""


class PTPlanResponse(PTPlanCreate):
    id: uuid.UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DiscountCreate(BaseModel):
    code: str
    discount_type: DiscountType
    value: float = Field(..., ge=0)
    is_active: bool = True


class DiscountResponse(DiscountCreate):
    id: uuid.UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------


class MemberBase(BaseModel):
    name: str
    phone: str
    email: Optional[str] = None
    plan_id: Optional[uuid.UUID] = None
    trainer_id: Optional[uuid.UUID] = None
    pt_plan_id: Optional[uuid.UUID] = None
    discount_id: Optional[uuid.UUID] = None
    admission_fee_amount: float = Field(0, ge=0)


class MemberCreate(MemberBase):
    join_date: Optional[datetime] = None
    membership_start_date: Optional[datetime] = None
    # Overrides the plan's price snapshot (couple/special pricing).
    total_plan_price: Optional[float] = Field(None, ge=0)


class MemberUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    plan_id: Optional[uuid.UUID] = None
    trainer_id: Optional[uuid.UUID] = None
    pt_plan_id: Optional[uuid.UUID] = None
    discount_id: Optional[uuid.UUID] = None
    admission_fee_amount: Optional[float] = Field(None, ge=0)
    total_plan_price: Optional[float] = Field(None, ge=0)
    membership_start_date: Optional[datetime] = None
    membership_end_date: Optional[datetime] = None
    status: Optional[MemberStatus] = None

    @field_validator(
        "name", "phone", "admission_fee_amount", "total_plan_price", "status"
    )
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("must not be null")
        return value


class MemberResponse(MemberBase):
    id: uuid.UUID
    member_id: str
    join_date: datetime
    membership_start_date: Optional[datetime] = None
    membership_end_date: Optional[datetime] = None
    membership_cycle: int
    status: MemberStatus
    total_plan_price: float
    total_paid: float
    payment_status: MemberPaymentStatus
    last_payment_date: Optional[datetime] = None
    last_payment_amount: Optional[float] = None
    created_at: datetime
    updated_at: datetime

    # Derived, not stored
    balance: float = 0
    membership_display_status: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class MemberListResponse(BaseModel):
    data: List[MemberResponse]
    pagination: Pagination


# ---------------------------------------------------------------------------
# Trainers
# ---------------------------------------------------------------------------


class TrainerBase(BaseModel):
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    role: TrainerRole = TrainerRole.TRAINER
    specialization: str = ""
    base_salary: float = Field(0, ge=0)
    commission_type: CommissionType = CommissionType.PERCENTAGE
    commission_value: float = Field(0, ge=0)
    day_off: str = "None"


class TrainerCreate(TrainerBase):
    pass


class TrainerUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    role: Optional[TrainerRole] = None
    specialization: Optional[str] = None
    base_salary: Optional[float] = Field(None, ge=0)
    commission_type: Optional[CommissionType] = None
    commission_value: Optional[float] = Field(None, ge=0)
    day_off: Optional[str] = None

    @field_validator(
        "name",
        "role",
        "specialization",
        "base_salary",
        "commission_type",
        "commission_value",
        "day_off",
    )
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("must not be null")
        return value


class TrainerResponse(TrainerBase):
    id: uuid.UUID
    trainer_id: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SalaryMemberDetail(BaseModel):
    member_id: str
    name: str
    plan_name: str
    plan_price: float


class SalaryResponse(BaseModel):
    trainer_id: uuid.UUID
    base_salary: float
    commission_type: CommissionType
    commission_value: float
    commission_amount: int
    total_salary: float
    active_members_count: int
    member_details: List[SalaryMemberDetail]


class TrainerClient(BaseModel):
    id: uuid.UUID
    member_id: str
    name: str
    status: MemberStatus
    pt_plan_id: Optional[uuid.UUID] = None

    model_config = ConfigDict(from_attributes=True)


class PTPaymentEntry(BaseModel):
    id: uuid.UUID
    receipt_number: str
    member_id: str
    member_name: str
    amount: float
    payment_date: datetime


class SalaryMonth(BaseModel):
    """Pay for one calendar month, reconstructed from leaves and PT payments."""

    year: int
    month: int
    days_in_month: int
    leave_days: int
    base_salary_prorated: float
    commission_amount: int
    total_payable: float
