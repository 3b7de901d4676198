import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from services.members_service.models import MemberPaymentStatus
from services.payments_service.models import (
    MembershipAction,
    PaymentCategory,
    PaymentMode,
    PaymentRecordStatus,
    PlanType,
    TrainerPaymentStatus,
    TransactionType,
)


class PaymentCreate(BaseModel):
    member_id: uuid.UUID
    amount: float = Field(..., gt=0)
    payment_mode: PaymentMode
    payment_date: Optional[datetime] = None
    payment_category: PaymentCategory = PaymentCategory.PLAN
    plan_type: PlanType = PlanType.MEMBERSHIP
    plan_id: Optional[uuid.UUID] = None
    payment_status: PaymentRecordStatus = PaymentRecordStatus.COMPLETED
    transaction_id: str = ""
    notes: str = ""

    # Membership cycle controls
    is_renewal: bool = False
    activate_membership: bool = False
    renewal_plan_id: Optional[uuid.UUID] = None
    custom_plan_price: Optional[float] = Field(None, ge=0)
    membership_start_date: Optional[datetime] = None


class PaymentUpdate(BaseModel):
    amount: Optional[float] = Field(None, gt=0)
    payment_date: Optional[datetime] = None
    payment_mode: Optional[PaymentMode] = None
    payment_category: Optional[PaymentCategory] = None
    payment_status: Optional[PaymentRecordStatus] = None
    plan_id: Optional[uuid.UUID] = None
    transaction_id: Optional[str] = None
    notes: Optional[str] = None

    # plan_id is the only nullable column here
    @field_validator(
        "amount",
        "payment_date",
        "payment_mode",
        "payment_category",
        "payment_status",
        "transaction_id",
        "notes",
    )
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("must not be null")
        return value


class PaymentResponse(BaseModel):
    id: uuid.UUID
    receipt_number: str
    member_id: uuid.UUID
    amount: float
    payment_date: datetime
    payment_mode: PaymentMode
    payment_category: PaymentCategory
    plan_type: PlanType
    plan_id: Optional[uuid.UUID] = None
    membership_action: MembershipAction
    payment_status: PaymentRecordStatus
    membership_cycle: int
    plan_price: float
    transaction_id: str
    notes: str
    created_by: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LedgerSummary(BaseModel):
    total_paid: float
    balance: float
    payment_status: MemberPaymentStatus
    total_plan_price: float
    admission_fee_amount: float
    membership_cycle: int


class MemberRef(BaseModel):
    id: uuid.UUID
    member_id: str
    name: str
    payment_status: MemberPaymentStatus

    model_config = ConfigDict(from_attributes=True)


class OffsetPagination(BaseModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class MemberPaymentHistory(BaseModel):
    member: MemberRef
    summary: LedgerSummary
    payments: List[PaymentResponse]
    pagination: OffsetPagination


class TrainerPaymentCreate(BaseModel):
    amount: float = Field(..., gt=0)
    base_salary: float = Field(0, ge=0)
    commission_amount: float = Field(0, ge=0)
    month: str
    year: int = Field(..., ge=2000, le=2100)
    payment_date: Optional[datetime] = None
    payment_mode: PaymentMode = PaymentMode.BANK_TRANSFER
    status: TrainerPaymentStatus = TrainerPaymentStatus.PAID
    notes: str = ""


class TrainerPaymentResponse(TrainerPaymentCreate):
    id: uuid.UUID
    trainer_id: uuid.UUID
    payment_date: datetime
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# --- Finance ledger ---


class TransactionCreate(BaseModel):
    title: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)
    type: TransactionType
    category: str = "General"
    payment_mode: PaymentMode = PaymentMode.CASH
    date: Optional[datetime] = None
    notes: str = ""


class TransactionResponse(TransactionCreate):
    id: uuid.UUID
    date: datetime
    created_by: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FinanceRecord(BaseModel):
    """One line of the merged income/expense ledger.

    ``is_system`` rows come from member payments and trainer payouts and
    cannot be deleted through the finance endpoints.
    """

    id: uuid.UUID
    date: datetime
    title: str
    amount: float
    type: TransactionType
    category: str
    mode: PaymentMode
    is_system: bool


class FinanceSummary(BaseModel):
    total_income: float
    total_expense: float
    net_balance: float


class FinanceLedger(BaseModel):
    summary: FinanceSummary
    records: List[FinanceRecord]
