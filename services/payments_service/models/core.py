import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base, UTCDateTime
from services.payments_service.models.enums import (
    MembershipAction,
    PaymentCategory,
    PaymentMode,
    PaymentRecordStatus,
    PlanType,
    TrainerPaymentStatus,
    TransactionType,
    enum_values,
)
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Float, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column


class Payment(Base):
    """A single member payment.

    Only ``completed`` payments of the member's current ``membership_cycle``
    count towards ``Member.total_paid``.
    """

    __tablename__ = "payments"
    __table_args__ = (
        Index("ix_payments_member_cycle", "member_id", "membership_cycle"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    receipt_number: Mapped[str] = mapped_column(
        String, unique=True, index=True, nullable=False
    )
    member_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("members.id", ondelete="CASCADE"), index=True, nullable=False
    )

    amount: Mapped[float] = mapped_column(Float, nullable=False)
    payment_date: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, index=True, nullable=False
    )
    payment_mode: Mapped[PaymentMode] = mapped_column(
        SAEnum(
            PaymentMode,
            name="payment_mode_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    payment_category: Mapped[PaymentCategory] = mapped_column(
        SAEnum(
            PaymentCategory,
            name="payment_category_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=PaymentCategory.PLAN,
        nullable=False,
    )
    plan_type: Mapped[PlanType] = mapped_column(
        SAEnum(
            PlanType,
            name="plan_type_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=PlanType.MEMBERSHIP,
        nullable=False,
    )
    # Plan or PT plan id depending on plan_type
    plan_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    membership_action: Mapped[MembershipAction] = mapped_column(
        SAEnum(
            MembershipAction,
            name="membership_action_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=MembershipAction.NONE,
        nullable=False,
    )
    payment_status: Mapped[PaymentRecordStatus] = mapped_column(
        SAEnum(
            PaymentRecordStatus,
            name="payment_record_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=PaymentRecordStatus.COMPLETED,
        nullable=False,
    )
    membership_cycle: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    # Snapshot of the member's plan price when the payment was taken
    plan_price: Mapped[float] = mapped_column(Float, default=0, nullable=False)

    transaction_id: Mapped[str] = mapped_column(String, default="", nullable=False)
    notes: Mapped[str] = mapped_column(Text, default="", nullable=False)
    created_by: Mapped[str] = mapped_column(String, default="", nullable=False)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, onupdate=utc_now
    )

    def __repr__(self):
        return f"<Payment {self.receipt_number} {self.amount} {self.payment_status.value}>"


class TrainerPayment(Base):
    """Salary payout record for a trainer. Append-only."""

    __tablename__ = "trainer_payments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    trainer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("trainers.id", ondelete="CASCADE"), index=True, nullable=False
    )
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    base_salary: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    commission_amount: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    month: Mapped[str] = mapped_column(String(16), nullable=False)  # "November"
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    payment_date: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)
    payment_mode: Mapped[PaymentMode] = mapped_column(
        SAEnum(
            PaymentMode,
            name="trainer_payment_mode_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=PaymentMode.BANK_TRANSFER,
        nullable=False,
    )
    status: Mapped[TrainerPaymentStatus] = mapped_column(
        SAEnum(
            TrainerPaymentStatus,
            name="trainer_payment_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=TrainerPaymentStatus.PAID,
        nullable=False,
    )
    notes: Mapped[str] = mapped_column(Text, default="", nullable=False)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)


class Transaction(Base):
    """Manual income or expense entry (rent, equipment, merchandise sales).

    Member payments and trainer payouts are not duplicated here; the finance
    ledger merges them in at read time.
    """

    __tablename__ = "finance_transactions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String, nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    type: Mapped[TransactionType] = mapped_column(
        SAEnum(
            TransactionType,
            name="transaction_type_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        index=True,
        nullable=False,
    )
    category: Mapped[str] = mapped_column(String, default="General", nullable=False)
    payment_mode: Mapped[PaymentMode] = mapped_column(
        SAEnum(
            PaymentMode,
            name="transaction_payment_mode_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=PaymentMode.CASH,
        nullable=False,
    )
    date: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, index=True, nullable=False
    )
    notes: Mapped[str] = mapped_column(Text, default="", nullable=False)
    created_by: Mapped[str] = mapped_column(String, default="", nullable=False)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, onupdate=utc_now
    )
