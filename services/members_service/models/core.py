import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base, UTCDateTime
from services.members_service.models.enums import (
    CommissionType,
    DiscountType,
    MemberPaymentStatus,
    MemberStatus,
    TrainerRole,
    enum_values,
)
from sqlalchemy import JSON, Boolean
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Float, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column


class Plan(Base):
    """Membership plan. Reference data; members snapshot its price."""

    __tablename__ = "plans"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)  # months
    features: Mapped[list] = mapped_column(JSON, default=list)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, onupdate=utc_now
    )

    def __repr__(self):
        return f"<Plan {self.name} {self.price}/{self.duration}m>"


class PTPlan(Base):
    """Personal-training plan sold on top of a membership."""

    __tablename__ = "pt_plans"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    sessions: Mapped[int] = mapped_column(Integer, nullable=False)
    trainer_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("trainers.id"), nullable=True
    )
    specialization: Mapped[str] = mapped_column(String, default="")

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, onupdate=utc_now
    )


class Discount(Base):
    __tablename__ = "discounts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    discount_type: Mapped[DiscountType] = mapped_column(
        SAEnum(
            DiscountType,
            name="discount_type_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    value: Mapped[float] = mapped_column(Float, nullable=False)  # % or fixed amount
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, onupdate=utc_now
    )


class Trainer(Base):
    __tablename__ = "trainers"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    trainer_id: Mapped[str] = mapped_column(
        String, unique=True, index=True, nullable=False
    )  # TRN001
    name: Mapped[str] = mapped_column(String, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String, index=True, nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    role: Mapped[TrainerRole] = mapped_column(
        SAEnum(
            TrainerRole,
            name="trainer_role_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=TrainerRole.TRAINER,
    )
    specialization: Mapped[str] = mapped_column(String, default="")

    # Pay
    base_salary: Mapped[float] = mapped_column(Float, default=0)
    commission_type: Mapped[CommissionType] = mapped_column(
        SAEnum(
            CommissionType,
            name="commission_type_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=CommissionType.PERCENTAGE,
    )
    commission_value: Mapped[float] = mapped_column(Float, default=0)
    day_off: Mapped[str] = mapped_column(String, default="None")

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, onupdate=utc_now
    )

    def __repr__(self):
        return f"<Trainer {self.trainer_id} {self.name}>"


class Member(Base):
    """Member identity plus the ledger fields kept in step with payments.

    ``payment_status`` is always derived from ``total_plan_price``,
    ``total_paid`` and ``admission_fee_amount``; never assign it directly.
    """

    __tablename__ = "members"

    # Identity
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    member_id: Mapped[str] = mapped_column(
        String, unique=True, index=True, nullable=False
    )  # MEM001
    name: Mapped[str] = mapped_column(String, index=True, nullable=False)
    phone: Mapped[str] = mapped_column(String, index=True, nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String, unique=True, nullable=True)

    # References
    plan_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("plans.id"), nullable=True
    )
    trainer_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("trainers.id"), index=True, nullable=True
    )
    pt_plan_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("pt_plans.id"), nullable=True
    )
    discount_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("discounts.id"), nullable=True
    )

    # Membership window
    join_date: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)
    membership_start_date: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime, nullable=True
    )
    membership_end_date: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime, nullable=True
    )
    membership_cycle: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    status: Mapped[MemberStatus] = mapped_column(
        SAEnum(
            MemberStatus,
            name="member_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=MemberStatus.ACTIVE,
        index=True,
    )

    # Ledger
    total_plan_price: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    admission_fee_amount: Mapped[float] = mapped_column(
        Float, default=0, nullable=False
    )
    total_paid: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    payment_status: Mapped[MemberPaymentStatus] = mapped_column(
        SAEnum(
            MemberPaymentStatus,
            name="member_payment_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=MemberPaymentStatus.UNPAID,
        index=True,
    )
    last_payment_date: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime, nullable=True
    )
    last_payment_amount: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, onupdate=utc_now
    )

    def __repr__(self):
        return f"<Member {self.member_id} {self.name}>"


class SequenceCounter(Base):
    """Named monotonically increasing counters (member ids, trainer ids)."""

    __tablename__ = "sequence_counters"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
