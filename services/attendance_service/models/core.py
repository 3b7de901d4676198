import datetime as dt
import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base, UTCDateTime
from services.attendance_service.models.enums import (
    AttendanceStatus,
    TrainerAttendanceStatus,
    UserType,
    enum_values,
)
from sqlalchemy import Date
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Index, Integer, String, UniqueConstraint, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

ACTIVE_SESSION_PREDICATE = text("status = 'checked-in'")


class AttendanceRecord(Base):
    """One gym visit by a member or trainer.

    ``user_id`` points at ``members.id`` or ``trainers.id`` depending on
    ``user_type``, so it carries no foreign key. A user can hold at most one
    ``checked-in`` record at a time; the partial unique index enforces it.
    """

    __tablename__ = "attendance"
    __table_args__ = (
        Index(
            "uq_attendance_active_user",
            "user_id",
            unique=True,
            postgresql_where=ACTIVE_SESSION_PREDICATE,
            sqlite_where=ACTIVE_SESSION_PREDICATE,
        ),
        Index("ix_attendance_user_date", "user_id", "date"),
        Index("ix_attendance_type_status", "user_type", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    user_type: Mapped[UserType] = mapped_column(
        SAEnum(
            UserType,
            name="attendance_user_type_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )

    check_in_time: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, nullable=False
    )
    check_out_time: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime, nullable=True
    )
    status: Mapped[AttendanceStatus] = mapped_column(
        SAEnum(
            AttendanceStatus,
            name="attendance_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=AttendanceStatus.CHECKED_IN,
        nullable=False,
    )
    duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # minutes

    # Local calendar day of check-in
    date: Mapped[dt.date] = mapped_column(Date, index=True, nullable=False)

    check_in_photo: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    check_out_photo: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    notes: Mapped[str] = mapped_column(String, default="", nullable=False)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, onupdate=utc_now
    )

    def __repr__(self):
        return f"<AttendanceRecord {self.user_type.value} {self.user_id} {self.status.value}>"


class TrainerAttendance(Base):
    """A trainer's working day: one row per trainer per local day."""

    __tablename__ = "trainer_attendance"
    __table_args__ = (
        UniqueConstraint("trainer_id", "date", name="uq_trainer_attendance_day"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    trainer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("trainers.id", ondelete="CASCADE"), index=True, nullable=False
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    check_in: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    check_out: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    status: Mapped[TrainerAttendanceStatus] = mapped_column(
        SAEnum(
            TrainerAttendanceStatus,
            name="trainer_attendance_status_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=TrainerAttendanceStatus.PRESENT,
        nullable=False,
    )
    check_in_photo: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    check_out_photo: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, onupdate=utc_now
    )
