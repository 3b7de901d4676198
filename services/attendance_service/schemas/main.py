import datetime as dt
import enum
import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from services.attendance_service.models import TrainerAttendanceStatus, UserType

# ---------------------------------------------------------------------------
# Staff flow
# ---------------------------------------------------------------------------


class CheckInRequest(BaseModel):
    user_id: Optional[uuid.UUID] = None
    user_type: Optional[str] = None
    notes: str = ""


class AttendanceView(BaseModel):
    """Attendance row as shown on the desk, for members and trainers alike."""

    id: uuid.UUID
    user_id: uuid.UUID
    user_type: UserType
    user_name: Optional[str] = None
    user_phone: Optional[str] = None
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    status: str
    duration: Optional[int] = None
    current_duration: Optional[int] = None
    date: dt.date
    check_in_photo: Optional[str] = None
    check_out_photo: Optional[str] = None
    notes: str = ""


class DayAttendanceResponse(BaseModel):
    data: List[AttendanceView]
    count: int


class AutoCheckoutResult(BaseModel):
    count: int
    message: str


class AutoCheckoutStatus(BaseModel):
    active_check_ins: int
    timestamp: datetime


# ---------------------------------------------------------------------------
# Kiosk flow
# ---------------------------------------------------------------------------


class LookupRequest(BaseModel):
    identifier: Optional[str] = None


class LookupResult(BaseModel):
    user_id: uuid.UUID
    name: str
    phone: Optional[str] = None
    identifier: str
    user_type: UserType
    status: Optional[str] = None
    membership_end_date: Optional[datetime] = None
    days_until_expiry: Optional[int] = None
    membership_expired: bool = False
    is_checked_in: bool
    current_duration: Optional[int] = None
    attendance_id: Optional[uuid.UUID] = None
    has_checked_in_today: bool


class SelfServiceAction(str, enum.Enum):
    CHECKIN = "checkin"
    CHECKOUT = "checkout"


class SelfServiceRequest(BaseModel):
    user_id: Optional[uuid.UUID] = None
    user_type: Optional[str] = None
    action: Optional[str] = None
    photo_url: Optional[str] = None


class SelfServiceResponse(BaseModel):
    attendance_id: uuid.UUID
    message: str
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    duration: Optional[int] = None


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


class HistoryStats(BaseModel):
    total_records: int
    total_pages: int
    current_page: int
    records_per_page: int
    total_visits: Optional[int] = None
    total_duration: Optional[int] = None
    avg_duration: Optional[int] = None


class HistoryResponse(BaseModel):
    data: List[AttendanceView]
    stats: HistoryStats


# ---------------------------------------------------------------------------
# Trainer daily attendance
# ---------------------------------------------------------------------------


class TrainerAttendanceAction(str, enum.Enum):
    CHECKIN = "checkin"
    CHECKOUT = "checkout"


class TrainerAttendanceRequest(BaseModel):
    action: TrainerAttendanceAction
    photo_url: Optional[str] = None


class TrainerAttendanceResponse(BaseModel):
    id: uuid.UUID
    trainer_id: uuid.UUID
    date: dt.date
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    status: TrainerAttendanceStatus
    check_in_photo: Optional[str] = None
    check_out_photo: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)



class LeaveRequest(BaseModel):
    date: dt.date
