"""Attendance Service schemas package."""

from services.attendance_service.schemas.main import (
    AttendanceView,
    AutoCheckoutResult,
    AutoCheckoutStatus,
    CheckInRequest,
    DayAttendanceResponse,
    HistoryResponse,
    HistoryStats,
    LeaveRequest,
    LookupRequest,
    LookupResult,
    SelfServiceAction,
    SelfServiceRequest,
    SelfServiceResponse,
    TrainerAttendanceAction,
    TrainerAttendanceRequest,
    TrainerAttendanceResponse,
)

__all__ = [
    "AttendanceView",
    "AutoCheckoutResult",
    "AutoCheckoutStatus",
    "CheckInRequest",
    "DayAttendanceResponse",
    "HistoryResponse",
    "HistoryStats",
    "LeaveRequest",
    "LookupRequest",
    "LookupResult",
    "SelfServiceAction",
    "SelfServiceRequest",
    "SelfServiceResponse",
    "TrainerAttendanceAction",
    "TrainerAttendanceRequest",
    "TrainerAttendanceResponse",
]
