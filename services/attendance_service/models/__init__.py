"""Attendance Service models package."""

from services.attendance_service.models.core import AttendanceRecord, TrainerAttendance
from services.attendance_service.models.enums import (
    AttendanceStatus,
    TrainerAttendanceStatus,
    UserType,
)

__all__ = [
    "AttendanceRecord",
    "AttendanceStatus",
    "TrainerAttendance",
    "TrainerAttendanceStatus",
    "UserType",
]
