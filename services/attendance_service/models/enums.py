"""Enum definitions for attendance service models."""

import enum

from services.members_service.models.enums import enum_values

__all__ = ["AttendanceStatus", "TrainerAttendanceStatus", "UserType", "enum_values"]


class UserType(str, enum.Enum):
    MEMBER = "Member"
    TRAINER = "Trainer"


class AttendanceStatus(str, enum.Enum):
    CHECKED_IN = "checked-in"
    CHECKED_OUT = "checked-out"


class TrainerAttendanceStatus(str, enum.Enum):
    PRESENT = "present"
    LEAVE = "leave"
