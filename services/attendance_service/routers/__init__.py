"""Attendance service routers."""

from services.attendance_service.routers.attendance import router as attendance_router
from services.attendance_service.routers.kiosk import router as kiosk_router
from services.attendance_service.routers.trainer_attendance import (
    router as trainer_attendance_router,
)

__all__ = [
    "attendance_router",
    "kiosk_router",
    "trainer_attendance_router",
]
