"""FastAPI dependencies: database sessions, auth and services."""

from .auth import get_current_principal, require_student, require_tutor
from .database import get_db
from .services import (
    get_availability_service,
    get_booking_service,
    get_calendar_provider,
    get_scheduling_service,
)

__all__ = [
    "get_availability_service",
    "get_booking_service",
    "get_calendar_provider",
    "get_current_principal",
    "get_db",
    "get_scheduling_service",
    "require_student",
    "require_tutor",
]
