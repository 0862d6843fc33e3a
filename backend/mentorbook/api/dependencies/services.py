# backend/mentorbook/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

from functools import lru_cache
import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...core.config import settings
from ...integrations import CalendarProvider, HttpCalendarClient, NullCalendarProvider
from ...services.availability_service import AvailabilityService
from ...services.booking_service import BookingService
from ...services.scheduling_service import SchedulingService
from .database import get_db

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _calendar_provider_singleton() -> CalendarProvider:
    if settings.calendar_enabled and settings.calendar_api_base_url:
        logger.info("Calendar gateway enabled at %s", settings.calendar_api_base_url)
        return HttpCalendarClient(
            base_url=settings.calendar_api_base_url,
            api_key=settings.calendar_api_key,
            timeout=settings.calendar_timeout_seconds,
        )
    return NullCalendarProvider()


def get_calendar_provider() -> CalendarProvider:
    """Calendar capability; overridden in tests."""
    return _calendar_provider_singleton()


def get_availability_service(
    db: Session = Depends(get_db),
    calendar: CalendarProvider = Depends(get_calendar_provider),
) -> AvailabilityService:
    return AvailabilityService(db, calendar)


def get_booking_service(
    db: Session = Depends(get_db),
    calendar: CalendarProvider = Depends(get_calendar_provider),
) -> BookingService:
    return BookingService(db, calendar)


def get_scheduling_service(db: Session = Depends(get_db)) -> SchedulingService:
    return SchedulingService(db)
