# backend/mentorbook/services/timezone_service.py
"""
Centralized timezone handling for mentor scheduling.

Rules:
- All storage: UTC
- All comparisons: UTC
- Weekly availability rules: mentor-local wall clock
- Local weekday/time-of-day is always derived through pytz, never by
  adding a fixed offset to a UTC instant
"""

from datetime import datetime, timezone
from typing import Optional, Tuple

import pytz

from ..core.config import settings


class TimezoneService:
    """Handles all timezone conversions consistently."""

    DEFAULT_TIMEZONE = settings.default_timezone

    @staticmethod
    def is_valid_timezone(tz_str: Optional[str]) -> bool:
        if not tz_str:
            return False
        try:
            pytz.timezone(tz_str)
        except pytz.UnknownTimeZoneError:
            return False
        return True

    @staticmethod
    def get_timezone(tz_str: Optional[str]) -> pytz.BaseTzInfo:
        """Get timezone object, with fallback to default."""
        try:
            return pytz.timezone(tz_str or TimezoneService.DEFAULT_TIMEZONE)
        except pytz.UnknownTimeZoneError:
            return pytz.timezone(TimezoneService.DEFAULT_TIMEZONE)

    @staticmethod
    def ensure_utc(dt: datetime) -> datetime:
        """Treat naive datetimes as UTC and normalise aware ones to UTC."""
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)

    @staticmethod
    def utc_to_local(utc_dt: datetime, timezone_str: Optional[str]) -> datetime:
        """Convert UTC datetime to local timezone."""
        tz = TimezoneService.get_timezone(timezone_str)
        return TimezoneService.ensure_utc(utc_dt).astimezone(tz)

    @staticmethod
    def local_weekday_and_minutes(instant: datetime, timezone_str: Optional[str]) -> Tuple[int, int]:
        """
        Return (weekday, minutes since local midnight) for an absolute instant.

        Weekday is 0=Sunday .. 6=Saturday.
        """
        local_dt = TimezoneService.utc_to_local(instant, timezone_str)
        # isoweekday(): Monday=1 .. Sunday=7
        weekday = local_dt.isoweekday() % 7
        return weekday, local_dt.hour * 60 + local_dt.minute

