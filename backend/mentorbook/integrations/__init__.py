"""External service integrations."""

from .calendar_client import (
    CalendarError,
    CalendarProvider,
    HttpCalendarClient,
    MeetingEvent,
    NullCalendarProvider,
)

__all__ = [
    "CalendarError",
    "CalendarProvider",
    "HttpCalendarClient",
    "MeetingEvent",
    "NullCalendarProvider",
]
