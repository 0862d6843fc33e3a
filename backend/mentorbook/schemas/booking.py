# backend/mentorbook/schemas/booking.py
"""Booking request and response schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, Field, model_validator

from ..models.booking import BookingFrequency
from ._strict_base import StrictModel, StrictRequestModel


class BookingCreate(StrictRequestModel):
    """
    Booking request.

    ``slot_starts`` carries one start per weekly session for recurring
    frequencies; when omitted ``start_date`` is the only start.
    """

    tutor_id: str = Field(..., min_length=1)
    start_date: Optional[datetime] = None
    slot_starts: Optional[List[datetime]] = None
    duration_minutes: Optional[int] = Field(default=None, gt=0, le=24 * 60)
    frequency: BookingFrequency = BookingFrequency.WEEKLY

    @model_validator(mode="after")
    def _require_a_start(self) -> "BookingCreate":
        if self.start_date is None and not self.slot_starts:
            raise ValueError("start_date or slot_starts is required")
        return self


class LessonOut(StrictModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    start_time: datetime
    end_time: datetime
    status: str
    meeting_event_id: Optional[str] = None
    meeting_html_link: Optional[str] = None
    meeting_link: Optional[str] = None


class BookingResponse(StrictModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    tutor_id: str
    start_date: datetime
    end_date: datetime
    frequency: BookingFrequency
    duration_minutes: int
    status: str
    created_at: datetime
    lessons: List[LessonOut] = Field(default_factory=list)
