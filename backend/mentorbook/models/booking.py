# backend/mentorbook/models/booking.py
"""
Booking envelope model.

A Booking is the recurrence/commitment metadata around one or more lessons:
who, with whom, how often and over which window. The concrete sessions live
in ``lessons``; only the first occurrence is materialised at booking time.
"""

from datetime import datetime, timedelta
from enum import Enum

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from ..core.ulid_helper import generate_ulid
from ..database import Base
from .types import UTCDateTime, utc_now

RECURRING_WINDOW = timedelta(days=28)


class BookingFrequency(str, Enum):
    """Declared cadence of a booking."""

    ONCE = "ONCE"
    WEEKLY = "WEEKLY"
    TWICE_WEEKLY = "TWICE_WEEKLY"
    THRICE_WEEKLY = "THRICE_WEEKLY"

    @property
    def sessions_per_week(self) -> int:
        return {
            BookingFrequency.ONCE: 1,
            BookingFrequency.WEEKLY: 1,
            BookingFrequency.TWICE_WEEKLY: 2,
            BookingFrequency.THRICE_WEEKLY: 3,
        }[self]

    @property
    def is_recurring(self) -> bool:
        return self is not BookingFrequency.ONCE

    def envelope_end(self, start_date: datetime, duration: timedelta) -> datetime:
        """End of the commitment window: one session for ONCE, four weeks otherwise."""
        if self is BookingFrequency.ONCE:
            return start_date + duration
        return start_date + RECURRING_WINDOW


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "PENDING"  # Default until payment settles
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    student_id = Column(String(26), ForeignKey("student_profiles.id"), nullable=False, index=True)
    tutor_id = Column(String(26), ForeignKey("tutor_profiles.id"), nullable=False, index=True)
    start_date = Column(UTCDateTime, nullable=False)
    end_date = Column(UTCDateTime, nullable=False)
    frequency = Column(String(20), nullable=False, default=BookingFrequency.WEEKLY.value)
    duration_minutes = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)

    lessons = relationship("Lesson", back_populates="booking", order_by="Lesson.start_time")

    __table_args__ = (
        CheckConstraint("start_date < end_date", name="ck_bookings_window_order"),
        CheckConstraint("duration_minutes > 0", name="ck_bookings_duration_positive"),
        Index("ix_bookings_tutor_start", "tutor_id", "start_date"),
    )

    def __repr__(self) -> str:
        return f"<Booking {self.id} {self.frequency} {self.start_date}->{self.end_date}>"
