# backend/mentorbook/models/__init__.py
"""
SQLAlchemy models.

Importing this package registers every table on ``Base.metadata``.
"""

from .availability import TutorTimeBlock, WeeklyAvailabilityRule
from .booking import Booking, BookingFrequency, BookingStatus
from .lesson import LESSON_OVERLAP_CONSTRAINT, Lesson, LessonStatus
from .notification import NotificationOutbox, NotificationStatus, NotificationType
from .user import StudentProfile, TutorProfile, User

__all__ = [
    "Booking",
    "BookingFrequency",
    "BookingStatus",
    "LESSON_OVERLAP_CONSTRAINT",
    "Lesson",
    "LessonStatus",
    "NotificationOutbox",
    "NotificationStatus",
    "NotificationType",
    "StudentProfile",
    "TutorProfile",
    "TutorTimeBlock",
    "User",
    "WeeklyAvailabilityRule",
]
