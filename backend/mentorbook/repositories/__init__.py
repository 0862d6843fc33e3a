# backend/mentorbook/repositories/__init__.py
"""
Repository layer for data access, separating business logic from queries.

Usage:
    from mentorbook.repositories import RepositoryFactory

    # In a service:
    lessons = RepositoryFactory.create_lesson_repository(db)
    busy = lessons.get_blocking_lessons(tutor_id, start, end)
"""

from .availability_repository import AvailabilityRepository, TimeBlockRepository
from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .factory import RepositoryFactory
from .lesson_repository import LessonRepository
from .notification_outbox_repository import NotificationOutboxRepository
from .profile_repository import StudentProfileRepository, TutorProfileRepository

__all__ = [
    "AvailabilityRepository",
    "BaseRepository",
    "BookingRepository",
    "LessonRepository",
    "NotificationOutboxRepository",
    "RepositoryFactory",
    "StudentProfileRepository",
    "TimeBlockRepository",
    "TutorProfileRepository",
]
