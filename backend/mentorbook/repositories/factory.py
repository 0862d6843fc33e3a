# backend/mentorbook/repositories/factory.py
"""
Repository Factory

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .availability_repository import AvailabilityRepository, TimeBlockRepository
    from .booking_repository import BookingRepository
    from .lesson_repository import LessonRepository
    from .notification_outbox_repository import NotificationOutboxRepository
    from .profile_repository import StudentProfileRepository, TutorProfileRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations if needed.
    """

    @staticmethod
    def create_availability_repository(db: Session) -> "AvailabilityRepository":
        """Create repository for weekly availability rules."""
        from .availability_repository import AvailabilityRepository

        return AvailabilityRepository(db)

    @staticmethod
    def create_time_block_repository(db: Session) -> "TimeBlockRepository":
        """Create repository for mentor time blocks."""
        from .availability_repository import TimeBlockRepository

        return TimeBlockRepository(db)

    @staticmethod
    def create_lesson_repository(db: Session) -> "LessonRepository":
        from .lesson_repository import LessonRepository

        return LessonRepository(db)

    @staticmethod
    def create_booking_repository(db: Session) -> "BookingRepository":
        from .booking_repository import BookingRepository

        return BookingRepository(db)

    @staticmethod
    def create_tutor_profile_repository(db: Session) -> "TutorProfileRepository":
        from .profile_repository import TutorProfileRepository

        return TutorProfileRepository(db)

    @staticmethod
    def create_student_profile_repository(db: Session) -> "StudentProfileRepository":
        from .profile_repository import StudentProfileRepository

        return StudentProfileRepository(db)

    @staticmethod
    def create_notification_outbox_repository(db: Session) -> "NotificationOutboxRepository":
        """Create repository for the notification outbox."""
        from .notification_outbox_repository import NotificationOutboxRepository

        return NotificationOutboxRepository(db)
