# backend/mentorbook/repositories/booking_repository.py
"""
Booking Repository

Stores booking envelopes. Lessons are handled by LessonRepository.
"""

import logging

from sqlalchemy.orm import Session, selectinload

from ..models.booking import Booking
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    def __init__(self, db: Session):
        super().__init__(db, Booking)

    def get_with_lessons(self, booking_id: str) -> Booking | None:
        return (
            self.db.query(Booking)
            .options(selectinload(Booking.lessons))
            .filter(Booking.id == booking_id)
            .first()
        )
