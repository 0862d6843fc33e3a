# backend/mentorbook/repositories/lesson_repository.py
"""
Lesson Repository

Queries for concrete sessions, chiefly the busy lessons of a tutor in a
window. Integrity errors from the no-overlap guard are re-raised untouched
so the booking service can translate them into a conflict.
"""

from datetime import datetime
import logging
from typing import Any, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.lesson import BLOCKING_LESSON_STATUSES, Lesson
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class LessonRepository(BaseRepository[Lesson]):
    def __init__(self, db: Session):
        super().__init__(db, Lesson)

    def create(self, **kwargs: Any) -> Lesson:
        try:
            return super().create(**kwargs)
        except RepositoryException as exc:
            if isinstance(exc.__cause__, IntegrityError):
                raise exc.__cause__
            raise

    def get_blocking_lessons(self, tutor_id: str, start: datetime, end: datetime) -> List[Lesson]:
        """Non-cancelled lessons for the tutor overlapping ``[start, end)``."""
        try:
            return (
                self.db.query(Lesson)
                .filter(
                    Lesson.tutor_id == tutor_id,
                    Lesson.status.in_(BLOCKING_LESSON_STATUSES),
                    Lesson.start_time < end,
                    Lesson.end_time > start,
                )
                .order_by(Lesson.start_time)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading lessons for tutor {tutor_id}: {str(e)}")
            raise RepositoryException(f"Failed to load lessons: {str(e)}")

    def set_meeting_reference(
        self,
        lesson_id: str,
        *,
        event_id: Optional[str],
        html_link: Optional[str],
        meeting_link: Optional[str],
    ) -> Optional[Lesson]:
        lesson = self.get_by_id(lesson_id)
        if lesson is None:
            return None
        return self.update(
            lesson,
            meeting_event_id=event_id,
            meeting_html_link=html_link,
            meeting_link=meeting_link,
        )
