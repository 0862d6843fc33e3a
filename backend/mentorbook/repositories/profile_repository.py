# backend/mentorbook/repositories/profile_repository.py
"""
Profile repositories.

Profiles are owned by the wider platform; scheduling only resolves them and
updates the mentor timezone.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..core.exceptions import RepositoryException
from ..models.user import StudentProfile, TutorProfile
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class TutorProfileRepository(BaseRepository[TutorProfile]):
    def __init__(self, db: Session):
        super().__init__(db, TutorProfile)

    def get_by_user_id(self, user_id: str) -> Optional[TutorProfile]:
        return self.find_one_by(user_id=user_id)

    def get_with_user(self, tutor_id: str) -> Optional[TutorProfile]:
        try:
            return (
                self.db.query(TutorProfile)
                .options(joinedload(TutorProfile.user))
                .filter(TutorProfile.id == tutor_id)
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading tutor {tutor_id}: {str(e)}")
            raise RepositoryException(f"Failed to load tutor profile: {str(e)}")

    def lock_for_booking(self, tutor_id: str) -> Optional[TutorProfile]:
        """
        Lock the tutor row for the rest of the transaction.

        Serialises concurrent bookings for one tutor on PostgreSQL
        (``SELECT ... FOR UPDATE``); SQLite ignores the clause.
        """
        query = self.db.query(TutorProfile).filter(TutorProfile.id == tutor_id)
        if self.dialect_name == "postgresql":
            query = query.with_for_update()
        return query.populate_existing().first()


class StudentProfileRepository(BaseRepository[StudentProfile]):
    def __init__(self, db: Session):
        super().__init__(db, StudentProfile)

    def get_by_user_id(self, user_id: str) -> Optional[StudentProfile]:
        return self.find_one_by(user_id=user_id)
