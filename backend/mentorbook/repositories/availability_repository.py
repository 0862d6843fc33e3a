# backend/mentorbook/repositories/availability_repository.py
"""
Availability Repository

Data access for a mentor's weekly rules and ad-hoc time blocks.
"""

from datetime import datetime
import logging
from typing import Dict, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.availability import TutorTimeBlock, WeeklyAvailabilityRule
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AvailabilityRepository(BaseRepository[WeeklyAvailabilityRule]):
    """Weekly availability rules. The set is always replaced, never patched."""

    def __init__(self, db: Session):
        super().__init__(db, WeeklyAvailabilityRule)

    def get_rules_for_tutor(self, tutor_id: str) -> List[WeeklyAvailabilityRule]:
        """Rules ordered by weekday then local start."""
        try:
            return (
                self.db.query(WeeklyAvailabilityRule)
                .filter(WeeklyAvailabilityRule.tutor_id == tutor_id)
                .order_by(WeeklyAvailabilityRule.day_of_week, WeeklyAvailabilityRule.start_time)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading weekly rules for tutor {tutor_id}: {str(e)}")
            raise RepositoryException(f"Failed to load weekly rules: {str(e)}")

    def replace_rules(
        self, tutor_id: str, rules: Sequence[Dict[str, object]]
    ) -> List[WeeklyAvailabilityRule]:
        """
        Delete every rule for the tutor and insert the given ones.

        Flushes only; the caller's transaction makes the swap atomic.
        """
        try:
            self.db.query(WeeklyAvailabilityRule).filter(
                WeeklyAvailabilityRule.tutor_id == tutor_id
            ).delete(synchronize_session=False)
            created = [WeeklyAvailabilityRule(tutor_id=tutor_id, **rule) for rule in rules]
            self.db.add_all(created)
            self.db.flush()
            return created
        except SQLAlchemyError as e:
            self.logger.error(f"Error replacing weekly rules for tutor {tutor_id}: {str(e)}")
            raise RepositoryException(f"Failed to replace weekly rules: {str(e)}") from e


class TimeBlockRepository(BaseRepository[TutorTimeBlock]):
    def __init__(self, db: Session):
        super().__init__(db, TutorTimeBlock)

    def get_for_tutor(self, block_id: str, tutor_id: str) -> Optional[TutorTimeBlock]:
        """Block by id, only if owned by the tutor."""
        return self.find_one_by(id=block_id, tutor_id=tutor_id)

    def list_for_tutor(
        self,
        tutor_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[TutorTimeBlock]:
        """
        Blocks for a tutor ordered by start, optionally limited to those
        overlapping ``[start, end)``. Either bound may be omitted.
        """
        try:
            query = self.db.query(TutorTimeBlock).filter(TutorTimeBlock.tutor_id == tutor_id)
            if end is not None:
                query = query.filter(TutorTimeBlock.start_time < end)
            if start is not None:
                query = query.filter(TutorTimeBlock.end_time > start)
            return query.order_by(TutorTimeBlock.start_time).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing time blocks for tutor {tutor_id}: {str(e)}")
            raise RepositoryException(f"Failed to list time blocks: {str(e)}")

    def get_overlapping(self, tutor_id: str, start: datetime, end: datetime) -> List[TutorTimeBlock]:
        return self.list_for_tutor(tutor_id, start, end)
