# backend/mentorbook/services/scheduling_service.py
"""
Scheduling Service

Mentor self-service for the inputs of slot generation: timezone, the
weekly rule set (always replaced wholesale) and ad-hoc time blocks.

Blocks are scoped to the calling mentor; another mentor's block id is
reported as not found.
"""

from dataclasses import dataclass
from datetime import datetime
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import NotFoundException, ValidationException
from ..domain.weekly_rule import WeeklyRule
from ..models.availability import TutorTimeBlock, WeeklyAvailabilityRule
from ..models.user import TutorProfile
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .timezone_service import TimezoneService

logger = logging.getLogger(__name__)


@dataclass
class SchedulingOverview:
    timezone: str
    rules: List[WeeklyAvailabilityRule]
    blocks: List[TutorTimeBlock]


class SchedulingService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.tutor_repository = RepositoryFactory.create_tutor_profile_repository(db)
        self.availability_repository = RepositoryFactory.create_availability_repository(db)
        self.time_block_repository = RepositoryFactory.create_time_block_repository(db)

    def get_tutor_for_user(self, user_id: str) -> TutorProfile:
        tutor = self.tutor_repository.get_by_user_id(user_id)
        if tutor is None:
            raise NotFoundException("Tutor profile not found", code="tutor_not_found")
        return tutor

    @BaseService.measure_operation("get_overview")
    def get_overview(self, user_id: str) -> SchedulingOverview:
        tutor = self.get_tutor_for_user(user_id)
        return SchedulingOverview(
            timezone=tutor.timezone or settings.default_timezone,
            rules=self.availability_repository.get_rules_for_tutor(tutor.id),
            blocks=self.time_block_repository.list_for_tutor(tutor.id),
        )

    @BaseService.measure_operation("set_timezone")
    def set_timezone(self, user_id: str, timezone_name: str) -> str:
        if not TimezoneService.is_valid_timezone(timezone_name):
            raise ValidationException(
                f"Unknown timezone: {timezone_name}",
                code="invalid_timezone",
                details={"timezone": timezone_name},
            )
        tutor = self.get_tutor_for_user(user_id)
        with self.transaction():
            self.tutor_repository.update(tutor, timezone=timezone_name)
        self.log_operation("set_timezone", tutor_id=tutor.id, timezone=timezone_name)
        return timezone_name

    @staticmethod
    def validate_rules(rules: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        """
        Validate every rule before anything is written.

        One bad rule rejects the whole set.
        """
        errors = []
        cleaned: List[Dict[str, Any]] = []
        for index, raw in enumerate(rules):
            record = {
                "day_of_week": raw.get("day_of_week"),
                "start_time": raw.get("start_time"),
                "end_time": raw.get("end_time"),
            }
            try:
                if not isinstance(record["day_of_week"], int) or isinstance(
                    record["day_of_week"], bool
                ):
                    raise ValueError("day_of_week must be an integer between 0 and 6")
                WeeklyRule.from_record(_RuleRecord(**record))
            except (TypeError, ValueError) as exc:
                errors.append({"index": index, "message": str(exc)})
                continue
            cleaned.append(record)

        if errors:
            raise ValidationException(
                "Invalid availability rules", code="invalid_rules", details={"errors": errors}
            )
        return cleaned

    @BaseService.measure_operation("replace_availability")
    def replace_availability(
        self, user_id: str, rules: Sequence[Mapping[str, Any]]
    ) -> List[WeeklyAvailabilityRule]:
        tutor = self.get_tutor_for_user(user_id)
        cleaned = self.validate_rules(rules)
        with self.transaction():
            self.availability_repository.replace_rules(tutor.id, cleaned)
        self.log_operation("replace_availability", tutor_id=tutor.id, rule_count=len(cleaned))
        return self.availability_repository.get_rules_for_tutor(tutor.id)

    def list_blocks(
        self,
        user_id: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[TutorTimeBlock]:
        tutor = self.get_tutor_for_user(user_id)
        return self.time_block_repository.list_for_tutor(tutor.id, start, end)

    @staticmethod
    def _check_block_window(start: datetime, end: datetime) -> None:
        if TimezoneService.ensure_utc(start) >= TimezoneService.ensure_utc(end):
            raise ValidationException(
                "start_time must be before end_time",
                code="invalid_time_block",
                details={"start_time": start.isoformat(), "end_time": end.isoformat()},
            )

    @BaseService.measure_operation("create_block")
    def create_block(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
        reason: Optional[str] = None,
    ) -> TutorTimeBlock:
        self._check_block_window(start, end)
        tutor = self.get_tutor_for_user(user_id)
        with self.transaction():
            block = self.time_block_repository.create(
                tutor_id=tutor.id, start_time=start, end_time=end, reason=reason or None
            )
        self.log_operation("create_block", tutor_id=tutor.id, block_id=block.id)
        return block

    def _get_owned_block(self, tutor_id: str, block_id: str) -> TutorTimeBlock:
        block = self.time_block_repository.get_for_tutor(block_id, tutor_id)
        if block is None:
            raise NotFoundException("Time block not found", code="time_block_not_found")
        return block

    @BaseService.measure_operation("update_block")
    def update_block(self, user_id: str, block_id: str, changes: Mapping[str, Any]) -> TutorTimeBlock:
        """
        Partially update a block. Omitted start/end keep their current value;
        a present but empty reason clears it.
        """
        tutor = self.get_tutor_for_user(user_id)
        block = self._get_owned_block(tutor.id, block_id)

        start = changes.get("start_time") or block.start_time
        end = changes.get("end_time") or block.end_time
        self._check_block_window(start, end)

        updates: Dict[str, Any] = {"start_time": start, "end_time": end}
        if "reason" in changes:
            updates["reason"] = changes["reason"] or None

        with self.transaction():
            self.time_block_repository.update(block, **updates)
        return block

    @BaseService.measure_operation("delete_block")
    def delete_block(self, user_id: str, block_id: str) -> None:
        tutor = self.get_tutor_for_user(user_id)
        block = self._get_owned_block(tutor.id, block_id)
        with self.transaction():
            self.time_block_repository.delete(block)
        self.log_operation("delete_block", tutor_id=tutor.id, block_id=block_id)


@dataclass(frozen=True)
class _RuleRecord:
    day_of_week: int
    start_time: str
    end_time: str
