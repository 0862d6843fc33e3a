# backend/mentorbook/services/availability_service.py
"""
Availability Service

Turns a mentor's weekly rules and busy intervals into bookable slots, and
re-checks a single slot at booking time with exactly the same rules.

Slot generation walks the requested window on a step grid measured in
mentor-local minutes since midnight, so a 60 minute step lands on local
:00 marks even for zones with half-hour offsets.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import ValidationException
from ..domain.interval import Interval
from ..domain.weekly_rule import WeeklyRuleEvaluator
from ..integrations.calendar_client import CalendarProvider
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .busy_interval_service import BusyIntervalService
from .timezone_service import TimezoneService

logger = logging.getLogger(__name__)


@dataclass
class SlotQueryResult:
    tutor_id: str
    start: datetime
    end: datetime
    duration_minutes: int
    step_minutes: int
    timezone: str
    slots: List[Interval] = field(default_factory=list)


class AvailabilityService(BaseService):
    def __init__(
        self,
        db: Session,
        calendar: Optional[CalendarProvider] = None,
        busy_interval_service: Optional[BusyIntervalService] = None,
    ):
        super().__init__(db)
        self.busy_interval_service = busy_interval_service or BusyIntervalService(db, calendar)
        self.tutor_repository = RepositoryFactory.create_tutor_profile_repository(db)
        self.availability_repository = RepositoryFactory.create_availability_repository(db)

    def _evaluator_for(self, tutor_id: str) -> Optional[WeeklyRuleEvaluator]:
        profile = self.tutor_repository.get_by_id(tutor_id)
        if profile is None:
            return None
        rules = self.availability_repository.get_rules_for_tutor(tutor_id)
        return WeeklyRuleEvaluator(rules, profile.timezone or settings.default_timezone)

    @staticmethod
    def clamp_slot_parameters(
        duration_minutes: Optional[int], step_minutes: Optional[int]
    ) -> tuple[int, int]:
        """Apply defaults and raise values below the minimum up to it."""
        duration = (
            settings.slot_default_duration_minutes if duration_minutes is None else duration_minutes
        )
        step = settings.slot_default_step_minutes if step_minutes is None else step_minutes
        return (
            max(settings.slot_min_duration_minutes, duration),
            max(settings.slot_min_step_minutes, step),
        )

    @BaseService.measure_operation("get_slots")
    def get_slots(
        self,
        tutor_id: str,
        start: datetime,
        end: datetime,
        duration_minutes: Optional[int] = None,
        step_minutes: Optional[int] = None,
    ) -> SlotQueryResult:
        """
        Validate and clamp a slot query, then generate slots.

        Unknown mentors yield an empty result rather than an error.
        """
        start = TimezoneService.ensure_utc(start)
        end = TimezoneService.ensure_utc(end)
        if start >= end:
            raise ValidationException(
                "'from' must be before 'to'",
                code="invalid_window",
                details={"from": start.isoformat(), "to": end.isoformat()},
            )
        if end - start > timedelta(days=settings.max_slot_window_days):
            raise ValidationException(
                f"Window may span at most {settings.max_slot_window_days} days",
                code="window_too_large",
                details={"max_days": settings.max_slot_window_days},
            )

        duration, step = self.clamp_slot_parameters(duration_minutes, step_minutes)
        max_minutes = settings.max_slot_window_days * 24 * 60
        if duration > max_minutes or step > max_minutes:
            raise ValidationException(
                f"durationMinutes and stepMinutes may be at most {max_minutes}",
                code="invalid_slot_parameters",
                details={
                    "duration_minutes": duration,
                    "step_minutes": step,
                    "max_minutes": max_minutes,
                },
            )
        profile = self.tutor_repository.get_by_id(tutor_id)
        tz_name = (profile.timezone if profile else None) or settings.default_timezone
        slots = self.generate_slots(tutor_id, start, end, duration, step) if profile else []
        return SlotQueryResult(
            tutor_id=tutor_id,
            start=start,
            end=end,
            duration_minutes=duration,
            step_minutes=step,
            timezone=tz_name,
            slots=slots,
        )

    def generate_slots(
        self,
        tutor_id: str,
        start: datetime,
        end: datetime,
        duration_minutes: int,
        step_minutes: int,
    ) -> List[Interval]:
        """
        Ordered ``duration_minutes`` slots inside ``[start, end)`` that are
        covered by a weekly rule and free of every busy interval.

        Busy intervals are read once per call.
        """
        if duration_minutes <= 0 or step_minutes <= 0:
            raise ValidationException("duration and step must be positive")

        evaluator = self._evaluator_for(tutor_id)
        if evaluator is None or not evaluator.rules:
            return []

        start = TimezoneService.ensure_utc(start)
        end = TimezoneService.ensure_utc(end)
        busy = self.busy_interval_service.collect(tutor_id, start, end)
        duration = timedelta(minutes=duration_minutes)
        step = timedelta(minutes=step_minutes)

        cursor = start.replace(second=0, microsecond=0)
        if cursor < start:
            cursor += timedelta(minutes=1)

        slots: List[Interval] = []
        while cursor < end:
            _, minute_of_day = evaluator.local_position(cursor)
            remainder = minute_of_day % step_minutes
            if remainder:
                # Snap forward onto the local grid, then re-evaluate
                cursor += timedelta(minutes=step_minutes - remainder)
                continue

            slot_end = cursor + duration
            if slot_end <= end and evaluator.covers(cursor, slot_end):
                candidate = Interval.from_start(cursor, duration_minutes)
                if candidate.is_free(busy):
                    slots.append(candidate)
            cursor += step

        return slots

    @BaseService.measure_operation("is_available")
    def is_available(
        self,
        tutor_id: str,
        start: datetime,
        end: datetime,
        *,
        calendar_timeout: Optional[float] = None,
    ) -> bool:
        """Rule coverage and busy-overlap test for a single ``[start, end)``."""
        start = TimezoneService.ensure_utc(start)
        end = TimezoneService.ensure_utc(end)
        if start >= end:
            return False

        evaluator = self._evaluator_for(tutor_id)
        if evaluator is None or not evaluator.covers(start, end):
            return False

        busy = self.busy_interval_service.collect(
            tutor_id, start, end, calendar_timeout=calendar_timeout
        )
        return Interval(start, end).is_free(busy)
