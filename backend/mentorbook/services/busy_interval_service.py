# backend/mentorbook/services/busy_interval_service.py
"""
Busy interval aggregation.

Collects every interval that makes a mentor unavailable in a window from
three sources: non-cancelled lessons, mentor time blocks, and the external
calendar's busy periods. The sources are concatenated as-is; downstream code
only runs the overlap test, so no merging is needed.
"""

from datetime import datetime
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..domain.interval import Interval
from ..integrations.calendar_client import CalendarError, CalendarProvider, NullCalendarProvider
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


class BusyIntervalService(BaseService):
    def __init__(self, db: Session, calendar: Optional[CalendarProvider] = None):
        super().__init__(db)
        self.calendar = calendar or NullCalendarProvider()
        self.lesson_repository = RepositoryFactory.create_lesson_repository(db)
        self.time_block_repository = RepositoryFactory.create_time_block_repository(db)

    @BaseService.measure_operation("collect_busy_intervals")
    def collect(
        self,
        tutor_id: str,
        start: datetime,
        end: datetime,
        *,
        calendar_timeout: Optional[float] = None,
    ) -> List[Interval]:
        busy: List[Interval] = []

        for lesson in self.lesson_repository.get_blocking_lessons(tutor_id, start, end):
            busy.append(Interval(lesson.start_time, lesson.end_time))

        for block in self.time_block_repository.get_overlapping(tutor_id, start, end):
            busy.append(Interval(block.start_time, block.end_time))

        external = self.fetch_external_busy(tutor_id, start, end, timeout=calendar_timeout)
        busy.extend(external)
        return busy

    def fetch_external_busy(
        self,
        tutor_id: str,
        start: datetime,
        end: datetime,
        *,
        timeout: Optional[float] = None,
    ) -> List[Interval]:
        """
        Busy periods from the connected calendar.

        No connected calendar and any gateway failure both yield ``[]``; the
        calendar never fails a slot query or a booking.
        """
        try:
            periods = self.calendar.fetch_busy(
                tutor_id,
                start,
                end,
                timeout=timeout if timeout is not None else settings.calendar_timeout_seconds,
            )
        except CalendarError as exc:
            self.logger.warning(
                "Calendar busy lookup failed for tutor %s, continuing without external data: %s",
                tutor_id,
                exc,
            )
            prometheus_metrics.inc_calendar_fallback("fetch_busy")
            return []

        if periods is None:
            return []
        return list(periods)
