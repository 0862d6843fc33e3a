# backend/mentorbook/domain/weekly_rule.py
"""
Weekly rule evaluation in mentor-local time.

A rule covers a slot when the slot's local start and local end fall on the
rule's weekday inside ``[start_time, end_time]`` of that rule; slots never
span a rule boundary or a local day boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import re
from typing import Iterable, Optional, Protocol

from ..services.timezone_service import TimezoneService

TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def to_minutes(hhmm: str) -> int:
    """Convert ``HH:MM`` to minutes since midnight."""
    if not TIME_RE.match(hhmm or ""):
        raise ValueError(f"Invalid time of day: {hhmm!r} (expected HH:MM)")
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)


class RuleLike(Protocol):
    day_of_week: int
    start_time: str
    end_time: str


@dataclass(frozen=True)
class WeeklyRule:
    """Validated in-memory form of a weekly availability rule."""

    day_of_week: int
    start_minute: int
    end_minute: int

    @classmethod
    def from_record(cls, rule: RuleLike) -> "WeeklyRule":
        start = to_minutes(rule.start_time)
        end = to_minutes(rule.end_time)
        if not 0 <= rule.day_of_week <= 6:
            raise ValueError(f"day_of_week must be between 0 and 6, got {rule.day_of_week}")
        if start >= end:
            raise ValueError(f"start_time {rule.start_time} must be before end_time {rule.end_time}")
        return cls(rule.day_of_week, start, end)

    def covers_minutes(self, weekday: int, start_minute: int, end_minute: int) -> bool:
        return (
            weekday == self.day_of_week
            and start_minute >= self.start_minute
            and end_minute <= self.end_minute
        )


class WeeklyRuleEvaluator:
    """Tests absolute intervals against a mentor's weekly rules in the mentor's zone."""

    def __init__(self, rules: Iterable[RuleLike], timezone_str: Optional[str]):
        self.rules = [WeeklyRule.from_record(r) for r in rules]
        self.timezone = timezone_str

    def local_position(self, instant: datetime) -> tuple[int, int]:
        return TimezoneService.local_weekday_and_minutes(instant, self.timezone)

    def covers(self, start: datetime, end: datetime) -> bool:
        """
        True if ``[start, end)`` sits inside one rule on a single local day.

        Both endpoints are converted through the zone; an interval whose local
        end lands on another weekday (or at local midnight) is not covered.
        """
        if start >= end:
            return False
        start_day, start_minute = self.local_position(start)
        end_day, end_minute = self.local_position(end)
        if start_day != end_day:
            return False
        return any(r.covers_minutes(start_day, start_minute, end_minute) for r in self.rules)
