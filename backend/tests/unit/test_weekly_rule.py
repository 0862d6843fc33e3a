"""Weekly rule parsing and coverage in mentor-local time."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from mentorbook.domain.weekly_rule import WeeklyRule, WeeklyRuleEvaluator, to_minutes
from tests.utils.scheduling_helpers import utc


def _rule(day: int, start: str, end: str) -> SimpleNamespace:
    return SimpleNamespace(day_of_week=day, start_time=start, end_time=end)


@pytest.mark.parametrize(
    "value,expected",
    [("00:00", 0), ("09:30", 570), ("23:59", 1439)],
)
def test_to_minutes(value: str, expected: int) -> None:
    assert to_minutes(value) == expected


@pytest.mark.parametrize("value", ["24:00", "9:00", "09:60", "0900", "", "aa:bb"])
def test_to_minutes_rejects_malformed_times(value: str) -> None:
    with pytest.raises(ValueError):
        to_minutes(value)


def test_from_record_validates_day_and_order() -> None:
    assert WeeklyRule.from_record(_rule(1, "09:00", "17:00")) == WeeklyRule(1, 540, 1020)

    with pytest.raises(ValueError):
        WeeklyRule.from_record(_rule(7, "09:00", "17:00"))
    with pytest.raises(ValueError):
        WeeklyRule.from_record(_rule(1, "17:00", "09:00"))
    with pytest.raises(ValueError):
        WeeklyRule.from_record(_rule(1, "09:00", "09:00"))


def test_covers_uses_mentor_zone_not_utc() -> None:
    # Monday 09:00-17:00 in New York is 14:00Z-22:00Z before DST starts
    evaluator = WeeklyRuleEvaluator([_rule(1, "09:00", "17:00")], "America/New_York")

    assert evaluator.covers(utc(2025, 3, 3, 14), utc(2025, 3, 3, 15))
    assert evaluator.covers(utc(2025, 3, 3, 21), utc(2025, 3, 3, 22))
    assert not evaluator.covers(utc(2025, 3, 3, 13), utc(2025, 3, 3, 14))
    assert not evaluator.covers(utc(2025, 3, 3, 21, 30), utc(2025, 3, 3, 22, 30))


def test_covers_requires_a_single_rule() -> None:
    evaluator = WeeklyRuleEvaluator(
        [_rule(1, "09:00", "10:00"), _rule(1, "10:00", "11:00")], "UTC"
    )

    assert evaluator.covers(utc(2025, 3, 3, 9), utc(2025, 3, 3, 10))
    assert not evaluator.covers(utc(2025, 3, 3, 9, 30), utc(2025, 3, 3, 10, 30))


def test_covers_rejects_slots_crossing_local_midnight() -> None:
    evaluator = WeeklyRuleEvaluator([_rule(1, "00:00", "23:59"), _rule(2, "00:00", "23:59")], "UTC")

    # Monday 23:30 to Tuesday 00:30
    assert not evaluator.covers(utc(2025, 3, 3, 23, 30), utc(2025, 3, 4, 0, 30))
    # Ending exactly at midnight lands on the next weekday
    assert not evaluator.covers(utc(2025, 3, 3, 23), utc(2025, 3, 4, 0))


def test_local_position_uses_sunday_zero() -> None:
    evaluator = WeeklyRuleEvaluator([], "Asia/Kolkata")

    # Sunday 2025-03-02 20:00Z is Monday 01:30 in Kolkata
    assert evaluator.local_position(utc(2025, 3, 2, 20)) == (1, 90)
    assert WeeklyRuleEvaluator([], "UTC").local_position(utc(2025, 3, 2, 20)) == (0, 1200)
