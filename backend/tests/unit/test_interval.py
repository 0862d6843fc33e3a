"""Half-open interval semantics shared by slot generation and booking."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from mentorbook.domain.interval import Interval
from tests.utils.scheduling_helpers import utc


def test_rejects_empty_and_inverted_intervals() -> None:
    start = utc(2025, 3, 3, 14)
    with pytest.raises(ValueError):
        Interval(start, start)
    with pytest.raises(ValueError):
        Interval(start, start - timedelta(minutes=1))


def test_touching_intervals_do_not_overlap() -> None:
    first = Interval(utc(2025, 3, 3, 14), utc(2025, 3, 3, 15))
    second = Interval(utc(2025, 3, 3, 15), utc(2025, 3, 3, 16))

    assert not first.overlaps(second)
    assert not second.overlaps(first)
    assert first.is_free([second])


def test_partial_and_enclosing_overlap() -> None:
    slot = Interval(utc(2025, 3, 3, 14), utc(2025, 3, 3, 15))

    assert slot.overlaps(Interval(utc(2025, 3, 3, 14, 59), utc(2025, 3, 3, 16)))
    assert slot.overlaps(Interval(utc(2025, 3, 3, 13), utc(2025, 3, 3, 17)))
    assert not slot.is_free([Interval(utc(2025, 3, 3, 14, 15), utc(2025, 3, 3, 14, 30))])


def test_normalises_offsets_and_naive_values_to_utc() -> None:
    new_york_winter = timezone(timedelta(hours=-5))
    interval = Interval(
        datetime(2025, 3, 3, 9, 0, tzinfo=new_york_winter),
        datetime(2025, 3, 3, 15, 0),
    )

    assert interval.start == utc(2025, 3, 3, 14)
    assert interval.start.tzinfo == timezone.utc
    assert interval.end == utc(2025, 3, 3, 15)


def test_from_start_builds_fixed_length_interval() -> None:
    interval = Interval.from_start(utc(2025, 3, 3, 14), 50)

    assert interval.end == utc(2025, 3, 3, 14, 50)
    assert interval.duration == timedelta(minutes=50)
