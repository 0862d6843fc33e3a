# backend/mentorbook/domain/interval.py
"""
Half-open absolute time interval ``[start, end)``.

All busy sources (lessons, time blocks, external calendar periods) and every
candidate slot are expressed as Interval so that the free/overlap test is
shared by slot generation and booking validation.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Iterable


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class Interval:
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        start = _as_utc(self.start)
        end = _as_utc(self.end)
        if start >= end:
            raise ValueError(f"Invalid interval: start {start.isoformat()} must be before end {end.isoformat()}")
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    @classmethod
    def from_start(cls, start: datetime, minutes: int) -> "Interval":
        return cls(start, start + timedelta(minutes=minutes))

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, other: "Interval") -> bool:
        """Half-open overlap: touching endpoints do not overlap."""
        return self.start < other.end and other.start < self.end

    def is_free(self, busy: Iterable["Interval"]) -> bool:
        return not any(self.overlaps(b) for b in busy)
