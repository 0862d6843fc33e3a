# backend/mentorbook/schemas/availability.py
"""
Schemas for mentor scheduling and slot queries.

Weekly rule fields are only type-checked here; range, ``HH:MM`` format and
ordering are validated by SchedulingService so an invalid set is rejected as
a whole with per-rule details.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, Field

from ._strict_base import StrictModel, StrictRequestModel


class WeeklyRuleIn(StrictRequestModel):
    day_of_week: int = Field(..., description="0=Sunday .. 6=Saturday")
    start_time: str = Field(..., description="Local start, HH:MM")
    end_time: str = Field(..., description="Local end, HH:MM")


class AvailabilityReplaceRequest(StrictRequestModel):
    """The complete rule set; replaces every existing rule."""

    rules: List[WeeklyRuleIn] = Field(default_factory=list)


class TimezoneUpdateRequest(StrictRequestModel):
    timezone: str = Field(..., min_length=1, max_length=64, description="IANA zone name")


class TimeBlockCreate(StrictRequestModel):
    start_time: datetime
    end_time: datetime
    reason: Optional[str] = Field(default=None, max_length=500)


class TimeBlockUpdate(StrictRequestModel):
    """Partial update; omitted fields keep their value, an empty reason clears it."""

    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    reason: Optional[str] = Field(default=None, max_length=500)


class WeeklyRuleOut(StrictModel):
    model_config = ConfigDict(from_attributes=True)

    day_of_week: int
    start_time: str
    end_time: str


class TimeBlockOut(StrictModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    start_time: datetime
    end_time: datetime
    reason: Optional[str] = None


class SchedulingOverviewResponse(StrictModel):
    timezone: str
    rules: List[WeeklyRuleOut]
    blocks: List[TimeBlockOut]


class TimezoneResponse(StrictModel):
    timezone: str


class WeeklyRulesResponse(StrictModel):
    rules: List[WeeklyRuleOut]


class TimeBlockListResponse(StrictModel):
    blocks: List[TimeBlockOut]


class SlotOut(StrictModel):
    start: datetime
    end: datetime


class SlotQueryResponse(StrictModel):
    tutor_id: str
    window_start: datetime = Field(..., serialization_alias="from")
    window_end: datetime = Field(..., serialization_alias="to")
    duration_minutes: int
    step_minutes: int
    timezone: str
    slots: List[SlotOut]
