# backend/mentorbook/routes/v1/availability.py
"""
Slot query routes - API v1

Endpoints:
    GET /tutors/{tutor_id}/slots - Bookable slots for a mentor in a window

Public read; unknown mentors yield an empty slot list.
"""

import asyncio
from datetime import datetime
import logging
from typing import NoReturn, Optional

from fastapi import APIRouter, Depends, Query

from ...api.dependencies import get_availability_service
from ...core.exceptions import DomainException
from ...schemas.availability import SlotOut, SlotQueryResponse
from ...services.availability_service import AvailabilityService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["availability-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception()


@router.get("/tutors/{tutor_id}/slots", response_model=SlotQueryResponse)
async def get_tutor_slots(
    tutor_id: str,
    window_start: datetime = Query(..., alias="from", description="Window start (inclusive)"),
    window_end: datetime = Query(..., alias="to", description="Window end (exclusive)"),
    duration_minutes: Optional[int] = Query(None, alias="durationMinutes"),
    step_minutes: Optional[int] = Query(None, alias="stepMinutes"),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> SlotQueryResponse:
    """
    Generate bookable slots.

    ``durationMinutes`` (default 60) and ``stepMinutes`` (default 60) below
    their minimums (15 and 5) are raised to the minimum; values longer than the
    largest query window are rejected.
    """
    try:
        result = await asyncio.to_thread(
            availability_service.get_slots,
            tutor_id,
            window_start,
            window_end,
            duration_minutes,
            step_minutes,
        )
    except DomainException as e:
        handle_domain_exception(e)

    return SlotQueryResponse(
        tutor_id=result.tutor_id,
        window_start=result.start,
        window_end=result.end,
        duration_minutes=result.duration_minutes,
        step_minutes=result.step_minutes,
        timezone=result.timezone,
        slots=[SlotOut(start=s.start, end=s.end) for s in result.slots],
    )
