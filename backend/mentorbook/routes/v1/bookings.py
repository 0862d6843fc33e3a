# backend/mentorbook/routes/v1/bookings.py
"""
Student booking routes - API v1

Endpoints:
    POST / - Create a booking (student role only)
"""

import asyncio
import logging
from typing import NoReturn

from fastapi import APIRouter, Depends, status

from ...api.dependencies import get_booking_service, require_student
from ...core.exceptions import DomainException
from ...principal import UserPrincipal
from ...schemas.booking import BookingCreate, BookingResponse
from ...services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["bookings-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception()


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    principal: UserPrincipal = Depends(require_student),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """
    Create a booking envelope and its first lesson.

    409 when a requested slot is no longer available; the client should
    re-query slots.
    """
    try:
        booking = await asyncio.to_thread(
            booking_service.create_booking,
            principal.id,
            booking_data.tutor_id,
            start_date=booking_data.start_date,
            slot_starts=booking_data.slot_starts,
            duration_minutes=booking_data.duration_minutes,
            frequency=booking_data.frequency,
        )
    except DomainException as e:
        handle_domain_exception(e)

    return BookingResponse.model_validate(booking)
