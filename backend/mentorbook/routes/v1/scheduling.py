# backend/mentorbook/routes/v1/scheduling.py
"""
Mentor scheduling routes - API v1

Versioned endpoints under /api/v1/scheduling for the calling mentor.
All business logic delegated to SchedulingService.

Endpoints:
    GET /me - Timezone, weekly rules and time blocks
    PUT /me/timezone - Set the mentor timezone
    PUT /me/availability - Replace the weekly rule set
    GET /me/blocks - List time blocks (optional from/to overlap filter)
    POST /me/blocks - Create a time block
    PUT /me/blocks/{block_id} - Update a time block
    DELETE /me/blocks/{block_id} - Delete a time block
"""

import asyncio
from datetime import datetime
import logging
from typing import NoReturn, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ...api.dependencies import get_scheduling_service, require_tutor
from ...core.exceptions import DomainException
from ...principal import UserPrincipal
from ...schemas.availability import (
    AvailabilityReplaceRequest,
    SchedulingOverviewResponse,
    TimeBlockCreate,
    TimeBlockListResponse,
    TimeBlockOut,
    TimeBlockUpdate,
    TimezoneResponse,
    TimezoneUpdateRequest,
    WeeklyRuleOut,
    WeeklyRulesResponse,
)
from ...services.scheduling_service import SchedulingService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["scheduling-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception()


@router.get("/me", response_model=SchedulingOverviewResponse)
async def get_my_scheduling(
    principal: UserPrincipal = Depends(require_tutor),
    scheduling_service: SchedulingService = Depends(get_scheduling_service),
) -> SchedulingOverviewResponse:
    try:
        overview = await asyncio.to_thread(scheduling_service.get_overview, principal.id)
    except DomainException as e:
        handle_domain_exception(e)
    return SchedulingOverviewResponse(
        timezone=overview.timezone,
        rules=[WeeklyRuleOut.model_validate(r) for r in overview.rules],
        blocks=[TimeBlockOut.model_validate(b) for b in overview.blocks],
    )


@router.put("/me/timezone", response_model=TimezoneResponse)
async def set_my_timezone(
    payload: TimezoneUpdateRequest,
    principal: UserPrincipal = Depends(require_tutor),
    scheduling_service: SchedulingService = Depends(get_scheduling_service),
) -> TimezoneResponse:
    try:
        tz = await asyncio.to_thread(scheduling_service.set_timezone, principal.id, payload.timezone)
    except DomainException as e:
        handle_domain_exception(e)
    return TimezoneResponse(timezone=tz)


@router.put("/me/availability", response_model=WeeklyRulesResponse)
async def replace_my_availability(
    payload: AvailabilityReplaceRequest,
    principal: UserPrincipal = Depends(require_tutor),
    scheduling_service: SchedulingService = Depends(get_scheduling_service),
) -> WeeklyRulesResponse:
    """Replace the whole weekly rule set; any invalid rule rejects the request."""
    try:
        rules = await asyncio.to_thread(
            scheduling_service.replace_availability,
            principal.id,
            [r.model_dump() for r in payload.rules],
        )
    except DomainException as e:
        handle_domain_exception(e)
    return WeeklyRulesResponse(rules=[WeeklyRuleOut.model_validate(r) for r in rules])


@router.get("/me/blocks", response_model=TimeBlockListResponse)
async def list_my_blocks(
    window_start: Optional[datetime] = Query(None, alias="from"),
    window_end: Optional[datetime] = Query(None, alias="to"),
    principal: UserPrincipal = Depends(require_tutor),
    scheduling_service: SchedulingService = Depends(get_scheduling_service),
) -> TimeBlockListResponse:
    try:
        blocks = await asyncio.to_thread(
            scheduling_service.list_blocks, principal.id, window_start, window_end
        )
    except DomainException as e:
        handle_domain_exception(e)
    return TimeBlockListResponse(blocks=[TimeBlockOut.model_validate(b) for b in blocks])


@router.post("/me/blocks", response_model=TimeBlockOut, status_code=status.HTTP_201_CREATED)
async def create_my_block(
    payload: TimeBlockCreate,
    principal: UserPrincipal = Depends(require_tutor),
    scheduling_service: SchedulingService = Depends(get_scheduling_service),
) -> TimeBlockOut:
    try:
        block = await asyncio.to_thread(
            scheduling_service.create_block,
            principal.id,
            payload.start_time,
            payload.end_time,
            payload.reason,
        )
    except DomainException as e:
        handle_domain_exception(e)
    return TimeBlockOut.model_validate(block)


@router.put("/me/blocks/{block_id}", response_model=TimeBlockOut)
async def update_my_block(
    block_id: str,
    payload: TimeBlockUpdate,
    principal: UserPrincipal = Depends(require_tutor),
    scheduling_service: SchedulingService = Depends(get_scheduling_service),
) -> TimeBlockOut:
    changes = payload.model_dump(exclude_unset=True)
    try:
        block = await asyncio.to_thread(
            scheduling_service.update_block, principal.id, block_id, changes
        )
    except DomainException as e:
        handle_domain_exception(e)
    return TimeBlockOut.model_validate(block)


@router.delete("/me/blocks/{block_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_my_block(
    block_id: str,
    principal: UserPrincipal = Depends(require_tutor),
    scheduling_service: SchedulingService = Depends(get_scheduling_service),
) -> Response:
    try:
        await asyncio.to_thread(scheduling_service.delete_block, principal.id, block_id)
    except DomainException as e:
        handle_domain_exception(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
