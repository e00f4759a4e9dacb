"""
Scheduling API routes.

Schedule, cancel and reschedule content publication, and list an owner's
schedules. Errors from the service are mapped to HTTP statuses by the handler
installed in ``contentlab.api.errors``.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from contentlab.api.deps import get_scheduling_service
from contentlab.api.schemas import (
    CancelResponse,
    RescheduleRequest,
    ScheduleRequest,
    ScheduleResponse,
)
from contentlab.domain.entities import ScheduledPublication
from contentlab.services.scheduling import SchedulingService

router = APIRouter()


def schedule_to_response(record: ScheduledPublication) -> ScheduleResponse:
    """Convert ScheduledPublication to response model."""
    return ScheduleResponse.model_validate(record.model_dump())


@router.post("", response_model=ScheduleResponse, status_code=201)
def schedule_content(
    request: ScheduleRequest,
    service: SchedulingService = Depends(get_scheduling_service),
) -> ScheduleResponse:
    """
    Schedule content for publishing.

    Content must be in draft; it moves to pending_approval.
    """
    record = service.schedule(request.content_id, request.scheduled_at)
    return schedule_to_response(record)


@router.get("", response_model=list[ScheduleResponse])
def list_schedules(
    owner_id: UUID,
    service: SchedulingService = Depends(get_scheduling_service),
) -> list[ScheduleResponse]:
    """List an owner's schedules, earliest first."""
    return [schedule_to_response(r) for r in service.list_for_owner(owner_id)]


@router.get("/{schedule_id}", response_model=ScheduleResponse)
def get_schedule(
    schedule_id: UUID,
    service: SchedulingService = Depends(get_scheduling_service),
) -> ScheduleResponse:
    return schedule_to_response(service.get(schedule_id))


@router.put("/{schedule_id}", response_model=ScheduleResponse)
def reschedule_content(
    schedule_id: UUID,
    request: RescheduleRequest,
    service: SchedulingService = Depends(get_scheduling_service),
) -> ScheduleResponse:
    """
    Move a pending schedule to a new time.

    Only pending schedules can be rescheduled.
    """
    record = service.reschedule(schedule_id, request.scheduled_at)
    return schedule_to_response(record)


@router.delete("/{schedule_id}", response_model=CancelResponse)
def cancel_schedule(
    schedule_id: UUID,
    service: SchedulingService = Depends(get_scheduling_service),
) -> CancelResponse:
    """
    Cancel a pending schedule; the content returns to draft.

    Cancelling a published or failed schedule is rejected with 404.
    """
    service.cancel(schedule_id)
    return CancelResponse(success=True, id=schedule_id)
