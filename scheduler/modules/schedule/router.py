"""Schedule routes."""

from datetime import date, datetime

from fastapi import APIRouter, Depends, Query

from scheduler.engine.timeslots import minutes
from scheduler.modules.appointments.router import get_service
from scheduler.modules.appointments.service import SchedulingService
from scheduler.modules.schedule.schemas import AvailabilityCheck, AvailabilitySlot

router = APIRouter(prefix="/api/v1/practitioners/{practitioner_id}/availability", tags=["schedule"])


@router.get("", response_model=list[AvailabilitySlot])
async def availability(
    date_value: date = Query(..., alias="date"),
    duration_minutes: int = Query(..., alias="duration", gt=0),
    service: SchedulingService = Depends(get_service),
) -> list[AvailabilitySlot]:
    starts = await service.available_slots(date_value, duration_minutes)
    return [AvailabilitySlot(start=start, end=start + minutes(duration_minutes)) for start in starts]


@router.get("/check", response_model=AvailabilityCheck)
async def check_availability(
    start: datetime = Query(...),
    duration_minutes: int = Query(..., alias="duration", gt=0),
    service: SchedulingService = Depends(get_service),
) -> AvailabilityCheck:
    reason = await service.check_availability(start, duration_minutes)
    return AvailabilityCheck(
        start=start,
        duration_minutes=duration_minutes,
        available=reason is None,
        reason=reason,
    )
