"""Appointments API routes."""

from datetime import date, datetime, timedelta

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from scheduler.core.database import get_db
from scheduler.core.exceptions import InvalidRequestError
from scheduler.modules.appointments.schemas import (
    AppointmentCreate,
    AppointmentPublic,
    AppointmentStatisticsPublic,
    CancelRequest,
    CompleteRequest,
    RescheduleRequest,
    SeriesCreate,
    SeriesResultPublic,
)
from scheduler.modules.appointments.service import SchedulingService, scheduling_service_for

router = APIRouter(prefix="/api/v1/practitioners/{practitioner_id}", tags=["appointments"])


async def get_service(practitioner_id: str, db: AsyncSession = Depends(get_db)) -> SchedulingService:
    return await scheduling_service_for(db, practitioner_id)


@router.post("/appointments", response_model=AppointmentPublic, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    payload: AppointmentCreate,
    service: SchedulingService = Depends(get_service),
):
    return await service.book(
        payload.client_id,
        payload.start_time,
        payload.duration_minutes,
        payload.service_type,
        notes=payload.notes,
    )


@router.post("/appointments/series", response_model=SeriesResultPublic, status_code=status.HTTP_201_CREATED)
async def create_series(
    payload: SeriesCreate,
    service: SchedulingService = Depends(get_service),
):
    try:
        pattern = payload.pattern.to_pattern()
    except ValueError as exc:
        raise InvalidRequestError(str(exc)) from exc
    result = await service.create_recurring_series(
        payload.client_id,
        payload.start_time,
        payload.duration_minutes,
        payload.service_type,
        pattern,
        notes=payload.notes,
    )
    return {"series_id": result.series_id, "created": result.created, "skipped": result.skipped}


@router.get("/appointments", response_model=list[AppointmentPublic])
async def list_appointments(
    on: date | None = Query(default=None, alias="date"),
    start: datetime | None = Query(default=None),
    end: datetime | None = Query(default=None),
    client_id: str | None = Query(default=None),
    service: SchedulingService = Depends(get_service),
):
    if on is not None:
        return await service.appointments_on(on)
    if start is not None and end is not None:
        return await service.appointments_in_range(start, end)
    if client_id is not None:
        return await service.for_client(client_id)
    raise InvalidRequestError("Provide either date, start and end, or client_id")


@router.get("/appointments/upcoming", response_model=list[AppointmentPublic])
async def upcoming_appointments(
    limit: int = Query(default=10, ge=1, le=100),
    service: SchedulingService = Depends(get_service),
):
    return await service.upcoming(limit)


@router.get("/appointments/reminders", response_model=list[AppointmentPublic])
async def appointments_needing_reminders(
    lead_hours: int | None = Query(default=None, ge=1),
    service: SchedulingService = Depends(get_service),
):
    lead_time = timedelta(hours=lead_hours) if lead_hours else None
    return await service.needing_reminders(lead_time)


@router.get("/appointments/statistics", response_model=AppointmentStatisticsPublic)
async def appointment_statistics(
    start: datetime = Query(...),
    end: datetime = Query(...),
    service: SchedulingService = Depends(get_service),
):
    stats = await service.statistics(start, end)
    return AppointmentStatisticsPublic.model_validate(stats)


@router.get("/series/{series_id}", response_model=list[AppointmentPublic])
async def series_appointments(series_id: str, service: SchedulingService = Depends(get_service)):
    return await service.series(series_id)


@router.get("/appointments/{appointment_id}", response_model=AppointmentPublic)
async def get_appointment(appointment_id: str, service: SchedulingService = Depends(get_service)):
    return await service.get(appointment_id)


@router.post("/appointments/{appointment_id}/confirm", response_model=AppointmentPublic)
async def confirm_appointment(appointment_id: str, service: SchedulingService = Depends(get_service)):
    return await service.confirm(appointment_id)


@router.post("/appointments/{appointment_id}/check-in", response_model=AppointmentPublic)
async def check_in_appointment(appointment_id: str, service: SchedulingService = Depends(get_service)):
    return await service.check_in(appointment_id)


@router.post("/appointments/{appointment_id}/start", response_model=AppointmentPublic)
async def start_appointment(appointment_id: str, service: SchedulingService = Depends(get_service)):
    return await service.start(appointment_id)


@router.post("/appointments/{appointment_id}/complete", response_model=AppointmentPublic)
async def complete_appointment(
    appointment_id: str,
    payload: CompleteRequest | None = None,
    service: SchedulingService = Depends(get_service),
):
    no_show = payload.no_show if payload else False
    return await service.complete(appointment_id, no_show=no_show)


@router.post("/appointments/{appointment_id}/cancel", response_model=AppointmentPublic)
async def cancel_appointment(
    appointment_id: str,
    payload: CancelRequest,
    service: SchedulingService = Depends(get_service),
):
    return await service.cancel(appointment_id, payload.reason)


@router.post("/appointments/{appointment_id}/reschedule", response_model=AppointmentPublic)
async def reschedule_appointment(
    appointment_id: str,
    payload: RescheduleRequest,
    service: SchedulingService = Depends(get_service),
):
    return await service.reschedule(appointment_id, payload.start_time, payload.duration_minutes)


@router.post("/appointments/{appointment_id}/reminder-sent", response_model=AppointmentPublic)
async def mark_reminder_sent(appointment_id: str, service: SchedulingService = Depends(get_service)):
    return await service.mark_reminder_sent(appointment_id)
