"""Scheduling service: booking, series creation, transitions and calendar queries."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from sqlalchemy.ext.asyncio import AsyncSession

from scheduler.core.config import settings
from scheduler.core.exceptions import (
    AppointmentNotFoundError,
    AvailabilityConflictError,
    BookingConflictError,
    InvalidRequestError,
    SeriesCreationError,
)
from scheduler.engine.availability import AvailabilityProfile
from scheduler.engine.conflicts import find_conflict
from scheduler.engine.recurrence import RecurrencePattern, expand
from scheduler.engine.timeslots import Interval
from scheduler.engine.transitions import next_status
from scheduler.modules.appointments.locks import practitioner_lock
from scheduler.modules.appointments.models import Appointment
from scheduler.modules.appointments.repository import AppointmentStore, SqlAlchemyAppointmentStore
from scheduler.modules.schedule.service import load_profile
from scheduler.shared.enums import AppointmentStatus, ConflictReason, Transition
from scheduler.shared.models import generate_ulid

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = frozenset(
    {AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED, AppointmentStatus.CHECKED_IN}
)
REMINDABLE_STATUSES = frozenset({AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED})


@dataclass
class SkippedOccurrence:
    start_time: datetime
    reason: ConflictReason
    blocking_appointment_id: str | None = None


@dataclass
class SeriesResult:
    """Outcome of series creation; a non-empty ``skipped`` is a partial failure."""

    series_id: str
    created: list[Appointment] = field(default_factory=list)
    skipped: list[SkippedOccurrence] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return bool(self.skipped)


@dataclass
class AppointmentStatistics:
    total: int
    completed: int
    cancelled: int
    no_show: int
    upcoming: int

    def _rate(self, count: int) -> float:
        if self.total == 0:
            return 0.0
        return count / self.total * 100

    @property
    def completion_rate(self) -> float:
        return self._rate(self.completed)

    @property
    def cancellation_rate(self) -> float:
        return self._rate(self.cancelled)

    @property
    def no_show_rate(self) -> float:
        return self._rate(self.no_show)


class SchedulingService:
    """Owns the invariants of one practitioner's appointment collection.

    Every mutation runs under the practitioner's lock so that the
    availability/conflict check and the write that follows it cannot
    interleave with another booking. Queries read the store without locking.
    """

    def __init__(
        self,
        practitioner_id: str,
        profile: AvailabilityProfile,
        store: AppointmentStore,
        lock: asyncio.Lock | None = None,
        granularity_minutes: int | None = None,
    ):
        self.practitioner_id = practitioner_id
        self.profile = profile
        self.store = store
        self._lock = lock
        self.granularity_minutes = granularity_minutes or settings.slot_granularity_minutes
        self.tz = ZoneInfo(settings.default_timezone)

    @property
    def lock(self) -> asyncio.Lock:
        if self._lock is None:
            self._lock = practitioner_lock(self.practitioner_id)
        return self._lock

    def _now(self) -> datetime:
        return datetime.now(tz=self.tz).replace(tzinfo=None)

    def _normalize_datetime(self, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value
        return value.astimezone(self.tz).replace(tzinfo=None)

    @staticmethod
    def _validate_duration(duration_minutes: int) -> None:
        if duration_minutes <= 0:
            raise InvalidRequestError("Duration must be a positive number of minutes")

    # Validation

    def _rejection(
        self,
        start: datetime,
        duration_minutes: int,
        existing: list[Appointment],
        excluding_id: str | None = None,
    ) -> SkippedOccurrence | None:
        reason = self.profile.check(start, duration_minutes)
        if reason is not None:
            return SkippedOccurrence(start, reason)
        blocking = find_conflict(
            Interval.of(start, duration_minutes),
            existing,
            excluding_id=excluding_id,
            buffer_minutes=self.profile.buffer_minutes,
        )
        if blocking is not None:
            return SkippedOccurrence(start, ConflictReason.OVERLAPS_APPOINTMENT, blocking.appointment_id)
        return None

    def _ensure_bookable(
        self,
        start: datetime,
        duration_minutes: int,
        existing: list[Appointment],
        excluding_id: str | None = None,
    ) -> None:
        rejection = self._rejection(start, duration_minutes, existing, excluding_id)
        if rejection is None:
            return
        if rejection.reason == ConflictReason.OVERLAPS_APPOINTMENT:
            raise BookingConflictError(rejection.blocking_appointment_id)
        raise AvailabilityConflictError(rejection.reason)

    def _new_appointment(
        self,
        client_id: str,
        start: datetime,
        duration_minutes: int,
        service_type: str,
        notes: str | None = None,
        series_id: str | None = None,
    ) -> Appointment:
        appointment = Appointment(
            appointment_id=generate_ulid(),
            practitioner_id=self.practitioner_id,
            client_id=client_id,
            service_type=service_type,
            status=AppointmentStatus.SCHEDULED,
            series_id=series_id,
            is_detached=False,
            notes=notes,
        )
        appointment.place(start, duration_minutes)
        return appointment

    @staticmethod
    def _find(appointments: list[Appointment], appointment_id: str) -> Appointment:
        for appointment in appointments:
            if appointment.appointment_id == appointment_id:
                return appointment
        raise AppointmentNotFoundError(appointment_id)

    # Booking

    async def book(
        self,
        client_id: str,
        start: datetime,
        duration_minutes: int,
        service_type: str,
        notes: str | None = None,
    ) -> Appointment:
        start = self._normalize_datetime(start)
        self._validate_duration(duration_minutes)
        async with self.lock:
            existing = await self.store.load_appointments()
            self._ensure_bookable(start, duration_minutes, existing)
            appointment = self._new_appointment(client_id, start, duration_minutes, service_type, notes)
            await self.store.save_appointment(appointment)
        logger.info(
            "Booked appointment %s for practitioner %s at %s (%d min)",
            appointment.appointment_id,
            self.practitioner_id,
            start.isoformat(),
            duration_minutes,
        )
        return appointment

    async def create_recurring_series(
        self,
        client_id: str,
        first: datetime,
        duration_minutes: int,
        service_type: str,
        pattern: RecurrencePattern,
        notes: str | None = None,
    ) -> SeriesResult:
        first = self._normalize_datetime(first)
        self._validate_duration(duration_minutes)
        try:
            occurrences = expand(first, pattern)
        except ValueError as exc:
            raise InvalidRequestError(str(exc)) from exc

        result = SeriesResult(series_id=generate_ulid())
        async with self.lock:
            existing = await self.store.load_appointments()
            for start in occurrences:
                # Earlier occurrences of this batch occupy the calendar too.
                rejection = self._rejection(start, duration_minutes, [*existing, *result.created])
                if rejection is not None:
                    result.skipped.append(rejection)
                    continue
                result.created.append(
                    self._new_appointment(
                        client_id, start, duration_minutes, service_type, notes, series_id=result.series_id
                    )
                )
            if not result.created:
                logger.warning(
                    "Series for practitioner %s rejected: all %d occurrence(s) conflicted",
                    self.practitioner_id,
                    len(result.skipped),
                )
                raise SeriesCreationError(result.skipped)
            await self.store.save_batch(result.created)
        logger.info(
            "Created series %s for practitioner %s: %d booked, %d skipped",
            result.series_id,
            self.practitioner_id,
            len(result.created),
            len(result.skipped),
        )
        return result

    # Transitions

    async def _transition(self, appointment_id: str, transition: Transition) -> Appointment:
        async with self.lock:
            appointment = self._find(await self.store.load_appointments(), appointment_id)
            appointment.status = next_status(appointment.status, transition)
            now = self._now()
            if transition == Transition.CONFIRM:
                appointment.confirmed_at = now
            elif transition == Transition.CHECK_IN:
                appointment.checked_in_at = now
            elif transition == Transition.START:
                appointment.started_at = now
            elif transition in {Transition.COMPLETE, Transition.MARK_NO_SHOW}:
                appointment.completed_at = now
                appointment.client_showed_up = transition == Transition.COMPLETE
            await self.store.save_appointment(appointment)
        logger.info("Appointment %s -> %s", appointment_id, appointment.status)
        return appointment

    async def confirm(self, appointment_id: str) -> Appointment:
        return await self._transition(appointment_id, Transition.CONFIRM)

    async def check_in(self, appointment_id: str) -> Appointment:
        return await self._transition(appointment_id, Transition.CHECK_IN)

    async def start(self, appointment_id: str) -> Appointment:
        return await self._transition(appointment_id, Transition.START)

    async def complete(self, appointment_id: str, no_show: bool = False) -> Appointment:
        transition = Transition.MARK_NO_SHOW if no_show else Transition.COMPLETE
        return await self._transition(appointment_id, transition)

    async def cancel(self, appointment_id: str, reason: str) -> Appointment:
        reason = (reason or "").strip()
        if not reason:
            raise InvalidRequestError("A cancellation reason is required")
        async with self.lock:
            appointment = self._find(await self.store.load_appointments(), appointment_id)
            appointment.status = next_status(appointment.status, Transition.CANCEL)
            appointment.cancellation_reason = reason
            appointment.cancelled_at = self._now()
            await self.store.save_appointment(appointment)
        logger.info("Cancelled appointment %s: %s", appointment_id, reason)
        return appointment

    async def reschedule(
        self,
        appointment_id: str,
        new_start: datetime,
        new_duration_minutes: int | None = None,
    ) -> Appointment:
        """Move an appointment by replacing it; the original is kept as ``rescheduled``."""
        new_start = self._normalize_datetime(new_start)
        if new_duration_minutes is not None:
            self._validate_duration(new_duration_minutes)
        async with self.lock:
            existing = await self.store.load_appointments()
            original = self._find(existing, appointment_id)
            target_status = next_status(original.status, Transition.RESCHEDULE)
            duration = new_duration_minutes or original.duration_minutes
            self._ensure_bookable(new_start, duration, existing, excluding_id=original.appointment_id)

            replacement = self._new_appointment(
                original.client_id,
                new_start,
                duration,
                original.service_type,
                original.notes,
                series_id=original.series_id,
            )
            replacement.is_detached = original.series_id is not None
            replacement.rescheduled_from_id = original.appointment_id
            original.status = target_status
            await self.store.save_batch([original, replacement])
        logger.info(
            "Rescheduled appointment %s to %s as %s",
            appointment_id,
            new_start.isoformat(),
            replacement.appointment_id,
        )
        return replacement

    async def mark_reminder_sent(self, appointment_id: str) -> Appointment:
        async with self.lock:
            appointment = self._find(await self.store.load_appointments(), appointment_id)
            appointment.reminder_sent_at = self._now()
            await self.store.save_appointment(appointment)
        return appointment

    # Queries

    async def get(self, appointment_id: str) -> Appointment:
        return self._find(await self.store.load_appointments(), appointment_id)

    async def available_slots(self, on_date: date, duration_minutes: int) -> list[datetime]:
        self._validate_duration(duration_minutes)
        existing = await self.store.load_appointments()
        return [
            start
            for start in self.profile.candidate_starts(on_date, duration_minutes, self.granularity_minutes)
            if self._rejection(start, duration_minutes, existing) is None
        ]

    async def check_availability(self, start: datetime, duration_minutes: int) -> ConflictReason | None:
        start = self._normalize_datetime(start)
        self._validate_duration(duration_minutes)
        rejection = self._rejection(start, duration_minutes, await self.store.load_appointments())
        return rejection.reason if rejection else None

    async def appointments_on(self, on_date: date) -> list[Appointment]:
        appointments = await self.store.load_appointments()
        return sorted(
            (item for item in appointments if item.start_time.date() == on_date),
            key=lambda item: item.start_time,
        )

    async def appointments_in_range(self, start: datetime, end: datetime) -> list[Appointment]:
        start = self._normalize_datetime(start)
        end = self._normalize_datetime(end)
        if end < start:
            raise InvalidRequestError("Range end must not be before range start")
        appointments = await self.store.load_appointments()
        return sorted(
            (item for item in appointments if start <= item.start_time <= end),
            key=lambda item: item.start_time,
        )

    async def upcoming(self, limit: int = 10) -> list[Appointment]:
        now = self._now()
        appointments = await self.store.load_appointments()
        future = sorted(
            (item for item in appointments if item.start_time > now and item.status in ACTIVE_STATUSES),
            key=lambda item: item.start_time,
        )
        return future[:limit]

    async def needing_reminders(self, lead_time: timedelta | None = None) -> list[Appointment]:
        """Appointments starting within ``lead_time`` that have not been reminded yet."""
        if lead_time is None:
            lead_time = timedelta(hours=settings.reminder_lead_hours)
        now = self._now()
        horizon = now + lead_time
        appointments = await self.store.load_appointments()
        return sorted(
            (
                item
                for item in appointments
                if item.status in REMINDABLE_STATUSES
                and item.reminder_sent_at is None
                and now < item.start_time <= horizon
            ),
            key=lambda item: item.start_time,
        )

    async def series(self, series_id: str) -> list[Appointment]:
        appointments = await self.store.load_appointments()
        return sorted(
            (item for item in appointments if item.series_id == series_id),
            key=lambda item: item.start_time,
        )

    async def for_client(self, client_id: str) -> list[Appointment]:
        appointments = await self.store.load_appointments()
        return sorted(
            (item for item in appointments if item.client_id == client_id),
            key=lambda item: item.start_time,
        )

    async def statistics(self, start: datetime, end: datetime) -> AppointmentStatistics:
        in_range = await self.appointments_in_range(start, end)
        now = self._now()
        return AppointmentStatistics(
            total=len(in_range),
            completed=sum(1 for item in in_range if item.status == AppointmentStatus.COMPLETED),
            cancelled=sum(1 for item in in_range if item.status == AppointmentStatus.CANCELLED),
            no_show=sum(1 for item in in_range if item.status == AppointmentStatus.NO_SHOW),
            upcoming=sum(1 for item in in_range if item.start_time > now and item.status in ACTIVE_STATUSES),
        )


async def scheduling_service_for(db: AsyncSession, practitioner_id: str) -> SchedulingService:
    """Wire a service to the practitioner's stored profile and appointments."""
    profile = await load_profile(db, practitioner_id)
    return SchedulingService(practitioner_id, profile, SqlAlchemyAppointmentStore(db, practitioner_id))
