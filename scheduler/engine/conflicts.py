"""Double-booking detection against the existing calendar."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol

from scheduler.engine.timeslots import Interval
from scheduler.shared.enums import AppointmentStatus


class Occupant(Protocol):
    appointment_id: str
    start_time: datetime
    end_time: datetime
    status: AppointmentStatus


def occupied_interval(appointment: Occupant) -> Interval:
    return Interval(appointment.start_time, appointment.end_time)


def find_conflict(
    candidate: Interval,
    existing: Iterable[Occupant],
    excluding_id: str | None = None,
    buffer_minutes: int = 0,
) -> Occupant | None:
    """Return the first appointment the padded candidate overlaps."""
    for appointment in existing:
        if excluding_id is not None and appointment.appointment_id == excluding_id:
            continue
        if not AppointmentStatus(appointment.status).occupies_calendar:
            continue
        if candidate.overlaps(occupied_interval(appointment), buffer_minutes):
            return appointment
    return None


def has_conflict(
    candidate: Interval,
    existing: Iterable[Occupant],
    excluding_id: str | None = None,
    buffer_minutes: int = 0,
) -> bool:
    return find_conflict(candidate, existing, excluding_id, buffer_minutes) is not None
