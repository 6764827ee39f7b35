"""Appointment status state machine."""

from __future__ import annotations

from scheduler.core.exceptions import TransitionError
from scheduler.shared.enums import AppointmentStatus, Transition

_BOOKED = frozenset({AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED})

TRANSITIONS: dict[Transition, tuple[frozenset[AppointmentStatus], AppointmentStatus]] = {
    Transition.CONFIRM: (_BOOKED, AppointmentStatus.CONFIRMED),
    Transition.CHECK_IN: (_BOOKED, AppointmentStatus.CHECKED_IN),
    Transition.START: (frozenset({AppointmentStatus.CHECKED_IN}), AppointmentStatus.IN_PROGRESS),
    Transition.COMPLETE: (frozenset({AppointmentStatus.IN_PROGRESS}), AppointmentStatus.COMPLETED),
    Transition.MARK_NO_SHOW: (frozenset({AppointmentStatus.IN_PROGRESS}), AppointmentStatus.NO_SHOW),
    Transition.CANCEL: (_BOOKED | {AppointmentStatus.CHECKED_IN}, AppointmentStatus.CANCELLED),
    Transition.RESCHEDULE: (_BOOKED, AppointmentStatus.RESCHEDULED),
}


def can_apply(current: AppointmentStatus, transition: Transition) -> bool:
    allowed_from, _ = TRANSITIONS[transition]
    return current in allowed_from


def next_status(current: AppointmentStatus, transition: Transition) -> AppointmentStatus:
    """Return the status reached by ``transition`` or raise TransitionError."""
    allowed_from, target = TRANSITIONS[transition]
    if current not in allowed_from:
        raise TransitionError(current, transition)
    return target
