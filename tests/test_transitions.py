import pytest

from scheduler.core.exceptions import TransitionError
from scheduler.engine.transitions import can_apply, next_status
from scheduler.shared.enums import AppointmentStatus, Transition

TERMINAL = [
    AppointmentStatus.COMPLETED,
    AppointmentStatus.CANCELLED,
    AppointmentStatus.NO_SHOW,
    AppointmentStatus.RESCHEDULED,
]


def test_happy_path_through_visit():
    status = AppointmentStatus.SCHEDULED
    for transition in (Transition.CONFIRM, Transition.CHECK_IN, Transition.START, Transition.COMPLETE):
        status = next_status(status, transition)
    assert status == AppointmentStatus.COMPLETED


def test_check_in_allowed_without_confirmation():
    assert next_status(AppointmentStatus.SCHEDULED, Transition.CHECK_IN) == AppointmentStatus.CHECKED_IN


def test_no_show_only_from_in_progress():
    assert next_status(AppointmentStatus.IN_PROGRESS, Transition.MARK_NO_SHOW) == AppointmentStatus.NO_SHOW
    assert not can_apply(AppointmentStatus.SCHEDULED, Transition.MARK_NO_SHOW)


def test_cancel_allowed_until_visit_starts():
    for status in (AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED, AppointmentStatus.CHECKED_IN):
        assert next_status(status, Transition.CANCEL) == AppointmentStatus.CANCELLED
    assert not can_apply(AppointmentStatus.IN_PROGRESS, Transition.CANCEL)


def test_reschedule_only_before_check_in():
    assert can_apply(AppointmentStatus.CONFIRMED, Transition.RESCHEDULE)
    with pytest.raises(TransitionError) as exc_info:
        next_status(AppointmentStatus.CHECKED_IN, Transition.RESCHEDULE)
    assert exc_info.value.status_code == 409


@pytest.mark.parametrize("status", TERMINAL)
def test_terminal_statuses_accept_no_transition(status):
    assert not any(can_apply(status, transition) for transition in Transition)


def test_released_statuses_free_the_calendar():
    occupying = {status for status in AppointmentStatus if status.occupies_calendar}
    assert occupying == {
        AppointmentStatus.SCHEDULED,
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.CHECKED_IN,
        AppointmentStatus.IN_PROGRESS,
        AppointmentStatus.COMPLETED,
    }
