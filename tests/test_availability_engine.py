from datetime import date, datetime, time

import pytest

from scheduler.engine.availability import AvailabilityProfile, BreakPeriod, TimeOff, WorkingHours
from scheduler.engine.conflicts import find_conflict, has_conflict
from scheduler.engine.timeslots import Interval, TimeOfDay
from scheduler.modules.appointments.models import Appointment
from scheduler.shared.enums import AppointmentStatus, ConflictReason, TimeOffCategory, Weekday
from scheduler.shared.models import generate_ulid

MONDAY = date(2025, 6, 2)


def _at(hour: int, minute: int = 0, day: date = MONDAY) -> datetime:
    return datetime.combine(day, time(hour, minute))


def _appointment(start: datetime, duration: int, status=AppointmentStatus.SCHEDULED) -> Appointment:
    appointment = Appointment(
        appointment_id=generate_ulid(),
        practitioner_id=generate_ulid(),
        client_id="client-1",
        service_type="consultation",
        status=status,
    )
    appointment.place(start, duration)
    return appointment


def test_intervals_touching_at_endpoint_do_not_overlap():
    first = Interval.of(_at(9), 60)
    second = Interval.of(_at(10), 60)
    assert not first.overlaps(second)
    assert not second.overlaps(first)
    assert first.overlaps(Interval.of(_at(9, 59), 30))


def test_padding_widens_candidate_on_both_sides():
    existing = Interval.of(_at(9), 60)
    assert Interval.of(_at(10, 10), 30).overlaps(existing, padding_minutes=15)
    assert not Interval.of(_at(10, 15), 30).overlaps(existing, padding_minutes=15)
    assert Interval.of(_at(8, 20), 30).overlaps(existing, padding_minutes=15)
    assert not Interval.of(_at(8, 15), 30).overlaps(existing, padding_minutes=15)


def test_time_of_day_parsing_and_validation():
    assert TimeOfDay.parse("09:30") == TimeOfDay(9, 30)
    assert str(TimeOfDay(7, 5)) == "07:05"
    assert TimeOfDay(12).minutes_since_midnight == 720
    with pytest.raises(ValueError):
        TimeOfDay(24, 0)


def test_working_hours_reject_inverted_window():
    with pytest.raises(ValueError):
        WorkingHours(TimeOfDay(17), TimeOfDay(9))


def test_working_hours_bound_start_and_end(weekday_profile):
    assert weekday_profile.is_available(_at(9), 60)
    assert weekday_profile.is_available(_at(16), 60)
    assert weekday_profile.check(_at(8, 45), 30) == ConflictReason.OUTSIDE_WORKING_HOURS
    assert weekday_profile.check(_at(16, 30), 60) == ConflictReason.OUTSIDE_WORKING_HOURS
    saturday = date(2025, 6, 7)
    assert weekday_profile.check(_at(10, day=saturday), 30) == ConflictReason.OUTSIDE_WORKING_HOURS


def test_break_blocks_overlap_and_both_window_edges():
    lunch = BreakPeriod(frozenset({Weekday.MONDAY}), TimeOfDay(12), 60, "lunch")
    profile = AvailabilityProfile.weekdays(TimeOfDay(9), TimeOfDay(17), breaks=(lunch,))

    assert profile.check(_at(12), 30) == ConflictReason.WITHIN_BREAK
    assert profile.check(_at(11, 45), 30) == ConflictReason.WITHIN_BREAK
    assert profile.check(_at(13), 30) == ConflictReason.WITHIN_BREAK
    assert profile.is_available(_at(11, 30), 30)
    assert profile.is_available(_at(13, 15), 30)
    # Break only applies on Monday.
    assert profile.is_available(_at(12, day=date(2025, 6, 3)), 30)


def test_time_off_blocks_whole_day_inclusive():
    holiday = TimeOff(date(2025, 7, 4), date(2025, 7, 4), TimeOffCategory.HOLIDAY, "Independence Day")
    profile = AvailabilityProfile.weekdays(TimeOfDay(9), TimeOfDay(17), time_off=(holiday,))

    assert holiday.duration_days == 1
    assert profile.check(_at(10, day=date(2025, 7, 4)), 60) == ConflictReason.WITHIN_TIME_OFF
    assert profile.is_available(_at(10, day=date(2025, 7, 3)), 60)


def test_overlapping_time_off_behaves_as_union():
    profile = AvailabilityProfile.weekdays(
        TimeOfDay(9),
        TimeOfDay(17),
        time_off=(
            TimeOff(date(2025, 8, 4), date(2025, 8, 6)),
            TimeOff(date(2025, 8, 6), date(2025, 8, 8), TimeOffCategory.CONFERENCE),
        ),
    )
    blocked = [day for day in range(1, 12) if profile.is_time_off(date(2025, 8, day))]
    assert blocked == [4, 5, 6, 7, 8]


def test_rules_are_checked_in_order():
    lunch = BreakPeriod(frozenset({Weekday.FRIDAY}), TimeOfDay(12), 60)
    profile = AvailabilityProfile.weekdays(
        TimeOfDay(9),
        TimeOfDay(17),
        breaks=(lunch,),
        time_off=(TimeOff(date(2025, 7, 4), date(2025, 7, 4)),),
    )
    friday = date(2025, 7, 4)
    assert profile.check(_at(8, day=friday), 30) == ConflictReason.OUTSIDE_WORKING_HOURS
    assert profile.check(_at(12, day=friday), 30) == ConflictReason.WITHIN_BREAK
    assert profile.check(_at(10, day=friday), 30) == ConflictReason.WITHIN_TIME_OFF


def test_candidate_starts_follow_granularity(weekday_profile):
    starts = list(weekday_profile.candidate_starts(MONDAY, 60))
    assert starts[0] == _at(9)
    assert starts[-1] == _at(16)
    assert len(starts) == 29
    assert list(weekday_profile.candidate_starts(date(2025, 6, 8), 60)) == []
    assert list(weekday_profile.candidate_starts(MONDAY, 600)) == []


def test_negative_buffer_is_rejected():
    with pytest.raises(ValueError):
        AvailabilityProfile(buffer_minutes=-5)


def test_conflict_detection_honours_buffer():
    booked = _appointment(_at(9), 60)
    assert find_conflict(Interval.of(_at(9, 30), 60), [booked], buffer_minutes=15) is booked
    assert find_conflict(Interval.of(_at(10), 60), [booked], buffer_minutes=15) is booked
    assert find_conflict(Interval.of(_at(10, 15), 60), [booked], buffer_minutes=15) is None


def test_released_statuses_do_not_occupy_calendar():
    candidate = Interval.of(_at(9), 60)
    for status in (AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW, AppointmentStatus.RESCHEDULED):
        assert not has_conflict(candidate, [_appointment(_at(9), 60, status)])
    for status in (AppointmentStatus.CONFIRMED, AppointmentStatus.IN_PROGRESS, AppointmentStatus.COMPLETED):
        assert has_conflict(candidate, [_appointment(_at(9), 60, status)])


def test_conflict_check_can_exclude_an_appointment():
    booked = _appointment(_at(9), 60)
    candidate = Interval.of(_at(9, 30), 60)
    assert has_conflict(candidate, [booked])
    assert not has_conflict(candidate, [booked], excluding_id=booked.appointment_id)
