from datetime import date, datetime

import pytest

from scheduler.engine.recurrence import (
    ABSOLUTE_LIMIT,
    OPEN_ENDED_LIMIT,
    EndCondition,
    RecurrencePattern,
    add_months,
    expand,
)
from scheduler.shared.enums import RecurrenceFrequency, Weekday


def _dates(occurrences) -> list[date]:
    return [start.date() for start in occurrences]


def test_weekly_every_other_week_with_count():
    pattern = RecurrencePattern(RecurrenceFrequency.WEEKLY, interval=2, end=EndCondition.after(3))
    occurrences = list(expand(datetime(2025, 1, 6, 10, 0), pattern))
    assert occurrences == [
        datetime(2025, 1, 6, 10, 0),
        datetime(2025, 1, 20, 10, 0),
        datetime(2025, 2, 3, 10, 0),
    ]


def test_biweekly_matches_weekly_interval_two():
    first = datetime(2025, 1, 6, 10, 0)
    biweekly = RecurrencePattern(RecurrenceFrequency.BIWEEKLY, end=EndCondition.after(3))
    weekly = RecurrencePattern(RecurrenceFrequency.WEEKLY, interval=2, end=EndCondition.after(3))
    assert list(expand(first, biweekly)) == list(expand(first, weekly))


def test_daily_until_date_is_inclusive():
    pattern = RecurrencePattern(RecurrenceFrequency.DAILY, end=EndCondition.until(date(2025, 3, 5)))
    assert _dates(expand(datetime(2025, 3, 1, 8, 30), pattern)) == [
        date(2025, 3, 1),
        date(2025, 3, 2),
        date(2025, 3, 3),
        date(2025, 3, 4),
        date(2025, 3, 5),
    ]


def test_monthly_clamps_to_last_day_without_drifting():
    pattern = RecurrencePattern(RecurrenceFrequency.MONTHLY, end=EndCondition.after(4))
    assert _dates(expand(datetime(2025, 1, 31, 9, 0), pattern)) == [
        date(2025, 1, 31),
        date(2025, 2, 28),
        date(2025, 3, 31),
        date(2025, 4, 30),
    ]


def test_add_months_crosses_year_boundary():
    assert add_months(datetime(2024, 11, 30, 9, 0), 3) == datetime(2025, 2, 28, 9, 0)
    assert add_months(datetime(2024, 1, 31, 9, 0), 1) == datetime(2024, 2, 29, 9, 0)


def test_open_ended_series_is_capped():
    pattern = RecurrencePattern(RecurrenceFrequency.DAILY)
    occurrences = list(expand(datetime(2025, 1, 1, 9, 0), pattern))
    assert len(occurrences) == OPEN_ENDED_LIMIT


def test_end_date_series_up_to_absolute_limit_is_kept():
    # 2024 is a leap year: Jan 1 through Dec 31 is exactly the cap.
    pattern = RecurrencePattern(RecurrenceFrequency.DAILY, end=EndCondition.until(date(2024, 12, 31)))
    occurrences = list(expand(datetime(2024, 1, 1, 9, 0), pattern))
    assert len(occurrences) == ABSOLUTE_LIMIT
    assert occurrences[-1] == datetime(2024, 12, 31, 9, 0)


def test_end_date_beyond_absolute_limit_is_rejected():
    pattern = RecurrencePattern(RecurrenceFrequency.DAILY, end=EndCondition.until(date(2025, 1, 1)))
    with pytest.raises(ValueError):
        expand(datetime(2024, 1, 1, 9, 0), pattern)

    weekly = RecurrencePattern(RecurrenceFrequency.WEEKLY, end=EndCondition.until(date(2030, 1, 1)))
    assert len(list(expand(datetime(2025, 1, 1, 9, 0), weekly))) == 261


def test_weekly_days_of_week_expands_within_each_week():
    pattern = RecurrencePattern(
        RecurrenceFrequency.WEEKLY,
        days_of_week=frozenset({Weekday.MONDAY, Weekday.THURSDAY}),
        end=EndCondition.after(5),
    )
    occurrences = list(expand(datetime(2025, 1, 6, 14, 0), pattern))
    assert _dates(occurrences) == [
        date(2025, 1, 6),
        date(2025, 1, 9),
        date(2025, 1, 13),
        date(2025, 1, 16),
        date(2025, 1, 20),
    ]
    assert all(start.hour == 14 for start in occurrences)


def test_days_of_week_skip_days_before_first_occurrence():
    pattern = RecurrencePattern(
        RecurrenceFrequency.WEEKLY,
        interval=2,
        days_of_week=frozenset({Weekday.MONDAY, Weekday.FRIDAY}),
        end=EndCondition.after(3),
    )
    # First occurrence on a Wednesday; Monday of that week is already past.
    assert _dates(expand(datetime(2025, 1, 8, 9, 0), pattern)) == [
        date(2025, 1, 8),
        date(2025, 1, 10),
        date(2025, 1, 20),
    ]


def test_custom_frequency_steps_in_weeks():
    pattern = RecurrencePattern(RecurrenceFrequency.CUSTOM, interval=3, end=EndCondition.after(3))
    assert _dates(expand(datetime(2025, 1, 6, 9, 0), pattern)) == [
        date(2025, 1, 6),
        date(2025, 1, 27),
        date(2025, 2, 17),
    ]


def test_occurrences_are_restartable():
    occurrences = expand(datetime(2025, 1, 6, 9, 0), RecurrencePattern(RecurrenceFrequency.DAILY))
    assert list(occurrences) == list(occurrences)


def test_end_date_before_first_is_rejected():
    pattern = RecurrencePattern(RecurrenceFrequency.DAILY, end=EndCondition.until(date(2025, 1, 1)))
    with pytest.raises(ValueError):
        expand(datetime(2025, 1, 6, 9, 0), pattern)


@pytest.mark.parametrize("count", [0, ABSOLUTE_LIMIT + 1])
def test_after_count_must_be_in_range(count):
    with pytest.raises(ValueError):
        EndCondition.after(count)


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        RecurrencePattern(RecurrenceFrequency.WEEKLY, interval=0)
