"""Practitioner availability: weekly hours, recurring breaks and time off."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from scheduler.engine.timeslots import Interval, TimeOfDay, minutes
from scheduler.shared.enums import ConflictReason, TimeOffCategory, Weekday

DEFAULT_SLOT_GRANULARITY_MINUTES = 15


@dataclass(frozen=True)
class WorkingHours:
    start: TimeOfDay
    end: TimeOfDay

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise ValueError("working hours must end after they start")

    def on(self, day: date) -> Interval:
        return Interval(self.start.on(day), self.end.on(day))


@dataclass(frozen=True)
class BreakPeriod:
    days: frozenset[Weekday]
    start: TimeOfDay
    duration_minutes: int
    description: str | None = None

    def __post_init__(self) -> None:
        if not self.days:
            raise ValueError("break must apply to at least one weekday")
        if self.duration_minutes <= 0:
            raise ValueError("break duration must be positive")

    def applies_to(self, day: date) -> bool:
        return Weekday.from_date(day) in self.days

    def on(self, day: date) -> Interval:
        return Interval.of(self.start.on(day), self.duration_minutes)

    def blocks(self, candidate: Interval) -> bool:
        # Both ends of the break window block a start instant.
        window = self.on(candidate.start.date())
        return candidate.overlaps(window) or window.contains_instant(candidate.start, closed=True)


@dataclass(frozen=True)
class TimeOff:
    start_date: date
    end_date: date
    category: TimeOffCategory = TimeOffCategory.VACATION
    reason: str | None = None

    def __post_init__(self) -> None:
        if self.end_date < self.start_date:
            raise ValueError("time off must end on or after its start date")

    def includes(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days + 1


@dataclass(frozen=True)
class AvailabilityProfile:
    """Read-only description of when a practitioner can be booked.

    ``weekly_hours`` omits the days the practitioner does not work. Overlapping
    time-off entries are allowed and behave as their union.
    """

    weekly_hours: dict[Weekday, WorkingHours] = field(default_factory=dict)
    breaks: tuple[BreakPeriod, ...] = ()
    time_off: tuple[TimeOff, ...] = ()
    buffer_minutes: int = 0

    def __post_init__(self) -> None:
        if self.buffer_minutes < 0:
            raise ValueError("buffer minutes cannot be negative")

    @classmethod
    def weekdays(
        cls,
        start: TimeOfDay,
        end: TimeOfDay,
        days: Iterable[Weekday] = (
            Weekday.MONDAY,
            Weekday.TUESDAY,
            Weekday.WEDNESDAY,
            Weekday.THURSDAY,
            Weekday.FRIDAY,
        ),
        **kwargs,
    ) -> AvailabilityProfile:
        hours = WorkingHours(start, end)
        return cls(weekly_hours={day: hours for day in days}, **kwargs)

    def hours_on(self, day: date) -> WorkingHours | None:
        return self.weekly_hours.get(Weekday.from_date(day))

    def is_time_off(self, day: date) -> bool:
        return any(period.includes(day) for period in self.time_off)

    def check(self, at: datetime, duration_minutes: int) -> ConflictReason | None:
        """Return the first rule that rejects the candidate, or None when bookable."""
        candidate = Interval.of(at, duration_minutes)
        day = at.date()

        hours = self.hours_on(day)
        if hours is None or not candidate.within(hours.on(day)):
            return ConflictReason.OUTSIDE_WORKING_HOURS

        for period in self.breaks:
            if period.applies_to(day) and period.blocks(candidate):
                return ConflictReason.WITHIN_BREAK

        if self.is_time_off(day):
            return ConflictReason.WITHIN_TIME_OFF
        return None

    def is_available(self, at: datetime, duration_minutes: int) -> bool:
        return self.check(at, duration_minutes) is None

    def candidate_starts(
        self,
        on_date: date,
        duration_minutes: int,
        granularity_minutes: int = DEFAULT_SLOT_GRANULARITY_MINUTES,
    ) -> Iterator[datetime]:
        """Yield every grid-aligned start whose interval fits inside working hours."""
        hours = self.hours_on(on_date)
        if hours is None:
            return
        window = hours.on(on_date)
        step: timedelta = minutes(granularity_minutes)
        cursor = window.start
        while cursor + minutes(duration_minutes) <= window.end:
            yield cursor
            cursor += step
