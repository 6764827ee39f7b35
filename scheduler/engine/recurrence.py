"""Expansion of recurrence patterns into concrete occurrence start times."""

from __future__ import annotations

import calendar
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from itertools import count

from scheduler.shared.enums import RecurrenceEndKind, RecurrenceFrequency, Weekday

OPEN_ENDED_LIMIT = 52
ABSOLUTE_LIMIT = 366


@dataclass(frozen=True)
class EndCondition:
    kind: RecurrenceEndKind = RecurrenceEndKind.NEVER
    on_date: date | None = None
    count: int | None = None

    def __post_init__(self) -> None:
        if self.kind == RecurrenceEndKind.ON_DATE and self.on_date is None:
            raise ValueError("on_date end condition requires a date")
        if self.kind == RecurrenceEndKind.AFTER_COUNT:
            if self.count is None or self.count < 1:
                raise ValueError("after_count end condition requires a count of at least 1")
            if self.count > ABSOLUTE_LIMIT:
                raise ValueError(f"after_count cannot exceed {ABSOLUTE_LIMIT} occurrences")

    @classmethod
    def never(cls) -> EndCondition:
        return cls()

    @classmethod
    def until(cls, value: date) -> EndCondition:
        return cls(RecurrenceEndKind.ON_DATE, on_date=value)

    @classmethod
    def after(cls, occurrences: int) -> EndCondition:
        return cls(RecurrenceEndKind.AFTER_COUNT, count=occurrences)

    @property
    def limit(self) -> int:
        if self.kind == RecurrenceEndKind.AFTER_COUNT:
            return self.count
        if self.kind == RecurrenceEndKind.NEVER:
            return OPEN_ENDED_LIMIT
        return ABSOLUTE_LIMIT


@dataclass(frozen=True)
class RecurrencePattern:
    frequency: RecurrenceFrequency
    interval: int = 1
    days_of_week: frozenset[Weekday] = field(default_factory=frozenset)
    end: EndCondition = field(default_factory=EndCondition)

    def __post_init__(self) -> None:
        if self.interval < 1:
            raise ValueError("recurrence interval must be a positive integer")

    @property
    def week_step(self) -> int:
        if self.frequency == RecurrenceFrequency.BIWEEKLY:
            return self.interval * 2
        return self.interval


def add_months(value: datetime, months: int) -> datetime:
    """Shift by whole months, clamping to the last day of a shorter month."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


class Occurrences:
    """Finite, lazily generated and restartable sequence of occurrence starts.

    Element zero is always ``first``. Every further element keeps the
    time-of-day of ``first`` and advances according to the pattern until the
    end condition (or the open-ended cap) is reached.
    """

    def __init__(self, first: datetime, pattern: RecurrencePattern):
        end_date = pattern.end.on_date
        if end_date is not None and end_date < first.date():
            raise ValueError("recurrence end date is before the first occurrence")
        self.first = first
        self.pattern = pattern
        if end_date is not None:
            if self._count_until(end_date) > ABSOLUTE_LIMIT:
                raise ValueError(
                    f"recurrence until {end_date.isoformat()} exceeds {ABSOLUTE_LIMIT} occurrences"
                )

    def __iter__(self) -> Iterator[datetime]:
        limit = self.pattern.end.limit
        end_date = self.pattern.end.on_date
        produced = 0
        for start in self._candidates():
            if produced >= limit:
                return
            if end_date is not None and start.date() > end_date:
                return
            yield start
            produced += 1

    def _count_until(self, end_date: date) -> int:
        # Candidates ascend, so counting stops one past the cap or at the end date.
        produced = 0
        for start in self._candidates():
            if start.date() > end_date or produced > ABSOLUTE_LIMIT:
                break
            produced += 1
        return produced

    def _candidates(self) -> Iterator[datetime]:
        first = self.first
        pattern = self.pattern
        yield first

        if pattern.frequency == RecurrenceFrequency.DAILY:
            for step in count(1):
                yield first + timedelta(days=step * pattern.interval)
        elif pattern.frequency == RecurrenceFrequency.MONTHLY:
            for step in count(1):
                yield add_months(first, step * pattern.interval)
        elif pattern.days_of_week:
            yield from self._weekday_candidates(sorted(pattern.days_of_week, key=lambda day: day.index))
        else:
            for step in count(1):
                yield first + timedelta(weeks=step * pattern.week_step)

    def _weekday_candidates(self, days: Iterable[Weekday]) -> Iterator[datetime]:
        days = list(days)
        week_start = self.first - timedelta(days=self.first.weekday())
        for step in count(0):
            anchor = week_start + timedelta(weeks=step * self.pattern.week_step)
            for day in days:
                candidate = anchor + timedelta(days=day.index)
                if candidate > self.first:
                    yield candidate


def expand(first: datetime, pattern: RecurrencePattern) -> Occurrences:
    return Occurrences(first, pattern)
