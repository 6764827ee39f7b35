"""Time-of-day and interval value types shared by the scheduling engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta


def minutes(value: int) -> timedelta:
    return timedelta(minutes=value)


@dataclass(frozen=True, order=True)
class TimeOfDay:
    hour: int
    minute: int = 0

    def __post_init__(self) -> None:
        if not (0 <= self.hour <= 23 and 0 <= self.minute <= 59):
            raise ValueError(f"invalid time of day {self.hour:02d}:{self.minute:02d}")

    @classmethod
    def from_time(cls, value: time) -> TimeOfDay:
        return cls(value.hour, value.minute)

    @classmethod
    def parse(cls, value: str) -> TimeOfDay:
        hour, _, minute = value.partition(":")
        return cls(int(hour), int(minute or 0))

    @property
    def minutes_since_midnight(self) -> int:
        return self.hour * 60 + self.minute

    def on(self, day: date) -> datetime:
        return datetime.combine(day, time(self.hour, self.minute))

    def __str__(self) -> str:
        return f"{self.hour:02d}:{self.minute:02d}"


@dataclass(frozen=True)
class Interval:
    """Closed-open span ``[start, end)``."""

    start: datetime
    end: datetime

    @classmethod
    def of(cls, start: datetime, duration_minutes: int) -> Interval:
        return cls(start, start + minutes(duration_minutes))

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

    def padded(self, padding_minutes: int) -> Interval:
        pad = minutes(padding_minutes)
        return Interval(self.start - pad, self.end + pad)

    def overlaps(self, other: Interval, padding_minutes: int = 0) -> bool:
        """True when ``[start - pad, end + pad)`` intersects ``other``."""
        padded = self.padded(padding_minutes)
        return padded.start < other.end and other.start < padded.end

    def contains_instant(self, instant: datetime, *, closed: bool = False) -> bool:
        if closed:
            return self.start <= instant <= self.end
        return self.start <= instant < self.end

    def within(self, other: Interval) -> bool:
        return other.start <= self.start and self.end <= other.end
