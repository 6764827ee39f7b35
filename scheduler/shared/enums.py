"""Shared enumerations used across modules."""

from __future__ import annotations

from datetime import date
from enum import StrEnum
from typing import Iterable, TypeVar

EnumType = TypeVar("EnumType", bound=StrEnum)


def enum_values(enum_cls: Iterable[EnumType]) -> list[str]:
    """Return the .value for each enum member (used by SQLAlchemy)."""
    return [member.value for member in enum_cls]


class AppointmentStatus(StrEnum):
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"
    RESCHEDULED = "rescheduled"

    @property
    def occupies_calendar(self) -> bool:
        """Cancelled, no-show and rescheduled appointments free their slot."""
        return self not in {AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW, AppointmentStatus.RESCHEDULED}


class Weekday(StrEnum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def from_index(cls, index: int) -> "Weekday":
        members = list(cls)
        if not 0 <= index < len(members):
            msg = f"weekday index {index} out of range"
            raise ValueError(msg)
        return members[index]

    @classmethod
    def from_date(cls, value: date) -> "Weekday":
        return cls.from_index(value.weekday())

    @property
    def index(self) -> int:
        return list(Weekday).index(self)


class TimeOffCategory(StrEnum):
    VACATION = "vacation"
    SICK = "sick"
    CONFERENCE = "conference"
    HOLIDAY = "holiday"
    PERSONAL = "personal"
    OTHER = "other"


class RecurrenceFrequency(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


class RecurrenceEndKind(StrEnum):
    NEVER = "never"
    ON_DATE = "on_date"
    AFTER_COUNT = "after_count"


class ConflictReason(StrEnum):
    OUTSIDE_WORKING_HOURS = "outside_working_hours"
    WITHIN_BREAK = "within_break"
    WITHIN_TIME_OFF = "within_time_off"
    OVERLAPS_APPOINTMENT = "overlaps_appointment"


class Transition(StrEnum):
    CONFIRM = "confirm"
    CHECK_IN = "check_in"
    START = "start"
    COMPLETE = "complete"
    MARK_NO_SHOW = "mark_no_show"
    CANCEL = "cancel"
    RESCHEDULE = "reschedule"
