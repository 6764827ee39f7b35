"""Appointments schemas."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from scheduler.engine.recurrence import ABSOLUTE_LIMIT, EndCondition, RecurrencePattern
from scheduler.shared.enums import (
    AppointmentStatus,
    ConflictReason,
    RecurrenceEndKind,
    RecurrenceFrequency,
    Transition,
    Weekday,
)


class AppointmentPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    appointment_id: str = Field(serialization_alias="id")
    practitioner_id: str
    client_id: str
    service_type: str
    start_time: datetime
    end_time: datetime
    duration_minutes: int
    status: AppointmentStatus
    series_id: str | None = None
    is_detached: bool = False
    rescheduled_from_id: str | None = None
    cancellation_reason: str | None = None
    cancelled_at: datetime | None = None
    confirmed_at: datetime | None = None
    checked_in_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    client_showed_up: bool | None = None
    reminder_sent_at: datetime | None = None
    notes: str | None = None
    allowed_transitions: list[Transition] = Field(default_factory=list)


class AppointmentCreate(BaseModel):
    client_id: str = Field(..., min_length=1)
    start_time: datetime
    duration_minutes: int = Field(..., gt=0)
    service_type: str = Field(..., min_length=1)
    notes: str | None = None


class RecurrenceEnd(BaseModel):
    kind: RecurrenceEndKind = RecurrenceEndKind.NEVER
    on_date: date | None = None
    count: int | None = Field(None, ge=1, le=ABSOLUTE_LIMIT)

    @model_validator(mode="after")
    def validate_kind(self) -> "RecurrenceEnd":
        if self.kind == RecurrenceEndKind.ON_DATE and self.on_date is None:
            raise ValueError("on_date is required when kind is on_date")
        if self.kind == RecurrenceEndKind.AFTER_COUNT and self.count is None:
            raise ValueError("count is required when kind is after_count")
        return self


class RecurrencePatternIn(BaseModel):
    frequency: RecurrenceFrequency
    interval: int = Field(1, ge=1)
    days_of_week: list[Weekday] | None = None
    end: RecurrenceEnd = Field(default_factory=RecurrenceEnd)

    def to_pattern(self) -> RecurrencePattern:
        return RecurrencePattern(
            frequency=self.frequency,
            interval=self.interval,
            days_of_week=frozenset(self.days_of_week or ()),
            end=EndCondition(self.end.kind, on_date=self.end.on_date, count=self.end.count),
        )


class SeriesCreate(AppointmentCreate):
    pattern: RecurrencePatternIn


class SkippedOccurrencePublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    start_time: datetime
    reason: ConflictReason
    blocking_appointment_id: str | None = None


class SeriesResultPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    series_id: str
    created: list[AppointmentPublic]
    skipped: list[SkippedOccurrencePublic]


class CancelRequest(BaseModel):
    reason: str = Field(..., min_length=1)


class RescheduleRequest(BaseModel):
    start_time: datetime
    duration_minutes: int | None = Field(None, gt=0)


class CompleteRequest(BaseModel):
    no_show: bool = False


class AppointmentStatisticsPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int
    completed: int
    cancelled: int
    no_show: int
    upcoming: int
    completion_rate: float
    cancellation_rate: float
    no_show_rate: float
