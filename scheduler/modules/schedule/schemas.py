"""Schedule schemas."""

from datetime import date, datetime, time

from pydantic import BaseModel, ConfigDict, Field, model_validator

from scheduler.core.config import settings
from scheduler.shared.enums import ConflictReason, TimeOffCategory, Weekday


class AvailabilitySlot(BaseModel):
    start: datetime
    end: datetime


class AvailabilityCheck(BaseModel):
    start: datetime
    duration_minutes: int
    available: bool
    reason: ConflictReason | None = None


class WorkingHourIn(BaseModel):
    day_of_week: Weekday
    start_time: time
    end_time: time

    @model_validator(mode="after")
    def validate_order(self) -> "WorkingHourIn":
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


class WorkingHourPublic(WorkingHourIn):
    model_config = ConfigDict(from_attributes=True)

    rule_id: str = Field(serialization_alias="id")


class BreakIn(BaseModel):
    days_of_week: list[Weekday] = Field(..., min_length=1)
    start_time: time
    duration_minutes: int = Field(..., gt=0)
    description: str | None = None


class BreakPublic(BreakIn):
    model_config = ConfigDict(from_attributes=True)

    break_id: str = Field(serialization_alias="id")


class TimeOffIn(BaseModel):
    start_date: date
    end_date: date
    category: TimeOffCategory = TimeOffCategory.VACATION
    reason: str | None = None

    @model_validator(mode="after")
    def validate_range(self) -> "TimeOffIn":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class TimeOffPublic(TimeOffIn):
    model_config = ConfigDict(from_attributes=True)

    time_off_id: str = Field(serialization_alias="id")


class AvailabilityProfileUpdate(BaseModel):
    buffer_minutes: int = Field(default_factory=lambda: settings.default_buffer_minutes, ge=0)
    working_hours: list[WorkingHourIn] = Field(default_factory=list)
    breaks: list[BreakIn] = Field(default_factory=list)
    time_off: list[TimeOffIn] = Field(default_factory=list)

    @model_validator(mode="after")
    def ensure_single_rule_per_day(self) -> "AvailabilityProfileUpdate":
        days = [item.day_of_week for item in self.working_hours]
        if len(days) != len(set(days)):
            raise ValueError("Each weekday may only have one working-hours entry")
        return self


class AvailabilityProfilePublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    practitioner_id: str
    buffer_minutes: int
    working_hours: list[WorkingHourPublic]
    breaks: list[BreakPublic]
    time_off: list[TimeOffPublic]
