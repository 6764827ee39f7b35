"""Availability profile ORM models."""

from __future__ import annotations

from datetime import date, time
from typing import TYPE_CHECKING

from sqlalchemy import JSON, CheckConstraint, Date, Enum, Integer, String, Time, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scheduler.core.database import Base
from scheduler.shared.enums import TimeOffCategory, Weekday, enum_values
from scheduler.shared.models import PractitionerOwnedMixin, TimestampMixin, ulid_primary_key

WEEKDAY_VALUES = ", ".join(f"'{value}'" for value in enum_values(Weekday))

if TYPE_CHECKING:  # pragma: no cover
    from scheduler.modules.practitioners.models import Practitioner


class WorkingHour(Base, PractitionerOwnedMixin, TimestampMixin):
    __tablename__ = "working_hours"
    __table_args__ = (
        UniqueConstraint("practitioner_id", "day_of_week", name="uq_working_hours_day"),
        CheckConstraint(
            f"day_of_week IN ({WEEKDAY_VALUES})",
            name="ck_working_hours_weekday",
        ),
        CheckConstraint("end_time > start_time", name="ck_working_hours_order"),
    )

    rule_id: Mapped[str] = ulid_primary_key()
    day_of_week: Mapped[str] = mapped_column(String(16), nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)

    practitioner: Mapped["Practitioner"] = relationship(back_populates="working_hours")


class BreakRule(Base, PractitionerOwnedMixin, TimestampMixin):
    __tablename__ = "break_rules"
    __table_args__ = (CheckConstraint("duration_minutes > 0", name="ck_break_rules_duration_positive"),)

    break_id: Mapped[str] = ulid_primary_key()
    # Stored as a list of Weekday values.
    days_of_week: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str | None] = mapped_column(String(255))

    practitioner: Mapped["Practitioner"] = relationship(back_populates="breaks")


class TimeOffPeriod(Base, PractitionerOwnedMixin, TimestampMixin):
    __tablename__ = "time_off"
    __table_args__ = (CheckConstraint("end_date >= start_date", name="ck_time_off_order"),)

    time_off_id: Mapped[str] = ulid_primary_key()
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    category: Mapped[TimeOffCategory] = mapped_column(
        Enum(
            TimeOffCategory,
            values_callable=enum_values,
            validate_strings=True,
            name="timeoffcategory",
        ),
        nullable=False,
        default=TimeOffCategory.VACATION,
    )
    reason: Mapped[str | None] = mapped_column(String(255))

    practitioner: Mapped["Practitioner"] = relationship(back_populates="time_off")
