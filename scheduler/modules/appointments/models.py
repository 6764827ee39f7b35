"""Appointment ORM model."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, DateTime, Enum, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scheduler.core.database import Base
from scheduler.engine.timeslots import Interval, minutes
from scheduler.engine.transitions import TRANSITIONS, can_apply
from scheduler.shared.enums import AppointmentStatus, Transition, enum_values
from scheduler.shared.models import PractitionerOwnedMixin, TimestampMixin, ulid_primary_key, ulid_reference

if TYPE_CHECKING:  # pragma: no cover
    from scheduler.modules.practitioners.models import Practitioner


class Appointment(Base, PractitionerOwnedMixin, TimestampMixin):
    __tablename__ = "appointments"
    __table_args__ = (
        Index("ix_appointments_practitioner_start", "practitioner_id", "start_time"),
        Index("ix_appointments_series", "series_id"),
        CheckConstraint("end_time > start_time", name="ck_appointments_time_order"),
        CheckConstraint("duration_minutes > 0", name="ck_appointments_duration_positive"),
    )

    appointment_id: Mapped[str] = ulid_primary_key()
    # Reference into the external client registry; not owned here.
    client_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    service_type: Mapped[str] = mapped_column(String(100), nullable=False)
    start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[AppointmentStatus] = mapped_column(
        Enum(
            AppointmentStatus,
            values_callable=enum_values,
            validate_strings=True,
            name="appointmentstatus",
        ),
        default=AppointmentStatus.SCHEDULED,
        nullable=False,
    )
    series_id: Mapped[str | None] = ulid_reference()
    is_detached: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    rescheduled_from_id: Mapped[str | None] = ulid_reference()

    cancellation_reason: Mapped[str | None] = mapped_column(Text)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime)
    confirmed_at: Mapped[datetime | None] = mapped_column(DateTime)
    checked_in_at: Mapped[datetime | None] = mapped_column(DateTime)
    started_at: Mapped[datetime | None] = mapped_column(DateTime)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime)
    client_showed_up: Mapped[bool | None] = mapped_column(Boolean)
    reminder_sent_at: Mapped[datetime | None] = mapped_column(DateTime)
    notes: Mapped[str | None] = mapped_column(Text)

    practitioner: Mapped[Practitioner] = relationship(back_populates="appointments")

    def place(self, start: datetime, duration_minutes: int) -> None:
        self.start_time = start
        self.duration_minutes = duration_minutes
        self.end_time = start + minutes(duration_minutes)

    @property
    def interval(self) -> Interval:
        return Interval(self.start_time, self.end_time)

    @property
    def allowed_transitions(self) -> list[Transition]:
        return [transition for transition in TRANSITIONS if can_apply(self.status, transition)]
