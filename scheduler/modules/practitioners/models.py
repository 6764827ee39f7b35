"""Practitioner ORM model."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scheduler.core.database import Base
from scheduler.shared.models import TimestampMixin, ulid_primary_key

if TYPE_CHECKING:  # pragma: no cover - typing only
    from scheduler.modules.appointments.models import Appointment
    from scheduler.modules.schedule.models import BreakRule, TimeOffPeriod, WorkingHour


class Practitioner(Base, TimestampMixin):
    __tablename__ = "practitioners"
    __table_args__ = (CheckConstraint("buffer_minutes >= 0", name="ck_practitioners_buffer_non_negative"),)

    practitioner_id: Mapped[str] = ulid_primary_key()
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    buffer_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    working_hours: Mapped[list[WorkingHour]] = relationship(
        back_populates="practitioner", cascade="all,delete-orphan"
    )
    breaks: Mapped[list[BreakRule]] = relationship(back_populates="practitioner", cascade="all,delete-orphan")
    time_off: Mapped[list[TimeOffPeriod]] = relationship(
        back_populates="practitioner", cascade="all,delete-orphan"
    )
    appointments: Mapped[list[Appointment]] = relationship(back_populates="practitioner")
