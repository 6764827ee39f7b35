"""Storage collaborators for a practitioner's appointment collection."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from scheduler.core.exceptions import StorageUnavailableError
from scheduler.modules.appointments.models import Appointment

logger = logging.getLogger(__name__)


class AppointmentStore(Protocol):
    """Load-all, upsert-one and upsert-batch; each call succeeds or fails as a whole."""

    practitioner_id: str

    async def load_appointments(self) -> list[Appointment]: ...

    async def save_appointment(self, appointment: Appointment) -> Appointment: ...

    async def save_batch(self, appointments: Sequence[Appointment]) -> list[Appointment]: ...


class InMemoryAppointmentStore:
    """Process-local store; a batch becomes visible to readers in a single step."""

    def __init__(self, practitioner_id: str, appointments: Iterable[Appointment] = ()):
        self.practitioner_id = practitioner_id
        self._items: dict[str, Appointment] = {item.appointment_id: item for item in appointments}

    async def load_appointments(self) -> list[Appointment]:
        return sorted(self._items.values(), key=lambda item: item.start_time)

    async def save_appointment(self, appointment: Appointment) -> Appointment:
        self._items[appointment.appointment_id] = appointment
        return appointment

    async def save_batch(self, appointments: Sequence[Appointment]) -> list[Appointment]:
        self._items.update({item.appointment_id: item for item in appointments})
        return list(appointments)


class SqlAlchemyAppointmentStore:
    def __init__(self, db: AsyncSession, practitioner_id: str):
        self.db = db
        self.practitioner_id = practitioner_id

    async def load_appointments(self) -> list[Appointment]:
        stmt = (
            select(Appointment)
            .where(Appointment.practitioner_id == self.practitioner_id)
            .order_by(Appointment.start_time)
        )
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as exc:
            logger.exception("Loading appointments for practitioner %s failed", self.practitioner_id)
            raise StorageUnavailableError() from exc
        return list(result.scalars().all())

    async def save_appointment(self, appointment: Appointment) -> Appointment:
        saved = await self.save_batch([appointment])
        return saved[0]

    async def save_batch(self, appointments: Sequence[Appointment]) -> list[Appointment]:
        try:
            self.db.add_all(appointments)
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            logger.exception(
                "Saving %d appointment(s) for practitioner %s failed", len(appointments), self.practitioner_id
            )
            raise StorageUnavailableError() from exc
        return list(appointments)
