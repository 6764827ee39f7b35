"""Loading and replacing a practitioner's availability profile."""

from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from scheduler.core.exceptions import PractitionerNotFoundError
from scheduler.engine.availability import AvailabilityProfile, BreakPeriod, TimeOff, WorkingHours
from scheduler.engine.timeslots import TimeOfDay
from scheduler.modules.practitioners.models import Practitioner
from scheduler.modules.schedule.models import BreakRule, TimeOffPeriod, WorkingHour
from scheduler.modules.schedule.schemas import AvailabilityProfileUpdate
from scheduler.shared.enums import Weekday

logger = logging.getLogger(__name__)


async def get_practitioner(db: AsyncSession, practitioner_id: str) -> Practitioner:
    stmt = (
        select(Practitioner)
        .options(
            selectinload(Practitioner.working_hours),
            selectinload(Practitioner.breaks),
            selectinload(Practitioner.time_off),
        )
        .where(Practitioner.practitioner_id == practitioner_id)
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    practitioner = result.scalar_one_or_none()
    if practitioner is None:
        raise PractitionerNotFoundError(practitioner_id)
    return practitioner


def build_profile(practitioner: Practitioner) -> AvailabilityProfile:
    weekly_hours = {
        Weekday(rule.day_of_week): WorkingHours(TimeOfDay.from_time(rule.start_time), TimeOfDay.from_time(rule.end_time))
        for rule in practitioner.working_hours
    }
    breaks = tuple(
        BreakPeriod(
            days=frozenset(Weekday(day) for day in rule.days_of_week),
            start=TimeOfDay.from_time(rule.start_time),
            duration_minutes=rule.duration_minutes,
            description=rule.description,
        )
        for rule in practitioner.breaks
    )
    time_off = tuple(
        TimeOff(start_date=period.start_date, end_date=period.end_date, category=period.category, reason=period.reason)
        for period in practitioner.time_off
    )
    return AvailabilityProfile(
        weekly_hours=weekly_hours,
        breaks=breaks,
        time_off=time_off,
        buffer_minutes=practitioner.buffer_minutes,
    )


async def load_profile(db: AsyncSession, practitioner_id: str) -> AvailabilityProfile:
    practitioner = await get_practitioner(db, practitioner_id)
    return build_profile(practitioner)


async def replace_profile(
    db: AsyncSession,
    practitioner_id: str,
    payload: AvailabilityProfileUpdate,
) -> Practitioner:
    """Swap the whole weekly table, breaks and time off in one transaction."""
    practitioner = await get_practitioner(db, practitioner_id)
    for model in (WorkingHour, BreakRule, TimeOffPeriod):
        await db.execute(delete(model).where(model.practitioner_id == practitioner_id))

    practitioner.buffer_minutes = payload.buffer_minutes
    db.add_all(
        WorkingHour(
            practitioner_id=practitioner_id,
            day_of_week=item.day_of_week.value,
            start_time=item.start_time,
            end_time=item.end_time,
        )
        for item in payload.working_hours
    )
    db.add_all(
        BreakRule(
            practitioner_id=practitioner_id,
            days_of_week=[day.value for day in item.days_of_week],
            start_time=item.start_time,
            duration_minutes=item.duration_minutes,
            description=item.description,
        )
        for item in payload.breaks
    )
    db.add_all(
        TimeOffPeriod(
            practitioner_id=practitioner_id,
            start_date=item.start_date,
            end_date=item.end_date,
            category=item.category,
            reason=item.reason,
        )
        for item in payload.time_off
    )
    await db.commit()
    logger.info(
        "Availability replaced for practitioner %s: %d working day(s), %d break(s), %d time-off period(s)",
        practitioner_id,
        len(payload.working_hours),
        len(payload.breaks),
        len(payload.time_off),
    )
    return await get_practitioner(db, practitioner_id)
