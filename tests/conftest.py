from pathlib import Path
import sys

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from scheduler.core.database import Base, build_engine, import_models  # noqa: E402
from scheduler.engine.availability import AvailabilityProfile  # noqa: E402
from scheduler.engine.timeslots import TimeOfDay  # noqa: E402
from scheduler.modules.appointments.repository import InMemoryAppointmentStore  # noqa: E402
from scheduler.modules.appointments.service import SchedulingService  # noqa: E402
from scheduler.shared.models import generate_ulid  # noqa: E402

import_models()


@pytest_asyncio.fixture
async def db_session():
    engine = build_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    SessionLocal = async_sessionmaker(engine, expire_on_commit=False)
    async with SessionLocal() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def weekday_profile() -> AvailabilityProfile:
    """Mon-Fri 09:00-17:00, no breaks, 15 minute buffer."""
    return AvailabilityProfile.weekdays(TimeOfDay(9), TimeOfDay(17), buffer_minutes=15)


@pytest.fixture
def scheduling(weekday_profile) -> SchedulingService:
    practitioner_id = generate_ulid()
    return SchedulingService(practitioner_id, weekday_profile, InMemoryAppointmentStore(practitioner_id))
