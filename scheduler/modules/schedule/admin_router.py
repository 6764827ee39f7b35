"""Admin availability-profile management routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from scheduler.core.database import get_db
from scheduler.modules.schedule.schemas import AvailabilityProfilePublic, AvailabilityProfileUpdate
from scheduler.modules.schedule.service import get_practitioner, replace_profile

router = APIRouter(prefix="/api/v1/admin/practitioners/{practitioner_id}", tags=["admin-schedule"])


@router.get("/availability", response_model=AvailabilityProfilePublic)
async def get_availability_profile(practitioner_id: str, db: AsyncSession = Depends(get_db)):
    return await get_practitioner(db, practitioner_id)


@router.put("/availability", response_model=AvailabilityProfilePublic)
async def update_availability_profile(
    practitioner_id: str,
    payload: AvailabilityProfileUpdate,
    db: AsyncSession = Depends(get_db),
):
    return await replace_profile(db, practitioner_id, payload)
