"""Practitioner routes."""

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from scheduler.core.database import get_db
from scheduler.modules.practitioners.models import Practitioner
from scheduler.modules.practitioners.schemas import PractitionerCreate, PractitionerPublic, PractitionerUpdate
from scheduler.modules.schedule.service import get_practitioner

router = APIRouter(prefix="/api/v1/practitioners", tags=["practitioners"])


@router.post("", response_model=PractitionerPublic, status_code=status.HTTP_201_CREATED)
async def create_practitioner(payload: PractitionerCreate, db: AsyncSession = Depends(get_db)) -> Practitioner:
    practitioner = Practitioner(**payload.model_dump())
    db.add(practitioner)
    await db.commit()
    await db.refresh(practitioner)
    return practitioner


@router.get("", response_model=list[PractitionerPublic])
async def list_practitioners(db: AsyncSession = Depends(get_db)) -> list[Practitioner]:
    result = await db.execute(
        select(Practitioner).where(Practitioner.is_active.is_(True)).order_by(Practitioner.display_name)
    )
    return list(result.scalars().all())


@router.get("/{practitioner_id}", response_model=PractitionerPublic)
async def read_practitioner(practitioner_id: str, db: AsyncSession = Depends(get_db)) -> Practitioner:
    return await get_practitioner(db, practitioner_id)


@router.patch("/{practitioner_id}", response_model=PractitionerPublic)
async def update_practitioner(
    practitioner_id: str,
    payload: PractitionerUpdate,
    db: AsyncSession = Depends(get_db),
) -> Practitioner:
    practitioner = await get_practitioner(db, practitioner_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(practitioner, field, value)
    await db.commit()
    await db.refresh(practitioner)
    return practitioner
