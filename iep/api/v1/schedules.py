"""Timetable API endpoints."""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from iep.database import get_db
from iep.models.user import Role
from iep.schemas.common import APIResponse
from iep.schemas.schedule import (
    ScheduleConflictResponse,
    ScheduleCreate,
    ScheduleResponse,
    ScheduleUpdate,
)
from iep.services.schedule_service import get_schedule_service
from iep.utils.permissions import require_role

router = APIRouter()


@router.get("", response_model=APIResponse[list[ScheduleResponse]])
@require_role(Role.ADMIN, Role.TEACHER)
async def list_schedules(
    class_id: uuid.UUID | None = Query(None),
    teacher_id: uuid.UUID | None = Query(None),
    day_of_week: int | None = Query(None, ge=0, le=6, description="0 is Monday"),
    db: AsyncSession = Depends(get_db),
):
    schedules = await get_schedule_service().get_schedules(
        db, class_id=class_id, teacher_id=teacher_id, day_of_week=day_of_week
    )
    return APIResponse(data=[ScheduleResponse.model_validate(s) for s in schedules])


@router.get("/conflicts", response_model=list[ScheduleConflictResponse])
@require_role(Role.ADMIN, Role.TEACHER)
async def list_conflicts(
    db: AsyncSession = Depends(get_db),
):
    """Every overlapping teacher, class or classroom booking in the timetable."""
    conflicts = await get_schedule_service().get_conflicts(db)
    return [ScheduleConflictResponse(**c) for c in conflicts]


@router.post("", response_model=APIResponse[ScheduleResponse], status_code=201)
@require_role(Role.ADMIN)
async def create_schedule(
    data: ScheduleCreate,
    db: AsyncSession = Depends(get_db),
):
    schedule = await get_schedule_service().create_schedule(db, data)
    await db.commit()
    return APIResponse(data=ScheduleResponse.model_validate(schedule), message="Schedule created")


@router.put("/{schedule_id}", response_model=APIResponse[ScheduleResponse])
@require_role(Role.ADMIN)
async def update_schedule(
    schedule_id: uuid.UUID,
    data: ScheduleUpdate,
    db: AsyncSession = Depends(get_db),
):
    schedule = await get_schedule_service().update_schedule(db, schedule_id, data)
    await db.commit()
    return APIResponse(data=ScheduleResponse.model_validate(schedule), message="Schedule updated")


@router.delete("/{schedule_id}", response_model=APIResponse[None])
@require_role(Role.ADMIN)
async def delete_schedule(
    schedule_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    await get_schedule_service().delete_schedule(db, schedule_id)
    await db.commit()
    return APIResponse(message="Schedule deleted")
