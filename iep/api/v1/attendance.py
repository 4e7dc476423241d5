"""Attendance API endpoints."""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from iep.database import get_db
from iep.models.attendance import AttendanceStatus
from iep.models.user import Role
from iep.schemas.attendance import (
    AttendanceMark,
    AttendanceRecordResponse,
    AttendanceStatisticsResponse,
    AttendanceUpdate,
    BulkAttendanceCreate,
    BulkAttendanceResponse,
    ClassDailySummaryResponse,
)
from iep.schemas.common import APIResponse, PaginationMeta
from iep.services.attendance_service import get_attendance_service
from iep.utils.permissions import require_role

router = APIRouter()


@router.get("", response_model=APIResponse[list[AttendanceRecordResponse]])
@require_role(Role.ADMIN, Role.TEACHER)
async def list_attendance(
    class_id: uuid.UUID | None = Query(None, description="Filter by class ID"),
    student_id: uuid.UUID | None = Query(None, description="Filter by student ID"),
    status: AttendanceStatus | None = Query(None, description="Filter by status"),
    date_from: date | None = Query(None, description="Start date"),
    date_to: date | None = Query(None, description="End date"),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
):
    records, total = await get_attendance_service().get_attendance_records(
        db,
        class_id=class_id,
        student_id=student_id,
        status=status.value if status else None,
        date_from=date_from,
        date_to=date_to,
        page=page,
        page_size=page_size,
    )
    return APIResponse(
        data=[AttendanceRecordResponse.model_validate(r) for r in records],
        pagination=PaginationMeta.build(page, page_size, total),
    )


@router.post("", response_model=APIResponse[AttendanceRecordResponse], status_code=201)
@require_role(Role.ADMIN, Role.TEACHER)
async def mark_attendance(
    data: AttendanceMark,
    db: AsyncSession = Depends(get_db),
):
    """Mark one student's attendance; an existing mark for the day is overwritten."""
    record = await get_attendance_service().mark_attendance(db, data)
    await db.commit()
    return APIResponse(
        data=AttendanceRecordResponse.model_validate(record),
        message="Attendance recorded",
    )


@router.post("/bulk", response_model=APIResponse[BulkAttendanceResponse])
@require_role(Role.ADMIN, Role.TEACHER)
async def record_bulk_attendance(
    data: BulkAttendanceCreate,
    db: AsyncSession = Depends(get_db),
):
    result = await get_attendance_service().record_bulk_attendance(db, data)
    await db.commit()
    return APIResponse(
        data=result,
        message=f"Recorded {result.success_count} of {len(data.records)} attendance records",
    )


@router.get("/statistics", response_model=AttendanceStatisticsResponse)
@require_role(Role.ADMIN, Role.TEACHER)
async def get_attendance_statistics(
    class_id: uuid.UUID | None = Query(None),
    student_id: uuid.UUID | None = Query(None),
    date_from: date | None = Query(None, description="Defaults to the first of this month"),
    date_to: date | None = Query(None, description="Defaults to today"),
    db: AsyncSession = Depends(get_db),
):
    stats = await get_attendance_service().get_statistics(
        db, class_id=class_id, student_id=student_id, date_from=date_from, date_to=date_to
    )
    return AttendanceStatisticsResponse(**stats)


@router.get("/classes/{class_id}/summary", response_model=ClassDailySummaryResponse)
@require_role(Role.ADMIN, Role.TEACHER)
async def get_class_summary(
    class_id: uuid.UUID,
    day: date | None = Query(None, alias="date", description="Defaults to today"),
    db: AsyncSession = Depends(get_db),
):
    summary = await get_attendance_service().get_class_summary(db, class_id, day or date.today())
    return ClassDailySummaryResponse(**summary)


@router.get("/absent-for-notification", response_model=APIResponse[list[AttendanceRecordResponse]])
@require_role(Role.ADMIN, Role.TEACHER)
async def list_unnotified_absences(
    day: date | None = Query(None, alias="date"),
    db: AsyncSession = Depends(get_db),
):
    """Absences whose parents have not been notified yet."""
    records = await get_attendance_service().get_absent_for_notification(db, day or date.today())
    return APIResponse(data=[AttendanceRecordResponse.model_validate(r) for r in records])


@router.get("/{record_id}", response_model=APIResponse[AttendanceRecordResponse])
@require_role(Role.ADMIN, Role.TEACHER)
async def get_attendance(
    record_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    record = await get_attendance_service().get(db, record_id)
    return APIResponse(data=AttendanceRecordResponse.model_validate(record))


@router.put("/{record_id}", response_model=APIResponse[AttendanceRecordResponse])
@require_role(Role.ADMIN, Role.TEACHER)
async def update_attendance(
    record_id: uuid.UUID,
    data: AttendanceUpdate,
    db: AsyncSession = Depends(get_db),
):
    record = await get_attendance_service().update_attendance(db, record_id, data)
    await db.commit()
    return APIResponse(
        data=AttendanceRecordResponse.model_validate(record),
        message="Attendance updated",
    )


@router.post("/{record_id}/notified", response_model=APIResponse[AttendanceRecordResponse])
@require_role(Role.ADMIN, Role.TEACHER)
async def mark_parent_notified(
    record_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    record = await get_attendance_service().mark_parent_notified(db, record_id)
    await db.commit()
    return APIResponse(data=AttendanceRecordResponse.model_validate(record))


@router.delete("/{record_id}", response_model=APIResponse[None])
@require_role(Role.ADMIN)
async def delete_attendance(
    record_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    await get_attendance_service().remove(db, record_id)
    await db.commit()
    return APIResponse(message="Attendance record deleted")
