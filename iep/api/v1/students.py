"""Student API endpoints."""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from iep.database import get_db
from iep.models.user import Role
from iep.schemas.common import APIResponse, PaginationMeta
from iep.schemas.student import StudentCreate, StudentResponse, StudentUpdate
from iep.services.student_service import get_student_service
from iep.utils.permissions import require_role

router = APIRouter()


@router.get("", response_model=APIResponse[list[StudentResponse]])
@require_role(Role.ADMIN, Role.TEACHER)
async def list_students(
    class_id: uuid.UUID | None = Query(None, description="Filter by class ID"),
    is_active: bool | None = Query(True, description="Filter by active status"),
    search: str | None = Query(None, description="Search by name or student number"),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
    db: AsyncSession = Depends(get_db),
):
    """List students with optional filters.

    Teachers only see students in their assigned classes.
    """
    students, total = await get_student_service().get_students(
        db,
        class_id=class_id,
        is_active=is_active,
        search=search,
        page=page,
        page_size=page_size,
    )
    return APIResponse(
        data=[StudentResponse.model_validate(s) for s in students],
        pagination=PaginationMeta.build(page, page_size, total),
    )


@router.post("", response_model=APIResponse[StudentResponse], status_code=201)
@require_role(Role.ADMIN, Role.TEACHER)
async def create_student(
    data: StudentCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create a new student, optionally enrolling them in a class."""
    student = await get_student_service().create_student(db, data)
    await db.commit()
    return APIResponse(
        data=StudentResponse.model_validate(student),
        message="Student created successfully",
    )


@router.get("/{student_id}", response_model=APIResponse[StudentResponse])
@require_role(Role.ADMIN, Role.TEACHER)
async def get_student(
    student_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    student = await get_student_service().get_student(db, student_id)
    return APIResponse(data=StudentResponse.model_validate(student))


@router.put("/{student_id}", response_model=APIResponse[StudentResponse])
@require_role(Role.ADMIN, Role.TEACHER)
async def update_student(
    student_id: uuid.UUID,
    data: StudentUpdate,
    db: AsyncSession = Depends(get_db),
):
    student = await get_student_service().update_student(db, student_id, data)
    await db.commit()
    return APIResponse(
        data=StudentResponse.model_validate(student),
        message="Student updated successfully",
    )


@router.delete("/{student_id}", response_model=APIResponse[None])
@require_role(Role.ADMIN)
async def delete_student(
    student_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Soft delete a student (school admin only)."""
    await get_student_service().delete_student(db, student_id)
    await db.commit()
    return APIResponse(message="Student deleted successfully")
