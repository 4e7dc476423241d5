"""School class API endpoints."""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from iep.database import get_db
from iep.models.user import Role
from iep.schemas.common import APIResponse, PaginationMeta
from iep.schemas.school_class import (
    AssignTeacherRequest,
    ClassStudentResponse,
    ClassTeacherResponse,
    EnrollStudentRequest,
    SchoolClassCreate,
    SchoolClassResponse,
    SchoolClassUpdate,
)
from iep.services.class_service import get_class_service
from iep.utils.permissions import require_role

router = APIRouter()


def _student_row(link) -> ClassStudentResponse:
    return ClassStudentResponse(
        student_id=link.student_id,
        first_name=link.student.first_name,
        last_name=link.student.last_name,
        enrolled_at=link.enrolled_at,
    )


def _teacher_row(link) -> ClassTeacherResponse:
    return ClassTeacherResponse(
        teacher_id=link.teacher_id,
        first_name=link.teacher.first_name,
        last_name=link.teacher.last_name,
        subject=link.teacher.subject,
        is_primary=link.is_primary,
    )


@router.get("", response_model=APIResponse[list[SchoolClassResponse]])
@require_role(Role.ADMIN, Role.TEACHER)
async def list_classes(
    is_active: bool | None = Query(True, description="Filter by active status"),
    grade: str | None = Query(None, description="Filter by grade"),
    search: str | None = Query(None, description="Search by class name"),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
    db: AsyncSession = Depends(get_db),
):
    """List classes. Teachers only see the classes they are assigned to."""
    classes, total = await get_class_service().get_classes(
        db, is_active=is_active, grade=grade, search=search, page=page, page_size=page_size
    )
    return APIResponse(
        data=[SchoolClassResponse.model_validate(c) for c in classes],
        pagination=PaginationMeta.build(page, page_size, total),
    )


@router.post("", response_model=APIResponse[SchoolClassResponse], status_code=201)
@require_role(Role.ADMIN)
async def create_class(
    data: SchoolClassCreate,
    db: AsyncSession = Depends(get_db),
):
    school_class = await get_class_service().create_class(db, data)
    await db.commit()
    return APIResponse(
        data=SchoolClassResponse.model_validate(school_class),
        message="Class created successfully",
    )


@router.get("/{class_id}", response_model=APIResponse[SchoolClassResponse])
@require_role(Role.ADMIN, Role.TEACHER)
async def get_class(
    class_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    school_class = await get_class_service().get(db, class_id)
    return APIResponse(data=SchoolClassResponse.model_validate(school_class))


@router.put("/{class_id}", response_model=APIResponse[SchoolClassResponse])
@require_role(Role.ADMIN)
async def update_class(
    class_id: uuid.UUID,
    data: SchoolClassUpdate,
    db: AsyncSession = Depends(get_db),
):
    school_class = await get_class_service().update_class(db, class_id, data)
    await db.commit()
    return APIResponse(
        data=SchoolClassResponse.model_validate(school_class),
        message="Class updated successfully",
    )


@router.delete("/{class_id}", response_model=APIResponse[None])
@require_role(Role.ADMIN)
async def delete_class(
    class_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    await get_class_service().remove(db, class_id)
    await db.commit()
    return APIResponse(message="Class deleted successfully")


# Membership endpoints

@router.get("/{class_id}/students", response_model=APIResponse[list[ClassStudentResponse]])
@require_role(Role.ADMIN, Role.TEACHER)
async def list_class_students(
    class_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    links = await get_class_service().get_class_students(db, class_id)
    return APIResponse(data=[_student_row(link) for link in links])


@router.post("/{class_id}/students", response_model=APIResponse[ClassStudentResponse], status_code=201)
@require_role(Role.ADMIN)
async def enroll_student(
    class_id: uuid.UUID,
    data: EnrollStudentRequest,
    db: AsyncSession = Depends(get_db),
):
    link = await get_class_service().enroll_student(db, class_id, data.student_id)
    await db.commit()
    return APIResponse(data=_student_row(link), message="Student enrolled successfully")


@router.delete("/{class_id}/students/{student_id}", response_model=APIResponse[None])
@require_role(Role.ADMIN)
async def remove_student(
    class_id: uuid.UUID,
    student_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    await get_class_service().remove_student(db, class_id, student_id)
    await db.commit()
    return APIResponse(message="Student removed from class")


@router.get("/{class_id}/teachers", response_model=APIResponse[list[ClassTeacherResponse]])
@require_role(Role.ADMIN, Role.TEACHER)
async def list_class_teachers(
    class_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    links = await get_class_service().get_class_teachers(db, class_id)
    return APIResponse(data=[_teacher_row(link) for link in links])


@router.post("/{class_id}/teachers", response_model=APIResponse[ClassTeacherResponse], status_code=201)
@require_role(Role.ADMIN)
async def assign_teacher(
    class_id: uuid.UUID,
    data: AssignTeacherRequest,
    db: AsyncSession = Depends(get_db),
):
    """Assign a teacher. Marking them primary demotes the previous primary."""
    link = await get_class_service().assign_teacher(db, class_id, data)
    await db.commit()
    return APIResponse(data=_teacher_row(link), message="Teacher assigned successfully")


@router.delete("/{class_id}/teachers/{teacher_id}", response_model=APIResponse[None])
@require_role(Role.ADMIN)
async def remove_teacher(
    class_id: uuid.UUID,
    teacher_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    await get_class_service().remove_teacher(db, class_id, teacher_id)
    await db.commit()
    return APIResponse(message="Teacher removed from class")
