"""Grade API endpoints."""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from iep.database import get_db
from iep.models.grade import GradeType
from iep.models.user import Role
from iep.schemas.common import APIResponse, PaginationMeta
from iep.schemas.grade import (
    ClassGradeStatisticsResponse,
    GradeBulkCreate,
    GradeCalculationResponse,
    GradeCreate,
    GradeResponse,
    GradeUpdate,
    StudentReportResponse,
)
from iep.services.grade_service import get_grade_service
from iep.utils.permissions import require_role

router = APIRouter()


@router.get("", response_model=APIResponse[list[GradeResponse]])
@require_role(Role.ADMIN, Role.TEACHER)
async def list_grades(
    student_id: uuid.UUID | None = Query(None),
    class_id: uuid.UUID | None = Query(None),
    subject: str | None = Query(None),
    grade_type: GradeType | None = Query(None),
    semester: int | None = Query(None, ge=1, le=2),
    academic_year: str | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    grades, total = await get_grade_service().get_grades(
        db,
        student_id=student_id,
        class_id=class_id,
        subject=subject,
        grade_type=grade_type.value if grade_type else None,
        semester=semester,
        academic_year=academic_year,
        page=page,
        page_size=page_size,
    )
    return APIResponse(
        data=[GradeResponse.model_validate(g) for g in grades],
        pagination=PaginationMeta.build(page, page_size, total),
    )


@router.post("", response_model=APIResponse[GradeResponse], status_code=201)
@require_role(Role.ADMIN, Role.TEACHER)
async def create_grade(
    data: GradeCreate,
    db: AsyncSession = Depends(get_db),
):
    grade = await get_grade_service().create_grade(db, data)
    await db.commit()
    return APIResponse(data=GradeResponse.model_validate(grade), message="Grade recorded")


@router.post("/bulk", response_model=APIResponse[list[GradeResponse]], status_code=201)
@require_role(Role.ADMIN, Role.TEACHER)
async def bulk_create_grades(
    data: GradeBulkCreate,
    db: AsyncSession = Depends(get_db),
):
    """Record many grades at once. Either all are saved or none."""
    grades = await get_grade_service().bulk_create(db, data.grades)
    await db.commit()
    return APIResponse(
        data=[GradeResponse.model_validate(g) for g in grades],
        message=f"{len(grades)} grades recorded",
    )


@router.get("/calculations", response_model=GradeCalculationResponse)
@require_role(Role.ADMIN, Role.TEACHER)
async def calculate_grades(
    student_id: uuid.UUID = Query(...),
    subject: str = Query(...),
    semester: int | None = Query(None, ge=1, le=2),
    academic_year: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Weighted average, letter grade and GPA for a student in a subject."""
    result = await get_grade_service().calculate(
        db, student_id, subject, semester=semester, academic_year=academic_year
    )
    return GradeCalculationResponse(**result)


@router.get("/analytics", response_model=ClassGradeStatisticsResponse)
@require_role(Role.ADMIN, Role.TEACHER)
async def get_grade_analytics(
    class_id: uuid.UUID | None = Query(None),
    subject: str | None = Query(None),
    semester: int | None = Query(None, ge=1, le=2),
    academic_year: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    result = await get_grade_service().class_analytics(
        db, class_id=class_id, subject=subject, semester=semester, academic_year=academic_year
    )
    return ClassGradeStatisticsResponse(**result)


@router.get("/student/{student_id}/report", response_model=StudentReportResponse)
@require_role(Role.ADMIN, Role.TEACHER)
async def get_student_report(
    student_id: uuid.UUID,
    semester: int | None = Query(None, ge=1, le=2),
    academic_year: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    result = await get_grade_service().student_report(
        db, student_id, semester=semester, academic_year=academic_year
    )
    return StudentReportResponse(**result)


@router.get("/{grade_id}", response_model=APIResponse[GradeResponse])
@require_role(Role.ADMIN, Role.TEACHER)
async def get_grade(
    grade_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    grade = await get_grade_service().get(db, grade_id)
    return APIResponse(data=GradeResponse.model_validate(grade))


@router.put("/{grade_id}", response_model=APIResponse[GradeResponse])
@require_role(Role.ADMIN, Role.TEACHER)
async def update_grade(
    grade_id: uuid.UUID,
    data: GradeUpdate,
    db: AsyncSession = Depends(get_db),
):
    grade = await get_grade_service().update_grade(db, grade_id, data)
    await db.commit()
    return APIResponse(data=GradeResponse.model_validate(grade), message="Grade updated")


@router.delete("/{grade_id}", response_model=APIResponse[None])
@require_role(Role.ADMIN, Role.TEACHER)
async def delete_grade(
    grade_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    await get_grade_service().delete_grade(db, grade_id)
    await db.commit()
    return APIResponse(message="Grade deleted")
