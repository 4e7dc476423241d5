"""Assignment and submission API endpoints."""

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from iep.database import get_db
from iep.models.assignment import AssignmentStatus, AssignmentType, SubmissionStatus
from iep.models.user import Role
from iep.schemas.assignment import (
    AssignmentCreate,
    AssignmentDetailStatisticsResponse,
    AssignmentResponse,
    AssignmentStatisticsResponse,
    AssignmentUpdate,
    SubmissionCreate,
    SubmissionGrade,
    SubmissionResponse,
)
from iep.schemas.common import APIResponse, PaginationMeta
from iep.services.assignment_service import get_assignment_service
from iep.utils.permissions import require_role

router = APIRouter()


@router.get("", response_model=APIResponse[list[AssignmentResponse]])
@require_role(Role.ADMIN, Role.TEACHER)
async def list_assignments(
    class_id: uuid.UUID | None = Query(None),
    teacher_id: uuid.UUID | None = Query(None),
    type: AssignmentType | None = Query(None, description="Filter by assignment type"),
    status: AssignmentStatus | None = Query(None),
    subject: str | None = Query(None),
    due_from: datetime | None = Query(None),
    due_to: datetime | None = Query(None),
    search: str | None = Query(None, description="Search title and description"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    assignments, total = await get_assignment_service().get_assignments(
        db,
        class_id=class_id,
        teacher_id=teacher_id,
        assignment_type=type.value if type else None,
        status=status.value if status else None,
        subject=subject,
        due_from=due_from,
        due_to=due_to,
        search=search,
        page=page,
        page_size=page_size,
    )
    return APIResponse(
        data=[AssignmentResponse.model_validate(a) for a in assignments],
        pagination=PaginationMeta.build(page, page_size, total),
    )


@router.get("/statistics", response_model=AssignmentStatisticsResponse)
@require_role(Role.ADMIN, Role.TEACHER)
async def get_assignment_statistics(
    db: AsyncSession = Depends(get_db),
):
    """Dashboard statistics over all visible assignments.

    Returned without the envelope, in camelCase.
    """
    stats = await get_assignment_service().get_statistics(db)
    return AssignmentStatisticsResponse(**stats)


@router.post("", response_model=APIResponse[AssignmentResponse], status_code=201)
@require_role(Role.ADMIN, Role.TEACHER)
async def create_assignment(
    data: AssignmentCreate,
    db: AsyncSession = Depends(get_db),
):
    assignment = await get_assignment_service().create_assignment(db, data)
    await db.commit()
    return APIResponse(
        data=AssignmentResponse.model_validate(assignment),
        message="Assignment created successfully",
    )


@router.post("/submissions/{submission_id}/grade", response_model=APIResponse[SubmissionResponse])
@require_role(Role.ADMIN, Role.TEACHER)
async def grade_submission(
    submission_id: uuid.UUID,
    data: SubmissionGrade,
    db: AsyncSession = Depends(get_db),
):
    submission = await get_assignment_service().grade_submission(db, submission_id, data)
    await db.commit()
    return APIResponse(
        data=SubmissionResponse.model_validate(submission),
        message="Submission graded successfully",
    )


@router.get("/{assignment_id}", response_model=APIResponse[AssignmentResponse])
@require_role(Role.ADMIN, Role.TEACHER)
async def get_assignment(
    assignment_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    assignment = await get_assignment_service().get(db, assignment_id)
    return APIResponse(data=AssignmentResponse.model_validate(assignment))


@router.put("/{assignment_id}", response_model=APIResponse[AssignmentResponse])
@require_role(Role.ADMIN, Role.TEACHER)
async def update_assignment(
    assignment_id: uuid.UUID,
    data: AssignmentUpdate,
    db: AsyncSession = Depends(get_db),
):
    assignment = await get_assignment_service().update_assignment(db, assignment_id, data)
    await db.commit()
    return APIResponse(
        data=AssignmentResponse.model_validate(assignment),
        message="Assignment updated successfully",
    )


@router.delete("/{assignment_id}", response_model=APIResponse[None])
@require_role(Role.ADMIN, Role.TEACHER)
async def delete_assignment(
    assignment_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    await get_assignment_service().delete_assignment(db, assignment_id)
    await db.commit()
    return APIResponse(message="Assignment deleted successfully")


@router.post("/{assignment_id}/publish", response_model=APIResponse[AssignmentResponse])
@require_role(Role.ADMIN, Role.TEACHER)
async def publish_assignment(
    assignment_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Open a draft assignment for submissions."""
    assignment = await get_assignment_service().publish_assignment(db, assignment_id)
    await db.commit()
    return APIResponse(
        data=AssignmentResponse.model_validate(assignment),
        message="Assignment published",
    )


@router.post("/{assignment_id}/archive", response_model=APIResponse[AssignmentResponse])
@require_role(Role.ADMIN, Role.TEACHER)
async def archive_assignment(
    assignment_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    assignment = await get_assignment_service().archive_assignment(db, assignment_id)
    await db.commit()
    return APIResponse(
        data=AssignmentResponse.model_validate(assignment),
        message="Assignment archived",
    )


@router.get("/{assignment_id}/statistics", response_model=AssignmentDetailStatisticsResponse)
@require_role(Role.ADMIN, Role.TEACHER)
async def get_single_assignment_statistics(
    assignment_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    stats = await get_assignment_service().get_assignment_statistics(db, assignment_id)
    return AssignmentDetailStatisticsResponse(**stats)


@router.get("/{assignment_id}/submissions", response_model=APIResponse[list[SubmissionResponse]])
@require_role(Role.ADMIN, Role.TEACHER)
async def list_submissions(
    assignment_id: uuid.UUID,
    status: SubmissionStatus | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    submissions = await get_assignment_service().get_submissions(
        db, assignment_id, status=status.value if status else None
    )
    return APIResponse(data=[SubmissionResponse.model_validate(s) for s in submissions])


@router.post(
    "/{assignment_id}/submissions",
    response_model=APIResponse[SubmissionResponse],
    status_code=201,
)
@require_role(Role.ADMIN, Role.TEACHER, Role.STUDENT)
async def submit_assignment(
    assignment_id: uuid.UUID,
    data: SubmissionCreate,
    db: AsyncSession = Depends(get_db),
):
    """Hand in work for a student. Submissions after the due date are marked late."""
    submission = await get_assignment_service().submit(db, assignment_id, data)
    await db.commit()
    return APIResponse(
        data=SubmissionResponse.model_validate(submission),
        message="Submission received",
    )
