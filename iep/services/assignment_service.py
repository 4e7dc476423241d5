"""Assignment service for CRUD, lifecycle, submissions and statistics."""

import logging
import uuid
from datetime import datetime
from typing import Iterable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from iep.exceptions import ConflictException, NotFoundException, ValidationException
from iep.models import (
    Assignment,
    AssignmentStatus,
    AssignmentSubmission,
    ClassStudent,
    SchoolClass,
    Student,
    SubmissionStatus,
    Teacher,
    WebhookEventType,
)
from iep.models.base import utcnow
from iep.schemas.assignment import (
    AssignmentCreate,
    AssignmentUpdate,
    SubmissionCreate,
    SubmissionGrade,
)
from iep.services.base_service import TenantScopedService
from iep.services.class_service import teacher_class_ids
from iep.services.webhook_service import get_webhook_service
from iep.utils.tenant_context import get_current_user_id_or_none, get_tenant_id

logger = logging.getLogger(__name__)

RECENT_ASSIGNMENTS_LIMIT = 5


def _rate(part: float, whole: float) -> float:
    return round(part / whole * 100, 2) if whole else 0.0


def _mean(values: list[float]) -> float:
    return round(sum(values) / len(values), 2) if values else 0.0


def compute_assignment_statistics(
    assignments: Iterable[Assignment],
    submissions: Iterable[AssignmentSubmission],
    now: datetime | None = None,
) -> dict:
    """Aggregate dashboard counters over live assignments and their submissions.

    Args:
        assignments: Non-deleted assignments of the tenant
        submissions: Submissions belonging to those assignments
        now: Reference time for "past due" (defaults to the current UTC time)
    """
    now = now or utcnow()
    assignments = list(assignments)
    submissions = list(submissions)

    published_ids = {a.id for a in assignments if a.status == AssignmentStatus.PUBLISHED.value}
    completed = [
        a for a in assignments
        if a.status == AssignmentStatus.PUBLISHED.value and a.due_date < now
    ]

    scores = [float(s.score) for s in submissions if s.score is not None]
    pending = [
        s for s in submissions
        if s.status == SubmissionStatus.SUBMITTED.value and s.score is None
    ]

    published_submissions = [s for s in submissions if s.assignment_id in published_ids]
    done = [
        s for s in published_submissions
        if s.status in (SubmissionStatus.SUBMITTED.value, SubmissionStatus.GRADED.value)
    ]

    recent = sorted(assignments, key=lambda a: a.created_at, reverse=True)[:RECENT_ASSIGNMENTS_LIMIT]

    return {
        "total_assignments": len(assignments),
        "active_assignments": len(published_ids),
        "completed_assignments": len(completed),
        "pending_grades": len(pending),
        "total_submissions": len(submissions),
        "graded_submissions": len(scores),
        "average_score": _mean(scores),
        "completion_rate": _rate(len(done), len(published_submissions)),
        "recent_assignments": [
            {
                "id": a.id,
                "title": a.title,
                "subject": a.subject,
                "due_date": a.due_date,
                "status": a.status,
            }
            for a in recent
        ],
    }


def compute_assignment_detail_statistics(
    assignment_id: uuid.UUID,
    submissions: Iterable[AssignmentSubmission],
    enrolled_students: int,
) -> dict:
    """Per-assignment counters; completion is measured against class enrollment."""
    submissions = list(submissions)
    scores = [float(s.score) for s in submissions if s.score is not None]
    return {
        "assignment_id": assignment_id,
        "total_students": enrolled_students,
        "total_submissions": len(submissions),
        "graded_submissions": len(scores),
        "late_submissions": sum(1 for s in submissions if s.status == SubmissionStatus.LATE.value),
        "average_score": _mean(scores),
        "completion_rate": _rate(len(submissions), enrolled_students),
    }


class AssignmentService(TenantScopedService[Assignment]):
    """Service for managing assignments and their submissions."""

    model = Assignment
    resource_name = "Assignment"

    async def get_assignments(
        self,
        db: AsyncSession,
        class_id: uuid.UUID | None = None,
        teacher_id: uuid.UUID | None = None,
        assignment_type: str | None = None,
        status: str | None = None,
        subject: str | None = None,
        due_from: datetime | None = None,
        due_to: datetime | None = None,
        search: str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Assignment], int]:
        """Get list of assignments with optional filters."""
        query = self.scoped_query()

        allowed = await teacher_class_ids(db)
        if allowed is not None:
            query = query.where(Assignment.class_id.in_(allowed))

        if class_id:
            query = query.where(Assignment.class_id == class_id)
        if teacher_id:
            query = query.where(Assignment.teacher_id == teacher_id)
        if assignment_type:
            query = query.where(Assignment.type == assignment_type)
        if status:
            query = query.where(Assignment.status == status)
        if subject:
            query = query.where(Assignment.subject == subject)
        if due_from:
            query = query.where(Assignment.due_date >= due_from)
        if due_to:
            query = query.where(Assignment.due_date <= due_to)
        if search:
            search_term = f"%{search}%"
            query = query.where(
                (Assignment.title.ilike(search_term))
                | (Assignment.description.ilike(search_term))
            )

        return await self.paginate(db, query, page, page_size, order_by=Assignment.due_date.desc())

    async def create_assignment(self, db: AsyncSession, data: AssignmentCreate) -> Assignment:
        """Create a draft assignment for a class."""
        await self._ensure_exists(db, SchoolClass, data.class_id, "Class")
        await self._ensure_exists(db, Teacher, data.teacher_id, "Teacher")

        assignment = await self.add(
            db,
            title=data.title,
            description=data.description,
            instructions=data.instructions,
            type=data.type.value,
            subject=data.subject,
            class_id=data.class_id,
            teacher_id=data.teacher_id,
            due_date=data.due_date,
            max_score=data.max_score,
            status=AssignmentStatus.DRAFT.value,
            is_graded=False,
            rubric=[criterion.model_dump() for criterion in data.rubric],
            extra_metadata=data.metadata,
        )

        await get_webhook_service().dispatch_event(
            db,
            WebhookEventType.ASSIGNMENT_CREATED.value,
            {
                "assignment_id": str(assignment.id),
                "title": assignment.title,
                "class_id": str(assignment.class_id),
                "due_date": assignment.due_date.isoformat(),
            },
        )
        return assignment

    async def update_assignment(
        self,
        db: AsyncSession,
        assignment_id: uuid.UUID,
        data: AssignmentUpdate,
    ) -> Assignment:
        assignment = await self.get(db, assignment_id)
        update_data = data.model_dump(exclude_unset=True)

        if "rubric" in update_data and data.rubric is not None:
            update_data["rubric"] = [criterion.model_dump() for criterion in data.rubric]
        if "metadata" in update_data:
            update_data["extra_metadata"] = update_data.pop("metadata") or {}

        return await self.apply_update(db, assignment, update_data)

    async def delete_assignment(self, db: AsyncSession, assignment_id: uuid.UUID) -> None:
        await self.remove(db, assignment_id)

    async def publish_assignment(self, db: AsyncSession, assignment_id: uuid.UUID) -> Assignment:
        """Move a draft to published; other states cannot be published."""
        assignment = await self.get(db, assignment_id)
        if assignment.status != AssignmentStatus.DRAFT.value:
            raise ValidationException(
                [{"field": "status", "message": f"Only draft assignments can be published (is {assignment.status})"}]
            )

        assignment.status = AssignmentStatus.PUBLISHED.value
        await db.flush()
        await db.refresh(assignment)

        await get_webhook_service().dispatch_event(
            db,
            WebhookEventType.ASSIGNMENT_PUBLISHED.value,
            {
                "assignment_id": str(assignment.id),
                "title": assignment.title,
                "class_id": str(assignment.class_id),
                "due_date": assignment.due_date.isoformat(),
            },
        )
        logger.info(f"Published assignment {assignment.id}")
        return assignment

    async def archive_assignment(self, db: AsyncSession, assignment_id: uuid.UUID) -> Assignment:
        assignment = await self.get(db, assignment_id)
        if assignment.status == AssignmentStatus.ARCHIVED.value:
            raise ConflictException("Assignment is already archived")
        assignment.status = AssignmentStatus.ARCHIVED.value
        await db.flush()
        await db.refresh(assignment)
        return assignment

    async def get_statistics(self, db: AsyncSession) -> dict:
        """Dashboard statistics over the tenant's (or teacher's) assignments."""
        tenant_id = get_tenant_id()
        query = self.scoped_query()

        allowed = await teacher_class_ids(db)
        if allowed is not None:
            query = query.where(Assignment.class_id.in_(allowed))

        assignments = list((await db.execute(query)).scalars().all())
        assignment_ids = [a.id for a in assignments]

        submissions: list[AssignmentSubmission] = []
        if assignment_ids:
            result = await db.execute(
                select(AssignmentSubmission).where(
                    AssignmentSubmission.tenant_id == tenant_id,
                    AssignmentSubmission.deleted_at.is_(None),
                    AssignmentSubmission.assignment_id.in_(assignment_ids),
                )
            )
            submissions = list(result.scalars().all())

        return compute_assignment_statistics(assignments, submissions)

    async def get_assignment_statistics(self, db: AsyncSession, assignment_id: uuid.UUID) -> dict:
        assignment = await self.get(db, assignment_id)
        submissions = await self.get_submissions(db, assignment_id)

        enrolled = await db.execute(
            select(func.count()).select_from(ClassStudent).where(
                ClassStudent.class_id == assignment.class_id,
                ClassStudent.tenant_id == get_tenant_id(),
            )
        )
        return compute_assignment_detail_statistics(
            assignment.id, submissions, enrolled.scalar() or 0
        )

    # Submissions

    async def get_submissions(
        self,
        db: AsyncSession,
        assignment_id: uuid.UUID,
        status: str | None = None,
    ) -> list[AssignmentSubmission]:
        await self.get(db, assignment_id)
        query = select(AssignmentSubmission).where(
            AssignmentSubmission.assignment_id == assignment_id,
            AssignmentSubmission.tenant_id == get_tenant_id(),
            AssignmentSubmission.deleted_at.is_(None),
        )
        if status:
            query = query.where(AssignmentSubmission.status == status)
        result = await db.execute(query.order_by(AssignmentSubmission.submitted_at))
        return list(result.scalars().all())

    async def submit(
        self,
        db: AsyncSession,
        assignment_id: uuid.UUID,
        data: SubmissionCreate,
    ) -> AssignmentSubmission:
        """Record a student's submission. Late submissions are flagged, not refused."""
        tenant_id = get_tenant_id()
        assignment = await self.get(db, assignment_id)
        if assignment.status != AssignmentStatus.PUBLISHED.value:
            raise ValidationException(
                [{"field": "assignment_id", "message": "Assignment is not open for submissions"}]
            )

        await self._ensure_exists(db, Student, data.student_id, "Student")

        existing = await db.execute(
            select(AssignmentSubmission.id).where(
                AssignmentSubmission.assignment_id == assignment_id,
                AssignmentSubmission.student_id == data.student_id,
                AssignmentSubmission.deleted_at.is_(None),
            )
        )
        if existing.scalar_one_or_none():
            raise ConflictException("Student has already submitted this assignment")

        now = utcnow()
        submission = AssignmentSubmission(
            tenant_id=tenant_id,
            assignment_id=assignment_id,
            student_id=data.student_id,
            submitted_at=now,
            content=data.content,
            file_ids=[str(file_id) for file_id in data.file_ids],
            status=(
                SubmissionStatus.LATE.value if assignment.due_date < now
                else SubmissionStatus.SUBMITTED.value
            ),
        )
        db.add(submission)
        await db.flush()
        await db.refresh(submission)
        return submission

    async def grade_submission(
        self,
        db: AsyncSession,
        submission_id: uuid.UUID,
        data: SubmissionGrade,
    ) -> AssignmentSubmission:
        """Score a submission; the score may not exceed the assignment's max_score."""
        result = await db.execute(
            select(AssignmentSubmission).where(
                AssignmentSubmission.id == submission_id,
                AssignmentSubmission.tenant_id == get_tenant_id(),
                AssignmentSubmission.deleted_at.is_(None),
            )
        )
        submission = result.scalar_one_or_none()
        if not submission:
            raise NotFoundException("Submission")

        assignment = submission.assignment
        if data.score > assignment.max_score:
            raise ValidationException(
                [{"field": "score", "message": f"Score cannot exceed {assignment.max_score}"}]
            )

        submission.score = data.score
        submission.feedback = data.feedback
        submission.status = SubmissionStatus.GRADED.value
        submission.graded_by = get_current_user_id_or_none()
        submission.graded_at = utcnow()
        assignment.is_graded = True
        await db.flush()
        await db.refresh(submission)

        await get_webhook_service().dispatch_event(
            db,
            WebhookEventType.SUBMISSION_GRADED.value,
            {
                "submission_id": str(submission.id),
                "assignment_id": str(submission.assignment_id),
                "student_id": str(submission.student_id),
                "score": str(submission.score),
                "max_score": assignment.max_score,
            },
        )
        return submission

    async def _ensure_exists(self, db: AsyncSession, model, obj_id: uuid.UUID, name: str) -> None:
        result = await db.execute(
            select(model.id).where(
                model.id == obj_id,
                model.tenant_id == get_tenant_id(),
                model.deleted_at.is_(None),
            )
        )
        if not result.scalar_one_or_none():
            raise NotFoundException(name)


# Singleton instance
_assignment_service: AssignmentService | None = None


def get_assignment_service() -> AssignmentService:
    """Get the assignment service singleton."""
    global _assignment_service
    if _assignment_service is None:
        _assignment_service = AssignmentService()
    return _assignment_service
