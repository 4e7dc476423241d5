"""Student service for CRUD operations."""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from iep.exceptions import ConflictException, ForbiddenException
from iep.models import ClassStudent, Student, WebhookEventType
from iep.schemas.student import StudentCreate, StudentUpdate
from iep.services.base_service import TenantScopedService
from iep.services.class_service import get_class_service, teacher_class_ids
from iep.services.webhook_service import get_webhook_service
from iep.utils.tenant_context import get_tenant_id


def student_event_payload(student: Student) -> dict:
    return {
        "student_id": str(student.id),
        "student_number": student.student_number,
        "first_name": student.first_name,
        "last_name": student.last_name,
        "class_id": str(student.class_id) if student.class_id else None,
    }


class StudentService(TenantScopedService[Student]):
    """Service for managing students."""

    model = Student
    resource_name = "Student"

    async def get_students(
        self,
        db: AsyncSession,
        class_id: uuid.UUID | None = None,
        is_active: bool | None = True,
        search: str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Student], int]:
        """Get list of students with optional filters.

        Teachers only see students enrolled in their own classes.
        """
        query = self.scoped_query()

        allowed = await teacher_class_ids(db)
        if class_id or allowed is not None:
            query = query.join(ClassStudent, ClassStudent.student_id == Student.id)
            if class_id:
                query = query.where(ClassStudent.class_id == class_id)
            if allowed is not None:
                query = query.where(ClassStudent.class_id.in_(allowed))

        if is_active is not None:
            query = query.where(Student.is_active == is_active)
        if search:
            search_term = f"%{search}%"
            query = query.where(
                (Student.first_name.ilike(search_term))
                | (Student.last_name.ilike(search_term))
                | (Student.student_number.ilike(search_term))
            )

        return await self.paginate(
            db, query.distinct(), page, page_size, order_by=(Student.first_name, Student.last_name)
        )

    async def get_student(self, db: AsyncSession, student_id: uuid.UUID) -> Student:
        """Get a student, enforcing the teacher's class restriction."""
        student = await self.get(db, student_id)

        allowed = await teacher_class_ids(db)
        if allowed is not None and not any(link.class_id in allowed for link in student.class_links):
            raise ForbiddenException("You can only view students in your classes")
        return student

    async def create_student(self, db: AsyncSession, data: StudentCreate) -> Student:
        """Create a student and enroll them when a class is given."""
        if data.student_number:
            await self._ensure_unique_number(db, data.student_number)

        student = await self.add(
            db,
            **data.model_dump(exclude={"class_id"}),
            is_active=True,
        )

        if data.class_id:
            await get_class_service().enroll_student(db, data.class_id, student.id)
            await db.refresh(student)

        await get_webhook_service().dispatch_event(
            db, WebhookEventType.STUDENT_CREATED.value, student_event_payload(student)
        )
        return student

    async def update_student(
        self,
        db: AsyncSession,
        student_id: uuid.UUID,
        data: StudentUpdate,
    ) -> Student:
        student = await self.get(db, student_id)
        if data.student_number and data.student_number != student.student_number:
            await self._ensure_unique_number(db, data.student_number)

        student = await self.apply_update(db, student, data)
        await get_webhook_service().dispatch_event(
            db, WebhookEventType.STUDENT_UPDATED.value, student_event_payload(student)
        )
        return student

    async def delete_student(self, db: AsyncSession, student_id: uuid.UUID) -> None:
        await self.remove(db, student_id)
        await get_webhook_service().dispatch_event(
            db, WebhookEventType.STUDENT_DELETED.value, {"student_id": str(student_id)}
        )

    async def _ensure_unique_number(self, db: AsyncSession, student_number: str) -> None:
        result = await db.execute(
            select(Student.id).where(
                Student.tenant_id == get_tenant_id(),
                Student.student_number == student_number,
                Student.deleted_at.is_(None),
            )
        )
        if result.scalar_one_or_none():
            raise ConflictException(f"Student number '{student_number}' is already in use")


# Singleton instance
_student_service: StudentService | None = None


def get_student_service() -> StudentService:
    """Get the student service singleton."""
    global _student_service
    if _student_service is None:
        _student_service = StudentService()
    return _student_service
