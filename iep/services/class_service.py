"""School class service for CRUD and membership operations."""

import uuid

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from iep.exceptions import ConflictException, NotFoundException, ValidationException
from iep.models import ClassStudent, ClassTeacher, Role, SchoolClass, Student, Teacher
from iep.schemas.school_class import (
    AssignTeacherRequest,
    SchoolClassCreate,
    SchoolClassUpdate,
)
from iep.services.base_service import TenantScopedService
from iep.utils.tenant_context import get_current_user_id_or_none, get_current_user_role, get_tenant_id


async def teacher_class_ids(db: AsyncSession) -> list[uuid.UUID] | None:
    """Class ids visible to the current TEACHER user.

    Returns None for every other role, meaning "no class restriction".
    """
    if get_current_user_role() != Role.TEACHER.value:
        return None

    user_id = get_current_user_id_or_none()
    result = await db.execute(
        select(ClassTeacher.class_id)
        .join(Teacher, Teacher.id == ClassTeacher.teacher_id)
        .where(
            Teacher.user_id == user_id,
            Teacher.tenant_id == get_tenant_id(),
            Teacher.deleted_at.is_(None),
        )
    )
    return list(result.scalars().all())


class ClassService(TenantScopedService[SchoolClass]):
    """Service for managing school classes."""

    model = SchoolClass
    resource_name = "Class"

    async def get_classes(
        self,
        db: AsyncSession,
        is_active: bool | None = True,
        grade: str | None = None,
        search: str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[SchoolClass], int]:
        """Get list of classes with optional filters.

        Teachers only see their assigned classes.
        """
        query = self.scoped_query()

        allowed = await teacher_class_ids(db)
        if allowed is not None:
            query = query.where(SchoolClass.id.in_(allowed))

        if is_active is not None:
            query = query.where(SchoolClass.is_active == is_active)
        if grade:
            query = query.where(SchoolClass.grade == grade)
        if search:
            query = query.where(SchoolClass.name.ilike(f"%{search}%"))

        return await self.paginate(
            db, query, page, page_size, order_by=(SchoolClass.grade, SchoolClass.name)
        )

    async def create_class(self, db: AsyncSession, data: SchoolClassCreate) -> SchoolClass:
        return await self.add(db, **data.model_dump(), is_active=True)

    async def update_class(
        self,
        db: AsyncSession,
        class_id: uuid.UUID,
        data: SchoolClassUpdate,
    ) -> SchoolClass:
        school_class = await self.get(db, class_id)
        if data.capacity is not None and data.capacity < school_class.current_enrollment:
            raise ValidationException(
                [{"field": "capacity", "message": "Capacity cannot be below current enrollment"}]
            )
        return await self.apply_update(db, school_class, data)

    async def get_class_students(self, db: AsyncSession, class_id: uuid.UUID) -> list[ClassStudent]:
        school_class = await self.get(db, class_id)
        links = [link for link in school_class.student_links if link.student.deleted_at is None]
        return sorted(links, key=lambda link: (link.student.first_name, link.student.last_name))

    async def enroll_student(
        self,
        db: AsyncSession,
        class_id: uuid.UUID,
        student_id: uuid.UUID,
    ) -> ClassStudent:
        """Add a student to a class, respecting capacity."""
        tenant_id = get_tenant_id()
        school_class = await self.get(db, class_id)

        result = await db.execute(
            select(Student).where(
                Student.id == student_id,
                Student.tenant_id == tenant_id,
                Student.deleted_at.is_(None),
            )
        )
        if not result.scalar_one_or_none():
            raise NotFoundException("Student")

        if any(link.student_id == student_id for link in school_class.student_links):
            raise ConflictException("Student is already enrolled in this class")

        if school_class.is_full:
            raise ConflictException("Class has reached its capacity")

        link = ClassStudent(tenant_id=tenant_id, class_id=class_id, student_id=student_id)
        db.add(link)
        await db.flush()
        await db.refresh(link)
        return link

    async def remove_student(self, db: AsyncSession, class_id: uuid.UUID, student_id: uuid.UUID) -> None:
        await self.get(db, class_id)
        link = await self._get_link(db, select(ClassStudent), ClassStudent, class_id, student_id=student_id)
        await db.delete(link)
        await db.flush()

    async def get_class_teachers(self, db: AsyncSession, class_id: uuid.UUID) -> list[ClassTeacher]:
        school_class = await self.get(db, class_id)
        links = [link for link in school_class.teacher_links if link.teacher.deleted_at is None]
        return sorted(links, key=lambda link: (not link.is_primary, link.teacher.first_name))

    async def assign_teacher(
        self,
        db: AsyncSession,
        class_id: uuid.UUID,
        data: AssignTeacherRequest,
    ) -> ClassTeacher:
        """Assign a teacher to a class."""
        tenant_id = get_tenant_id()
        school_class = await self.get(db, class_id)

        result = await db.execute(
            select(Teacher).where(
                Teacher.id == data.teacher_id,
                Teacher.tenant_id == tenant_id,
                Teacher.deleted_at.is_(None),
            )
        )
        if not result.scalar_one_or_none():
            raise NotFoundException("Teacher")

        if any(link.teacher_id == data.teacher_id for link in school_class.teacher_links):
            raise ConflictException("Teacher is already assigned to this class")

        # Only one primary teacher per class
        if data.is_primary:
            for link in school_class.teacher_links:
                link.is_primary = False

        link = ClassTeacher(
            tenant_id=tenant_id,
            class_id=class_id,
            teacher_id=data.teacher_id,
            is_primary=data.is_primary,
        )
        db.add(link)
        await db.flush()
        await db.refresh(link)
        return link

    async def remove_teacher(self, db: AsyncSession, class_id: uuid.UUID, teacher_id: uuid.UUID) -> None:
        await self.get(db, class_id)
        link = await self._get_link(db, select(ClassTeacher), ClassTeacher, class_id, teacher_id=teacher_id)
        await db.delete(link)
        await db.flush()

    async def _get_link(self, db: AsyncSession, query: Select, model, class_id: uuid.UUID, **member):
        query = query.where(model.class_id == class_id, model.tenant_id == get_tenant_id())
        for column, value in member.items():
            query = query.where(getattr(model, column) == value)
        result = await db.execute(query)
        link = result.scalar_one_or_none()
        if not link:
            raise NotFoundException("Class membership")
        return link


# Singleton instance
_class_service: ClassService | None = None


def get_class_service() -> ClassService:
    """Get the class service singleton."""
    global _class_service
    if _class_service is None:
        _class_service = ClassService()
    return _class_service
