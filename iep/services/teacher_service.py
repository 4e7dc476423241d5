"""Teacher profile service."""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from iep.exceptions import ConflictException
from iep.models import Teacher
from iep.schemas.teacher import TeacherCreate, TeacherUpdate
from iep.services.base_service import TenantScopedService
from iep.utils.tenant_context import get_current_user_id_or_none, get_tenant_id


class TeacherService(TenantScopedService[Teacher]):
    """Service for managing teacher profiles."""

    model = Teacher
    resource_name = "Teacher"

    async def get_teachers(
        self,
        db: AsyncSession,
        is_active: bool | None = True,
        subject: str | None = None,
        search: str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Teacher], int]:
        query = self.scoped_query()
        if is_active is not None:
            query = query.where(Teacher.is_active == is_active)
        if subject:
            query = query.where(Teacher.subject == subject)
        if search:
            search_term = f"%{search}%"
            query = query.where(
                (Teacher.first_name.ilike(search_term))
                | (Teacher.last_name.ilike(search_term))
                | (Teacher.email.ilike(search_term))
            )
        return await self.paginate(
            db, query, page, page_size, order_by=(Teacher.first_name, Teacher.last_name)
        )

    async def create_teacher(self, db: AsyncSession, data: TeacherCreate) -> Teacher:
        email = data.email.lower()
        existing = await db.execute(
            select(Teacher.id).where(
                Teacher.tenant_id == get_tenant_id(),
                Teacher.email == email,
                Teacher.deleted_at.is_(None),
            )
        )
        if existing.scalar_one_or_none():
            raise ConflictException("A teacher with this email already exists")

        return await self.add(
            db,
            first_name=data.first_name,
            last_name=data.last_name,
            email=email,
            subject=data.subject,
            user_id=data.user_id,
            is_active=True,
        )

    async def update_teacher(
        self,
        db: AsyncSession,
        teacher_id: uuid.UUID,
        data: TeacherUpdate,
    ) -> Teacher:
        teacher = await self.get(db, teacher_id)
        if data.email:
            data.email = data.email.lower()
        return await self.apply_update(db, teacher, data)

    async def get_current_teacher(self, db: AsyncSession) -> Teacher | None:
        """The teacher profile linked to the logged-in user, if any."""
        user_id = get_current_user_id_or_none()
        if user_id is None:
            return None
        result = await db.execute(self.scoped_query().where(Teacher.user_id == user_id))
        return result.scalar_one_or_none()


# Singleton instance
_teacher_service: TeacherService | None = None


def get_teacher_service() -> TeacherService:
    """Get the teacher service singleton."""
    global _teacher_service
    if _teacher_service is None:
        _teacher_service = TeacherService()
    return _teacher_service
