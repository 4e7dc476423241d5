"""Teacher profile API endpoints."""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from iep.database import get_db
from iep.models.user import Role
from iep.schemas.common import APIResponse, PaginationMeta
from iep.schemas.teacher import TeacherCreate, TeacherResponse, TeacherUpdate
from iep.services.teacher_service import get_teacher_service
from iep.utils.permissions import require_role

router = APIRouter()


@router.get("", response_model=APIResponse[list[TeacherResponse]])
@require_role(Role.ADMIN, Role.TEACHER)
async def list_teachers(
    is_active: bool | None = Query(True),
    subject: str | None = Query(None),
    search: str | None = Query(None, description="Search by name or email"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    teachers, total = await get_teacher_service().get_teachers(
        db, is_active=is_active, subject=subject, search=search, page=page, page_size=page_size
    )
    return APIResponse(
        data=[TeacherResponse.model_validate(t) for t in teachers],
        pagination=PaginationMeta.build(page, page_size, total),
    )


@router.post("", response_model=APIResponse[TeacherResponse], status_code=201)
@require_role(Role.ADMIN)
async def create_teacher(
    data: TeacherCreate,
    db: AsyncSession = Depends(get_db),
):
    teacher = await get_teacher_service().create_teacher(db, data)
    await db.commit()
    return APIResponse(data=TeacherResponse.model_validate(teacher), message="Teacher created successfully")


@router.get("/{teacher_id}", response_model=APIResponse[TeacherResponse])
@require_role(Role.ADMIN, Role.TEACHER)
async def get_teacher(
    teacher_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    teacher = await get_teacher_service().get(db, teacher_id)
    return APIResponse(data=TeacherResponse.model_validate(teacher))


@router.put("/{teacher_id}", response_model=APIResponse[TeacherResponse])
@require_role(Role.ADMIN)
async def update_teacher(
    teacher_id: uuid.UUID,
    data: TeacherUpdate,
    db: AsyncSession = Depends(get_db),
):
    teacher = await get_teacher_service().update_teacher(db, teacher_id, data)
    await db.commit()
    return APIResponse(data=TeacherResponse.model_validate(teacher), message="Teacher updated successfully")


@router.delete("/{teacher_id}", response_model=APIResponse[None])
@require_role(Role.ADMIN)
async def delete_teacher(
    teacher_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    await get_teacher_service().remove(db, teacher_id)
    await db.commit()
    return APIResponse(message="Teacher deleted successfully")
