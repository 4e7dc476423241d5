"""Backup and disaster-recovery API endpoints."""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from iep.database import get_db
from iep.models.backup import JobKind, JobStatus
from iep.models.user import Role
from iep.schemas.backup import BackupJobResponse, BackupRequest, BackupStatusResponse, RestoreRequest
from iep.schemas.common import APIResponse, PaginationMeta
from iep.services.backup_service import get_backup_service
from iep.utils.permissions import require_role

router = APIRouter()


@router.get("", response_model=APIResponse[list[BackupJobResponse]])
@require_role(Role.ADMIN)
async def list_jobs(
    job_kind: JobKind | None = Query(None),
    status: JobStatus | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    jobs, total = await get_backup_service().get_jobs(
        db,
        job_kind=job_kind.value if job_kind else None,
        status=status.value if status else None,
        page=page,
        page_size=page_size,
    )
    return APIResponse(
        data=[BackupJobResponse.model_validate(j) for j in jobs],
        pagination=PaginationMeta.build(page, page_size, total),
    )


@router.get("/status", response_model=BackupStatusResponse)
@require_role(Role.ADMIN)
async def get_backup_status(
    db: AsyncSession = Depends(get_db),
):
    return BackupStatusResponse(**await get_backup_service().get_status(db))


@router.post("", response_model=APIResponse[BackupJobResponse], status_code=201)
@require_role(Role.ADMIN)
async def run_backup(
    data: BackupRequest,
    db: AsyncSession = Depends(get_db),
):
    """Run a backup now. A failed run is still recorded and returned."""
    job = await get_backup_service().run_backup(db, data)
    await db.commit()
    return APIResponse(data=BackupJobResponse.model_validate(job))


@router.post("/recovery-tests", response_model=APIResponse[BackupJobResponse], status_code=201)
@require_role(Role.ADMIN)
async def run_recovery_test(
    db: AsyncSession = Depends(get_db),
):
    job = await get_backup_service().run_recovery_test(db)
    await db.commit()
    return APIResponse(data=BackupJobResponse.model_validate(job))


@router.get("/{job_id}", response_model=APIResponse[BackupJobResponse])
@require_role(Role.ADMIN)
async def get_job(
    job_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    job = await get_backup_service().get(db, job_id)
    return APIResponse(data=BackupJobResponse.model_validate(job))


@router.post("/{backup_id}/restore", response_model=APIResponse[BackupJobResponse], status_code=201)
@require_role(Role.ADMIN)
async def restore_backup(
    backup_id: uuid.UUID,
    data: RestoreRequest,
    db: AsyncSession = Depends(get_db),
):
    job = await get_backup_service().restore(db, backup_id, data.confirm)
    await db.commit()
    return APIResponse(data=BackupJobResponse.model_validate(job), message="Restore recorded")
