"""File API endpoints.

Bytes never pass through the API: uploads and downloads use presigned R2
URLs, this router only keeps the bookkeeping.
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from iep.config import settings
from iep.database import get_db
from iep.models.file_entity import FileCategory, FileStatus
from iep.models.user import Role
from iep.schemas.common import APIResponse, PaginationMeta
from iep.schemas.file import (
    FileResponse,
    FileShareCreate,
    FileShareResponse,
    FileUploadRequest,
    FileUploadResponse,
    PresignedUrlResponse,
    StorageQuotaResponse,
)
from iep.services.file_service import get_file_service
from iep.utils.permissions import require_role

router = APIRouter()


@router.get("", response_model=APIResponse[list[FileResponse]])
@require_role(Role.ADMIN, Role.TEACHER)
async def list_files(
    category: FileCategory | None = Query(None),
    status: FileStatus | None = Query(FileStatus.ACTIVE),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    files, total = await get_file_service().get_files(
        db,
        category=category.value if category else None,
        status=status.value if status else None,
        page=page,
        page_size=page_size,
    )
    return APIResponse(
        data=[FileResponse.model_validate(f) for f in files],
        pagination=PaginationMeta.build(page, page_size, total),
    )


@router.get("/quota", response_model=APIResponse[StorageQuotaResponse])
@require_role(Role.ADMIN, Role.TEACHER)
async def get_storage_quota(
    db: AsyncSession = Depends(get_db),
):
    quota = await get_file_service().get_quota(db)
    await db.commit()
    return APIResponse(data=StorageQuotaResponse.model_validate(quota))


@router.post("/upload", response_model=APIResponse[FileUploadResponse], status_code=201)
@require_role(*Role)
async def register_upload(
    data: FileUploadRequest,
    db: AsyncSession = Depends(get_db),
):
    """Reserve quota for a file and get a presigned URL to PUT it to."""
    file_entity, upload_url, warnings = await get_file_service().register_upload(db, data)
    await db.commit()
    return APIResponse(
        data=FileUploadResponse(
            file=FileResponse.model_validate(file_entity),
            upload_url=upload_url,
            expires_in=settings.r2_presigned_url_expiry_seconds,
            warnings=warnings,
        ),
    )


@router.get("/{file_id}", response_model=APIResponse[FileResponse])
@require_role(Role.ADMIN, Role.TEACHER)
async def get_file(
    file_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    file_entity = await get_file_service().get(db, file_id)
    return APIResponse(data=FileResponse.model_validate(file_entity))


@router.post("/{file_id}/confirm", response_model=APIResponse[FileResponse])
@require_role(*Role)
async def confirm_upload(
    file_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    file_entity = await get_file_service().confirm_upload(db, file_id)
    await db.commit()
    return APIResponse(data=FileResponse.model_validate(file_entity), message="Upload confirmed")


@router.get("/{file_id}/download", response_model=APIResponse[PresignedUrlResponse])
@require_role(*Role)
async def get_download_url(
    file_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    url = await get_file_service().get_download_url(db, file_id)
    return APIResponse(
        data=PresignedUrlResponse(url=url, expires_in=settings.r2_presigned_url_expiry_seconds)
    )


@router.delete("/{file_id}", response_model=APIResponse[None])
@require_role(*Role)
async def delete_file(
    file_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    await get_file_service().delete_file(db, file_id)
    await db.commit()
    return APIResponse(message="File deleted")


# Sharing

@router.get("/{file_id}/shares", response_model=APIResponse[list[FileShareResponse]])
@require_role(Role.ADMIN, Role.TEACHER)
async def list_shares(
    file_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    shares = await get_file_service().get_shares(db, file_id)
    return APIResponse(data=[FileShareResponse.model_validate(s) for s in shares])


@router.post("/{file_id}/shares", response_model=APIResponse[FileShareResponse], status_code=201)
@require_role(*Role)
async def share_file(
    file_id: uuid.UUID,
    data: FileShareCreate,
    db: AsyncSession = Depends(get_db),
):
    share = await get_file_service().share_file(db, file_id, data)
    await db.commit()
    return APIResponse(data=FileShareResponse.model_validate(share), message="File shared")


@router.delete("/{file_id}/shares/{share_id}", response_model=APIResponse[None])
@require_role(Role.ADMIN, Role.TEACHER)
async def revoke_share(
    file_id: uuid.UUID,
    share_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    await get_file_service().revoke_share(db, file_id, share_id)
    await db.commit()
    return APIResponse(message="Share revoked")
