"""File service for upload registration, R2 presigned URLs, sharing and quotas."""

import logging
import re
import uuid

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_extensions import uuid7

from iep.config import settings
from iep.exceptions import ConflictException, ForbiddenException, NotFoundException, ValidationException
from iep.models import (
    ClassStudent,
    FileEntity,
    FileShare,
    FileStatus,
    StorageQuota,
    Student,
)
from iep.models.file_entity import FileCategory
from iep.schemas.file import FileShareCreate, FileUploadRequest
from iep.services.base_service import TenantScopedService
from iep.utils.tenant_context import get_current_user_id_or_none, get_tenant_id, is_staff

logger = logging.getLogger(__name__)

KB = 1024
MB = 1024 * KB

# Allowed MIME types and (min, max) byte sizes for each category
FILE_CATEGORY_RULES = {
    FileCategory.IMAGE: {
        "mime_types": {"image/jpeg", "image/png", "image/gif", "image/webp", "image/svg+xml"},
        "min_size": 1 * KB,
        "max_size": 10 * MB,
    },
    FileCategory.DOCUMENT: {
        "mime_types": {
            "application/pdf",
            "application/msword",
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            "application/vnd.ms-excel",
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            "application/vnd.ms-powerpoint",
            "application/vnd.openxmlformats-officedocument.presentationml.presentation",
            "text/plain",
            "text/csv",
        },
        "min_size": 1 * KB,
        "max_size": 50 * MB,
    },
    FileCategory.VIDEO: {
        "mime_types": {"video/mp4", "video/webm", "video/ogg", "video/avi", "video/mov"},
        "min_size": 10 * KB,
        "max_size": 500 * MB,
    },
    FileCategory.AUDIO: {
        "mime_types": {"audio/mpeg", "audio/wav", "audio/ogg", "audio/m4a", "audio/aac"},
        "min_size": 1 * KB,
        "max_size": 100 * MB,
    },
    FileCategory.ARCHIVE: {
        "mime_types": {
            "application/zip",
            "application/x-rar-compressed",
            "application/x-7z-compressed",
            "application/gzip",
            "application/x-tar",
        },
        "min_size": 1 * KB,
        "max_size": 100 * MB,
    },
}

MAX_FILE_NAME_LENGTH = 255
FORBIDDEN_NAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
TURKISH_CHARS = re.compile(r"[çğıöşüÇĞİÖŞÜ]")


def validate_upload(
    original_name: str,
    content_type: str,
    file_size: int,
    category: FileCategory,
) -> tuple[list[dict], list[str]]:
    """Check a file against its category rules.

    Returns:
        (errors, warnings). Errors use the ``{"field", "message"}`` shape of
        ValidationException; warnings do not block the upload.
    """
    errors: list[dict] = []
    warnings: list[str] = []
    rules = FILE_CATEGORY_RULES[category]

    if content_type not in rules["mime_types"]:
        errors.append({
            "field": "content_type",
            "message": f"File type '{content_type}' is not allowed for {category.value}",
        })

    if file_size > rules["max_size"]:
        errors.append({
            "field": "file_size",
            "message": f"File is larger than {rules['max_size'] // MB}MB",
        })
    elif file_size < rules["min_size"]:
        errors.append({
            "field": "file_size",
            "message": f"File is smaller than {rules['min_size'] // KB}KB",
        })

    if len(original_name) > MAX_FILE_NAME_LENGTH:
        errors.append({
            "field": "original_name",
            "message": f"File name is longer than {MAX_FILE_NAME_LENGTH} characters",
        })
    if FORBIDDEN_NAME_CHARS.search(original_name):
        errors.append({
            "field": "original_name",
            "message": "File name contains forbidden characters",
        })

    if TURKISH_CHARS.search(original_name):
        warnings.append("File name contains Turkish characters; some systems may not display it correctly")

    return errors, warnings


def file_extension(filename: str) -> str:
    """Get file extension including the dot."""
    if "." not in filename:
        return ""
    return "." + filename.rsplit(".", 1)[-1].lower()


def storage_path(tenant_id: uuid.UUID, category: FileCategory, file_id: uuid.UUID, filename: str) -> str:
    """R2 object key: {tenant_id}/{category}/{file_id}{ext}"""
    return f"{tenant_id}/{category.value}/{file_id}{file_extension(filename)}"


class FileService(TenantScopedService[FileEntity]):
    """Service for managing file uploads and R2 storage."""

    model = FileEntity
    resource_name = "File"

    def __init__(self):
        self._client = None

    @property
    def s3_client(self):
        """Get or create the S3 client lazily."""
        if self._client is None:
            self._client = boto3.client(
                "s3",
                endpoint_url=settings.r2_endpoint_url,
                aws_access_key_id=settings.r2_access_key_id,
                aws_secret_access_key=settings.r2_secret_access_key,
                config=Config(
                    signature_version="s3v4",
                    s3={"addressing_style": "path"},
                ),
            )
        return self._client

    async def get_files(
        self,
        db: AsyncSession,
        category: str | None = None,
        status: str | None = FileStatus.ACTIVE.value,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[FileEntity], int]:
        query = self.scoped_query()
        if category:
            query = query.where(FileEntity.category == category)
        if status:
            query = query.where(FileEntity.status == status)
        return await self.paginate(db, query, page, page_size, order_by=FileEntity.created_at.desc())

    async def get_quota(self, db: AsyncSession, lock: bool = False) -> StorageQuota:
        """The tenant's quota row, created with the default size on first use."""
        tenant_id = get_tenant_id()
        query = select(StorageQuota).where(StorageQuota.tenant_id == tenant_id)
        if lock:
            query = query.with_for_update()
        quota = (await db.execute(query)).scalar_one_or_none()
        if quota is None:
            quota = StorageQuota(
                tenant_id=tenant_id,
                quota_bytes=settings.default_storage_quota_bytes,
                used_bytes=0,
                file_count=0,
            )
            db.add(quota)
            await db.flush()
        return quota

    async def register_upload(
        self,
        db: AsyncSession,
        data: FileUploadRequest,
    ) -> tuple[FileEntity, str, list[str]]:
        """Validate an upload, reserve quota and issue a presigned PUT URL.

        Returns:
            (file entity in PENDING status, upload URL, warnings)
        """
        errors, warnings = validate_upload(
            data.original_name, data.content_type, data.file_size, data.category
        )
        if errors:
            raise ValidationException(errors)

        quota = await self.get_quota(db, lock=True)
        if not quota.can_store(data.file_size):
            raise ConflictException(
                f"Storage quota exceeded: {quota.available_bytes} bytes available, {data.file_size} requested"
            )

        tenant_id = get_tenant_id()
        file_id = uuid7()
        path = storage_path(tenant_id, data.category, file_id, data.original_name)

        file_entity = await self.add(
            db,
            id=file_id,
            storage_path=path,
            original_name=data.original_name,
            content_type=data.content_type,
            file_size=data.file_size,
            category=data.category.value,
            status=FileStatus.PENDING.value,
            uploaded_by=get_current_user_id_or_none(),
        )

        quota.used_bytes += data.file_size
        quota.file_count += 1
        await db.flush()

        upload_url = self._presign(
            "put_object",
            {"Bucket": settings.r2_bucket_name, "Key": path, "ContentType": data.content_type},
        )
        logger.info(f"Registered upload {file_entity.id} ({data.file_size} bytes) for tenant {tenant_id}")
        return file_entity, upload_url, warnings

    async def confirm_upload(self, db: AsyncSession, file_id: uuid.UUID) -> FileEntity:
        """Mark a PENDING file ACTIVE once its object exists in storage."""
        file_entity = await self.get(db, file_id)
        if file_entity.status != FileStatus.PENDING.value:
            raise ConflictException("File upload is already confirmed")

        try:
            self.s3_client.head_object(Bucket=settings.r2_bucket_name, Key=file_entity.storage_path)
        except ClientError:
            raise ValidationException(
                [{"field": "file_id", "message": "The file has not been uploaded yet"}]
            )

        file_entity.status = FileStatus.ACTIVE.value
        await db.flush()
        await db.refresh(file_entity)
        return file_entity

    async def get_download_url(self, db: AsyncSession, file_id: uuid.UUID) -> str:
        file_entity = await self.get(db, file_id)
        if file_entity.status != FileStatus.ACTIVE.value:
            raise NotFoundException("File")
        if not await self._can_access(db, file_entity):
            raise ForbiddenException("You do not have access to this file")

        return self._presign(
            "get_object",
            {
                "Bucket": settings.r2_bucket_name,
                "Key": file_entity.storage_path,
                "ResponseContentDisposition": f'attachment; filename="{file_entity.original_name}"',
            },
        )

    async def delete_file(self, db: AsyncSession, file_id: uuid.UUID) -> None:
        """Soft delete a file and release its bytes from the quota.

        The R2 object is kept so the file can be recovered.
        """
        file_entity = await self.get(db, file_id)
        if file_entity.uploaded_by != get_current_user_id_or_none() and not is_staff():
            raise ForbiddenException("You can only delete files you uploaded")

        quota = await self.get_quota(db, lock=True)
        quota.used_bytes = max(quota.used_bytes - file_entity.file_size, 0)
        quota.file_count = max(quota.file_count - 1, 0)

        file_entity.status = FileStatus.DELETED.value
        file_entity.soft_delete()
        await db.flush()

    # Sharing

    async def share_file(self, db: AsyncSession, file_id: uuid.UUID, data: FileShareCreate) -> FileShare:
        file_entity = await self.get(db, file_id)
        if file_entity.uploaded_by != get_current_user_id_or_none() and not is_staff():
            raise ForbiddenException("You can only share files you uploaded")

        share = FileShare(
            tenant_id=get_tenant_id(),
            file_id=file_entity.id,
            shared_with_user_id=data.shared_with_user_id,
            shared_with_class_id=data.shared_with_class_id,
            permission=data.permission.value,
            expires_at=data.expires_at,
            shared_by=get_current_user_id_or_none(),
        )
        db.add(share)
        await db.flush()
        await db.refresh(share)
        return share

    async def get_shares(self, db: AsyncSession, file_id: uuid.UUID) -> list[FileShare]:
        file_entity = await self.get(db, file_id)
        return [share for share in file_entity.shares if not share.is_expired]

    async def revoke_share(self, db: AsyncSession, file_id: uuid.UUID, share_id: uuid.UUID) -> None:
        file_entity = await self.get(db, file_id)
        share = next((s for s in file_entity.shares if s.id == share_id), None)
        if share is None:
            raise NotFoundException("File share")
        await db.delete(share)
        await db.flush()

    async def _can_access(self, db: AsyncSession, file_entity: FileEntity) -> bool:
        """Staff, the uploader and unexpired share targets may read a file."""
        user_id = get_current_user_id_or_none()
        if is_staff() or file_entity.uploaded_by == user_id:
            return True

        shares = [share for share in file_entity.shares if not share.is_expired]
        if any(share.shared_with_user_id == user_id for share in shares):
            return True

        class_ids = {share.shared_with_class_id for share in shares if share.shared_with_class_id}
        if not class_ids:
            return False

        result = await db.execute(
            select(ClassStudent.id)
            .join(Student, Student.id == ClassStudent.student_id)
            .where(
                Student.user_id == user_id,
                ClassStudent.class_id.in_(class_ids),
                ClassStudent.tenant_id == get_tenant_id(),
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    def _presign(self, operation: str, params: dict) -> str:
        try:
            return self.s3_client.generate_presigned_url(
                operation,
                Params=params,
                ExpiresIn=settings.r2_presigned_url_expiry_seconds,
            )
        except ClientError as e:
            logger.error(f"Failed to presign {operation} for {params.get('Key')}: {e}")
            raise


# Singleton instance
_file_service: FileService | None = None


def get_file_service() -> FileService:
    """Get the file service singleton."""
    global _file_service
    if _file_service is None:
        _file_service = FileService()
    return _file_service
