"""File-related Pydantic schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from iep.models.file_entity import FileCategory, SharePermission


class FileUploadRequest(BaseModel):
    """Register an upload. The client then PUTs the bytes to the returned URL."""

    original_name: str = Field(..., min_length=1, max_length=255)
    content_type: str = Field(..., min_length=1, max_length=100)
    file_size: int = Field(..., gt=0)
    category: FileCategory


class FileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    tenant_id: uuid.UUID
    original_name: str
    content_type: str
    file_size: int
    category: str
    status: str
    uploaded_by: uuid.UUID | None = None
    created_at: datetime


class FileUploadResponse(BaseModel):
    file: FileResponse
    upload_url: str
    expires_in: int
    warnings: list[str] = Field(default_factory=list)


class PresignedUrlResponse(BaseModel):
    url: str
    expires_in: int


class FileShareCreate(BaseModel):
    shared_with_user_id: uuid.UUID | None = None
    shared_with_class_id: uuid.UUID | None = None
    permission: SharePermission = SharePermission.VIEW
    expires_at: datetime | None = None

    @model_validator(mode="after")
    def exactly_one_target(self):
        if (self.shared_with_user_id is None) == (self.shared_with_class_id is None):
            raise ValueError("Share with exactly one of shared_with_user_id or shared_with_class_id")
        return self


class FileShareResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    file_id: uuid.UUID
    shared_with_user_id: uuid.UUID | None = None
    shared_with_class_id: uuid.UUID | None = None
    permission: str
    expires_at: datetime | None = None
    shared_by: uuid.UUID | None = None
    created_at: datetime


class StorageQuotaResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    tenant_id: uuid.UUID
    quota_bytes: int
    used_bytes: int
    available_bytes: int
    file_count: int
    usage_percentage: float
