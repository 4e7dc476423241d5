"""Backup and disaster-recovery schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from iep.models.backup import BackupType
from iep.schemas.common import CamelModel


class BackupRequest(BaseModel):
    backup_type: BackupType = BackupType.FULL
    note: str | None = Field(None, max_length=500)


class RestoreRequest(BaseModel):
    confirm: bool = Field(..., description="Must be true; a restore replaces tenant data")


class BackupJobResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    tenant_id: uuid.UUID
    job_kind: str
    backup_type: str
    status: str
    source_backup_id: uuid.UUID | None = None
    requested_by: uuid.UUID | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    file_size: int | None = None
    checksum: str | None = None
    error_message: str | None = None
    details: dict = Field(default_factory=dict)
    duration_seconds: float | None = None
    created_at: datetime


class BackupStatusResponse(CamelModel):
    health: str
    last_backup_at: datetime | None = None
    hours_since_last_backup: float | None = None
    total_backups: int
    failed_backups: int
    total_size_bytes: int
    last_recovery_test_at: datetime | None = None
    last_recovery_test_passed: bool | None = None
