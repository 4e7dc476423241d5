"""Backup, restore and recovery-test job records."""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import BigInteger, DateTime, ForeignKey, Index, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column
from uuid_extensions import uuid7

from iep.models.base import Base, TenantOwnedMixin, TimestampMixin


class JobKind(str, Enum):
    BACKUP = "BACKUP"
    RESTORE = "RESTORE"
    RECOVERY_TEST = "RECOVERY_TEST"


class BackupType(str, Enum):
    FULL = "full"
    INCREMENTAL = "incremental"
    DIFFERENTIAL = "differential"


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class BackupJob(Base, TimestampMixin, TenantOwnedMixin):
    """One backup, restore or disaster-recovery test run.

    Rows are append-only: a job moves pending -> running -> completed|failed
    and is never deleted.
    """

    __tablename__ = "backup_jobs"
    __table_args__ = (
        Index("idx_backup_jobs_tenant_kind", "tenant_id", "job_kind", "created_at"),
        Index(
            "idx_backup_jobs_completed",
            "tenant_id",
            "completed_at",
            postgresql_where=text("status = 'completed'"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid7,
    )
    job_kind: Mapped[str] = mapped_column(String(20), nullable=False, default=JobKind.BACKUP.value)
    backup_type: Mapped[str] = mapped_column(String(20), nullable=False, default=BackupType.FULL.value)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=JobStatus.PENDING.value)
    source_backup_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("backup_jobs.id", ondelete="SET NULL"),
        nullable=True,
    )
    requested_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    file_size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    checksum: Mapped[str | None] = mapped_column(String(128), nullable=True)
    storage_path: Mapped[str | None] = mapped_column(String(500), nullable=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    details: Mapped[dict] = mapped_column(
        JSONB,
        nullable=False,
        default=dict,
        server_default=text("'{}'::jsonb"),
    )

    @property
    def duration_seconds(self) -> float | None:
        if not self.started_at or not self.completed_at:
            return None
        return (self.completed_at - self.started_at).total_seconds()
