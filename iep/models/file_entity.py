"""File storage models: uploaded files, shares and per-tenant quotas."""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import BigInteger, DateTime, ForeignKey, Index, Integer, String, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from uuid_extensions import uuid7

from iep.models.base import Base, TenantOwnedMixin, TenantScopedModel, TimestampMixin, utcnow


class FileCategory(str, Enum):
    """Categories of uploaded files."""

    IMAGE = "image"
    DOCUMENT = "document"
    VIDEO = "video"
    AUDIO = "audio"
    ARCHIVE = "archive"


class FileStatus(str, Enum):
    PENDING = "PENDING"  # presigned URL issued, upload not confirmed
    ACTIVE = "ACTIVE"
    DELETED = "DELETED"


class SharePermission(str, Enum):
    VIEW = "VIEW"
    DOWNLOAD = "DOWNLOAD"


class FileEntity(TenantScopedModel):
    """Represents an uploaded file stored in R2."""

    __tablename__ = "file_entities"
    __table_args__ = (
        Index(
            "idx_files_tenant",
            "tenant_id",
            postgresql_where=text("deleted_at IS NULL"),
        ),
    )

    storage_path: Mapped[str] = mapped_column(String(500), nullable=False)
    original_name: Mapped[str] = mapped_column(String(255), nullable=False)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False)
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=FileStatus.PENDING.value,
    )
    uploaded_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    shares = relationship(
        "FileShare",
        back_populates="file",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def file_extension(self) -> str:
        if "." in self.original_name:
            return self.original_name.rsplit(".", 1)[-1].lower()
        return ""


class FileShare(Base, TimestampMixin, TenantOwnedMixin):
    """Grants a user or a whole class access to a file."""

    __tablename__ = "file_shares"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid7,
    )
    file_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("file_entities.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    shared_with_user_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
    )
    shared_with_class_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("school_classes.id", ondelete="CASCADE"),
        nullable=True,
    )
    permission: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=SharePermission.VIEW.value,
    )
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    shared_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    file = relationship("FileEntity", back_populates="shares", lazy="selectin")

    @property
    def is_expired(self) -> bool:
        return self.expires_at is not None and self.expires_at <= utcnow()


class StorageQuota(Base, TimestampMixin):
    """Storage usage of a tenant. One row per tenant."""

    __tablename__ = "storage_quotas"

    tenant_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("tenants.id", ondelete="CASCADE"),
        primary_key=True,
    )
    quota_bytes: Mapped[int] = mapped_column(BigInteger, nullable=False)
    used_bytes: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    file_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    @property
    def available_bytes(self) -> int:
        return max(self.quota_bytes - self.used_bytes, 0)

    @property
    def usage_percentage(self) -> float:
        if self.quota_bytes <= 0:
            return 100.0
        return round(self.used_bytes / self.quota_bytes * 100, 2)

    def can_store(self, size: int) -> bool:
        return self.used_bytes + size <= self.quota_bytes
