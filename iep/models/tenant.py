"""Tenant model for multi-tenancy support."""

import uuid
from enum import Enum
from typing import Any

from sqlalchemy import Boolean, Index, String, Text, text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from uuid_extensions import uuid7

from iep.models.base import Base, SoftDeleteMixin, TimestampMixin


class SchoolType(str, Enum):
    """Type of school a tenant runs."""

    PRIMARY = "primary"
    MIDDLE = "middle"
    HIGH = "high"
    SPECIAL_EDUCATION = "special_education"
    OTHER = "other"


class Tenant(Base, TimestampMixin, SoftDeleteMixin):
    """A school. Root of every tenant-scoped row."""

    __tablename__ = "tenants"
    __table_args__ = (
        Index("idx_tenants_subdomain", "subdomain", postgresql_where=text("deleted_at IS NULL")),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid7,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    subdomain: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    school_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default=SchoolType.SPECIAL_EDUCATION.value,
    )
    settings: Mapped[dict] = mapped_column(
        JSONB,
        nullable=False,
        default=dict,
        server_default=text("'{}'::jsonb"),
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    onboarding_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    users = relationship("User", back_populates="tenant", lazy="noload")

    def get_setting(self, key: str, default: Any = None) -> Any:
        """Get a setting value by dot-notation key."""
        value = self.settings
        for k in key.split("."):
            if not isinstance(value, dict):
                return default
            value = value.get(k)
            if value is None:
                return default
        return value

    def set_setting(self, key: str, value: Any) -> None:
        """Set a setting value by dot-notation key.

        The JSONB column is replaced rather than mutated in place, otherwise
        SQLAlchemy would not notice the change.
        """
        keys = key.split(".")
        settings = dict(self.settings or {})
        current = settings
        for k in keys[:-1]:
            current[k] = dict(current.get(k) or {})
            current = current[k]
        current[keys[-1]] = value
        self.settings = settings

    @property
    def language(self) -> str:
        return self.get_setting("language", "tr")

    @property
    def timezone(self) -> str:
        return self.get_setting("timezone", "Europe/Istanbul")


def get_default_tenant_settings() -> dict:
    """Default settings blob for a newly created school."""
    return {
        "language": "tr",
        "timezone": "Europe/Istanbul",
        "academic_year": "2024-2025",
        "grading": {
            "scale": "percentage",
            "passing_grade": 60,
        },
        "attendance": {
            "notify_parents_on_absence": True,
            "late_threshold_minutes": 15,
        },
        "features": {
            "assignments": True,
            "grades": True,
            "attendance": True,
            "files": True,
            "webhooks": False,
        },
    }
