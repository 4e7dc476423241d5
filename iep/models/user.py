"""User model with role-based access control."""

import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from uuid_extensions import uuid7

from iep.models.base import Base, SoftDeleteMixin, TimestampMixin


class Role(str, Enum):
    """User roles."""

    SUPER_ADMIN = "SUPER_ADMIN"  # Platform-wide admin (no tenant_id)
    ADMIN = "ADMIN"  # School admin
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"
    PARENT = "PARENT"


class User(Base, TimestampMixin, SoftDeleteMixin):
    """User account with role-based access."""

    __tablename__ = "users"
    __table_args__ = (
        # Email unique per tenant (NULL tenant_id for super admins handled separately)
        Index(
            "idx_users_email_tenant",
            "email",
            "tenant_id",
            unique=True,
            postgresql_where=text("deleted_at IS NULL AND tenant_id IS NOT NULL"),
        ),
        Index(
            "idx_users_email_super",
            "email",
            unique=True,
            postgresql_where=text("deleted_at IS NULL AND tenant_id IS NULL"),
        ),
        Index(
            "idx_users_tenant_role",
            "tenant_id",
            "role",
            postgresql_where=text("deleted_at IS NULL"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid7,
    )
    tenant_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=True,  # NULL for SUPER_ADMIN
        index=True,
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    language: Mapped[str] = mapped_column(String(5), nullable=False, default="tr")
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    tenant = relationship("Tenant", back_populates="users", lazy="selectin")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_super_admin(self) -> bool:
        return self.role == Role.SUPER_ADMIN.value

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    @property
    def is_staff(self) -> bool:
        return self.role in (Role.SUPER_ADMIN.value, Role.ADMIN.value, Role.TEACHER.value)

    def has_role(self, *roles: Role | str) -> bool:
        """Check if user has any of the given roles."""
        role_values = [r.value if isinstance(r, Role) else r for r in roles]
        return self.role in role_values
