"""Onboarding progress model."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column
from uuid_extensions import uuid7

from iep.models.base import Base, TenantOwnedMixin, TimestampMixin


class OnboardingProgress(Base, TimestampMixin, TenantOwnedMixin):
    """Where a user is in the onboarding flow."""

    __tablename__ = "onboarding_progress"
    __table_args__ = (
        UniqueConstraint("tenant_id", "user_id", name="uq_onboarding_tenant_user"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid7,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    current_step: Mapped[str] = mapped_column(String(50), nullable=False)
    completed_steps: Mapped[list] = mapped_column(
        JSONB, nullable=False, default=list, server_default=text("'[]'::jsonb")
    )
    skipped_steps: Mapped[list] = mapped_column(
        JSONB, nullable=False, default=list, server_default=text("'[]'::jsonb")
    )
    step_data: Mapped[dict] = mapped_column(
        JSONB, nullable=False, default=dict, server_default=text("'{}'::jsonb")
    )
    preferences: Mapped[dict] = mapped_column(
        JSONB, nullable=False, default=dict, server_default=text("'{}'::jsonb")
    )
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=text("now()"),
        nullable=False,
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    actual_completion_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None
