"""Webhook models for third-party integrations."""

import secrets
import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from uuid_extensions import uuid7

from iep.models.base import Base, TenantOwnedMixin, TimestampMixin, utcnow

MAX_DELIVERY_ATTEMPTS = 3


class WebhookEventType(str, Enum):
    """Events a tenant can subscribe to."""

    STUDENT_CREATED = "student.created"
    STUDENT_UPDATED = "student.updated"
    STUDENT_DELETED = "student.deleted"

    ASSIGNMENT_CREATED = "assignment.created"
    ASSIGNMENT_PUBLISHED = "assignment.published"
    SUBMISSION_GRADED = "submission.graded"

    GRADE_CREATED = "grade.created"

    ATTENDANCE_MARKED = "attendance.marked"
    ATTENDANCE_BULK = "attendance.bulk"

    BACKUP_COMPLETED = "backup.completed"
    BACKUP_FAILED = "backup.failed"


class WebhookEventStatus(str, Enum):
    PENDING = "PENDING"
    DELIVERED = "DELIVERED"
    FAILED = "FAILED"


def generate_webhook_secret() -> str:
    """Generate a secure webhook signing secret."""
    return secrets.token_urlsafe(32)


class WebhookEndpoint(Base, TimestampMixin, TenantOwnedMixin):
    """A registered webhook endpoint for a tenant."""

    __tablename__ = "webhook_endpoints"
    __table_args__ = (
        Index(
            "idx_webhooks_tenant_active",
            "tenant_id",
            postgresql_where=text("is_active = true"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid7,
    )
    url: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    secret: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default=generate_webhook_secret,
    )
    events: Mapped[list] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
        server_default=text("'[]'::jsonb"),
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    webhook_events = relationship(
        "WebhookEvent",
        back_populates="endpoint",
        cascade="all, delete-orphan",
        lazy="noload",
    )

    def subscribes_to(self, event_type: str) -> bool:
        return event_type in self.events or "*" in self.events


class WebhookEvent(Base, TenantOwnedMixin):
    """Delivery log entry for one event sent to one endpoint."""

    __tablename__ = "webhook_events"
    __table_args__ = (
        Index(
            "idx_webhook_events_status",
            "status",
            postgresql_where=text("status IN ('PENDING', 'FAILED')"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid7,
    )
    endpoint_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("webhook_endpoints.id", ondelete="CASCADE"),
        nullable=False,
    )
    event_type: Mapped[str] = mapped_column(String(100), nullable=False)
    payload: Mapped[dict] = mapped_column(JSONB, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=WebhookEventStatus.PENDING.value,
    )
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_attempt_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    response_code: Mapped[int | None] = mapped_column(Integer, nullable=True)
    response_body: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=text("now()"),
        nullable=False,
    )

    endpoint = relationship("WebhookEndpoint", back_populates="webhook_events", lazy="selectin")

    def record_attempt(
        self, success: bool, response_code: int | None = None, response_body: str | None = None
    ) -> None:
        """Record a delivery attempt.

        The event stays PENDING until it is delivered or runs out of attempts.
        """
        self.attempts = (self.attempts or 0) + 1
        self.last_attempt_at = utcnow()
        self.response_code = response_code
        self.response_body = response_body[:1000] if response_body else None

        if success:
            self.status = WebhookEventStatus.DELIVERED.value
        elif self.attempts >= MAX_DELIVERY_ATTEMPTS:
            self.status = WebhookEventStatus.FAILED.value

    @property
    def can_retry(self) -> bool:
        return (
            self.status in (WebhookEventStatus.PENDING.value, WebhookEventStatus.FAILED.value)
            and self.attempts < MAX_DELIVERY_ATTEMPTS
        )
