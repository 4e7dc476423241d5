"""Assignment and submission models."""

import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from iep.models.base import TenantScopedModel, utcnow


class AssignmentType(str, Enum):
    HOMEWORK = "homework"
    EXAM = "exam"
    PROJECT = "project"
    QUIZ = "quiz"
    PRESENTATION = "presentation"


class AssignmentStatus(str, Enum):
    """Lifecycle: draft -> published -> completed | archived."""

    DRAFT = "draft"
    PUBLISHED = "published"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class SubmissionStatus(str, Enum):
    SUBMITTED = "submitted"
    GRADED = "graded"
    RETURNED = "returned"
    LATE = "late"


class Assignment(TenantScopedModel):
    """Work set for a class by a teacher."""

    __tablename__ = "assignments"
    __table_args__ = (
        Index(
            "idx_assignments_tenant_status",
            "tenant_id",
            "status",
            postgresql_where=text("deleted_at IS NULL"),
        ),
        Index("idx_assignments_class_due", "class_id", "due_date"),
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    instructions: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=AssignmentType.HOMEWORK.value,
    )
    subject: Mapped[str] = mapped_column(String(100), nullable=False)
    class_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("school_classes.id", ondelete="CASCADE"),
        nullable=False,
    )
    teacher_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("teachers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    due_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    max_score: Mapped[int] = mapped_column(nullable=False, default=100)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=AssignmentStatus.DRAFT.value,
    )
    is_graded: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    rubric: Mapped[list] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
        server_default=text("'[]'::jsonb"),
    )
    # "metadata" is reserved on declarative classes
    extra_metadata: Mapped[dict] = mapped_column(
        "metadata",
        JSONB,
        nullable=False,
        default=dict,
        server_default=text("'{}'::jsonb"),
    )

    submissions = relationship(
        "AssignmentSubmission",
        back_populates="assignment",
        lazy="noload",
    )

    @property
    def is_overdue(self) -> bool:
        return self.due_date < utcnow()


class AssignmentSubmission(TenantScopedModel):
    """A student's submission for an assignment."""

    __tablename__ = "assignment_submissions"
    __table_args__ = (
        UniqueConstraint("assignment_id", "student_id", name="uq_submission_assignment_student"),
        Index("idx_submissions_status", "tenant_id", "status"),
    )

    assignment_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("assignments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    student_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    file_ids: Mapped[list] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
        server_default=text("'[]'::jsonb"),
    )
    score: Mapped[Decimal | None] = mapped_column(Numeric(6, 2), nullable=True)
    feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=SubmissionStatus.SUBMITTED.value,
    )
    graded_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    graded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    assignment = relationship("Assignment", back_populates="submissions", lazy="selectin")
