"""Grade model."""

import uuid
from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from iep.models.base import TenantScopedModel


class GradeType(str, Enum):
    EXAM = "exam"
    HOMEWORK = "homework"
    PROJECT = "project"
    PARTICIPATION = "participation"
    QUIZ = "quiz"


class Grade(TenantScopedModel):
    """A single graded result for a student in a subject."""

    __tablename__ = "grades"
    __table_args__ = (
        CheckConstraint("grade_value >= 0", name="ck_grades_value_non_negative"),
        CheckConstraint("max_grade > 0", name="ck_grades_max_positive"),
        CheckConstraint("semester IN (1, 2)", name="ck_grades_semester"),
        Index(
            "idx_grades_student_subject",
            "tenant_id",
            "student_id",
            "subject",
            postgresql_where=text("deleted_at IS NULL"),
        ),
        Index("idx_grades_class", "class_id", "subject"),
    )

    student_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
    )
    class_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("school_classes.id", ondelete="CASCADE"),
        nullable=False,
    )
    teacher_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("teachers.id", ondelete="SET NULL"),
        nullable=True,
    )
    assignment_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("assignments.id", ondelete="SET NULL"),
        nullable=True,
    )
    subject: Mapped[str] = mapped_column(String(100), nullable=False)
    grade_type: Mapped[str] = mapped_column(String(20), nullable=False)
    grade_value: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False)
    max_grade: Mapped[Decimal] = mapped_column(Numeric(6, 2), nullable=False, default=100)
    weight: Mapped[Decimal] = mapped_column(Numeric(4, 2), nullable=False, default=1)
    grade_date: Mapped[date] = mapped_column(Date, nullable=False)
    exam_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    semester: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    academic_year: Mapped[str] = mapped_column(String(20), nullable=False)

    @property
    def percentage(self) -> float:
        return float(self.grade_value) / float(self.max_grade) * 100
