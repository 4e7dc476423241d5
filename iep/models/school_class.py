"""School class model and its student/teacher join tables."""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship
from uuid_extensions import uuid7

from iep.models.base import Base, TenantOwnedMixin, TenantScopedModel, TimestampMixin


class SchoolClass(TenantScopedModel):
    """A class/section within a school."""

    __tablename__ = "school_classes"
    __table_args__ = (
        Index(
            "idx_classes_tenant",
            "tenant_id",
            postgresql_where=text("deleted_at IS NULL"),
        ),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    grade: Mapped[str] = mapped_column(String(20), nullable=False)
    section: Mapped[str | None] = mapped_column(String(10), nullable=True)
    capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    academic_year: Mapped[str | None] = mapped_column(String(20), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    student_links = relationship(
        "ClassStudent",
        back_populates="school_class",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    teacher_links = relationship(
        "ClassTeacher",
        back_populates="school_class",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def current_enrollment(self) -> int:
        return len(self.student_links)

    @property
    def is_full(self) -> bool:
        return self.capacity is not None and self.current_enrollment >= self.capacity


class ClassStudent(Base, TimestampMixin, TenantOwnedMixin):
    """Enrollment of a student in a class."""

    __tablename__ = "class_students"
    __table_args__ = (
        UniqueConstraint("class_id", "student_id", name="uq_class_students_pair"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid7,
    )
    class_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("school_classes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    student_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    enrolled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=text("now()"),
        nullable=False,
    )

    school_class = relationship("SchoolClass", back_populates="student_links", lazy="selectin")
    student = relationship("Student", back_populates="class_links", lazy="selectin")


class ClassTeacher(Base, TimestampMixin, TenantOwnedMixin):
    """Assignment of a teacher to a class."""

    __tablename__ = "class_teachers"
    __table_args__ = (
        UniqueConstraint("class_id", "teacher_id", name="uq_class_teachers_pair"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid7,
    )
    class_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("school_classes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    teacher_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("teachers.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    school_class = relationship("SchoolClass", back_populates="teacher_links", lazy="selectin")
    teacher = relationship("Teacher", back_populates="class_links", lazy="selectin")
