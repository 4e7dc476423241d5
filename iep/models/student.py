"""Student profile model."""

import uuid
from datetime import date

from sqlalchemy import Boolean, Date, ForeignKey, Index, String, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from iep.models.base import TenantScopedModel


class Student(TenantScopedModel):
    """A student enrolled in a school.

    The profile can exist without a login; ``user_id`` links it to a STUDENT
    account once one is created.
    """

    __tablename__ = "students"
    __table_args__ = (
        Index(
            "idx_students_tenant",
            "tenant_id",
            postgresql_where=text("deleted_at IS NULL"),
        ),
        Index(
            "idx_students_number_tenant",
            "tenant_id",
            "student_number",
            unique=True,
            postgresql_where=text("deleted_at IS NULL AND student_number IS NOT NULL"),
        ),
    )

    user_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    student_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    class_links = relationship("ClassStudent", back_populates="student", lazy="selectin")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def class_id(self) -> uuid.UUID | None:
        """The most recent class enrollment, if any."""
        if not self.class_links:
            return None
        return max(self.class_links, key=lambda link: link.enrolled_at).class_id
