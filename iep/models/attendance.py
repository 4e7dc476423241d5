"""Attendance tracking model."""

import uuid
import datetime
from enum import Enum

from sqlalchemy import (
    Boolean,
    Date,
    ForeignKey,
    Index,
    String,
    Text,
    Time,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from iep.models.base import TenantScopedModel


class AttendanceStatus(str, Enum):
    """Attendance status options."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"
    SICK = "sick"


class AttendanceRecord(TenantScopedModel):
    """Daily attendance record for a student."""

    __tablename__ = "attendance_records"
    __table_args__ = (
        UniqueConstraint("tenant_id", "student_id", "date", name="uq_attendance_student_date"),
        Index("idx_attendance_tenant_date", "tenant_id", "date"),
        Index("idx_attendance_class_date", "class_id", "date"),
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
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=AttendanceStatus.PRESENT.value,
    )
    time_in: Mapped[datetime.time | None] = mapped_column(Time, nullable=True)
    time_out: Mapped[datetime.time | None] = mapped_column(Time, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    excuse_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    marked_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    parent_notified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    @property
    def is_present(self) -> bool:
        """Present or late both count as attended."""
        return self.status in (AttendanceStatus.PRESENT.value, AttendanceStatus.LATE.value)
