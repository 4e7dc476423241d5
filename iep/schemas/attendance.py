"""Attendance-related Pydantic schemas."""

import uuid
from datetime import date as date_type
from datetime import datetime, time

from pydantic import BaseModel, ConfigDict, Field

from iep.models.attendance import AttendanceStatus
from iep.schemas.common import CamelModel


class AttendanceMark(BaseModel):
    """Mark (or re-mark) one student's attendance for a day."""

    student_id: uuid.UUID
    class_id: uuid.UUID
    date: date_type = Field(default_factory=date_type.today)
    status: AttendanceStatus = AttendanceStatus.PRESENT
    time_in: time | None = None
    time_out: time | None = None
    notes: str | None = None
    excuse_reason: str | None = None


class AttendanceUpdate(BaseModel):
    status: AttendanceStatus | None = None
    time_in: time | None = None
    time_out: time | None = None
    notes: str | None = None
    excuse_reason: str | None = None


class BulkAttendanceRecord(BaseModel):
    student_id: uuid.UUID
    status: AttendanceStatus
    time_in: time | None = None
    notes: str | None = None


class BulkAttendanceCreate(BaseModel):
    class_id: uuid.UUID
    date: date_type = Field(default_factory=date_type.today)
    records: list[BulkAttendanceRecord] = Field(..., min_length=1)


class BulkAttendanceResponse(BaseModel):
    success_count: int
    error_count: int
    errors: list[dict] = Field(default_factory=list)


class AttendanceRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    tenant_id: uuid.UUID
    student_id: uuid.UUID
    class_id: uuid.UUID
    date: date_type
    status: str
    time_in: time | None = None
    time_out: time | None = None
    notes: str | None = None
    excuse_reason: str | None = None
    marked_by: uuid.UUID | None = None
    parent_notified: bool
    created_at: datetime
    updated_at: datetime


class AttendanceStatisticsResponse(CamelModel):
    total_days: int
    present_days: int
    absent_days: int
    late_days: int
    excused_days: int
    sick_days: int
    attendance_rate: float
    punctuality_rate: float
    trend: str


class ClassDailySummaryResponse(CamelModel):
    class_id: uuid.UUID
    date: date_type
    total_students: int
    marked: int
    unmarked: int
    present: int
    absent: int
    late: int
    excused: int
    sick: int
    attendance_rate: float
