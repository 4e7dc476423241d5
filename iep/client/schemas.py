"""Response shapes the client expects from the API.

List and detail routes answer with the ``{"status", "data", "pagination"}``
envelope in snake_case; statistics routes answer with a bare camelCase
object.
"""

import uuid
from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr
from pydantic.alias_generators import to_camel


class ResponseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class CamelResponseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", alias_generator=to_camel, populate_by_name=True)


class Pagination(ResponseModel):
    page: int
    page_size: int
    total_items: int
    total_pages: int
    has_next: bool
    has_prev: bool


class Envelope(ResponseModel):
    status: str
    message: str | None = None


class TenantRecord(ResponseModel):
    id: uuid.UUID
    tenant_id: uuid.UUID
    created_at: datetime
    updated_at: datetime


# Assignments

class Assignment(TenantRecord):
    title: str
    description: str | None = None
    type: Literal["homework", "exam", "project", "quiz", "presentation"]
    subject: str
    class_id: uuid.UUID
    teacher_id: uuid.UUID
    due_date: datetime
    max_score: int
    status: Literal["draft", "published", "completed", "archived"]
    is_graded: bool


class AssignmentResponse(Envelope):
    data: Assignment


class AssignmentListResponse(Envelope):
    data: list[Assignment]
    pagination: Pagination | None = None


class RecentAssignment(CamelResponseModel):
    id: uuid.UUID
    title: str
    subject: str
    due_date: datetime
    status: str


class AssignmentStatistics(CamelResponseModel):
    total_assignments: int
    active_assignments: int
    completed_assignments: int
    pending_grades: int
    completion_rate: float
    average_score: float
    graded_submissions: int
    total_submissions: int
    recent_assignments: list[RecentAssignment] | None = None


class Submission(TenantRecord):
    assignment_id: uuid.UUID
    student_id: uuid.UUID
    submitted_at: datetime
    score: float | None = None
    status: Literal["submitted", "graded", "returned", "late"]


class SubmissionListResponse(Envelope):
    data: list[Submission]


# People and classes

class Student(TenantRecord):
    student_number: str | None = None
    first_name: str
    last_name: str
    email: EmailStr | None = None
    is_active: bool


class StudentListResponse(Envelope):
    data: list[Student]
    pagination: Pagination | None = None


class Teacher(TenantRecord):
    first_name: str
    last_name: str
    email: EmailStr
    subject: str | None = None
    is_active: bool


class TeacherListResponse(Envelope):
    data: list[Teacher]
    pagination: Pagination | None = None


class SchoolClass(TenantRecord):
    name: str
    grade: str
    section: str | None = None
    capacity: int | None = None
    current_enrollment: int | None = None


class ClassListResponse(Envelope):
    data: list[SchoolClass]
    pagination: Pagination | None = None


# Attendance and grades

class AttendanceRecord(ResponseModel):
    id: uuid.UUID
    tenant_id: uuid.UUID
    student_id: uuid.UUID
    class_id: uuid.UUID
    date: date
    status: Literal["present", "absent", "late", "excused", "sick"]


class AttendanceRecordResponse(Envelope):
    data: AttendanceRecord


class AttendanceListResponse(Envelope):
    data: list[AttendanceRecord]
    pagination: Pagination | None = None


class AttendanceStatistics(CamelResponseModel):
    total_days: int
    present_days: int
    absent_days: int
    late_days: int
    excused_days: int
    sick_days: int
    attendance_rate: float
    punctuality_rate: float
    trend: Literal["improving", "declining", "stable"]


class Grade(TenantRecord):
    student_id: uuid.UUID
    class_id: uuid.UUID
    subject: str
    grade_type: str
    grade_value: float
    max_grade: float
    percentage: float
    semester: int
    academic_year: str


class GradeListResponse(Envelope):
    data: list[Grade]
    pagination: Pagination | None = None


class GradeCalculation(CamelResponseModel):
    student_id: uuid.UUID
    subject: str
    grade_count: int
    weighted_average: float
    letter_grade: str
    gpa: float


class GradeStatistics(CamelResponseModel):
    count: int
    average: float
    highest: float
    lowest: float
    median: float
    standard_deviation: float
    distribution: dict[str, int]


class HealthCheck(ResponseModel):
    status: str
    timestamp: datetime
    version: str | None = None
    checks: dict[str, str] | None = None
