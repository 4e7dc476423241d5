"""Pydantic schemas for school classes and their memberships."""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from iep.schemas.common import TimestampedSchema


class SchoolClassCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    grade: str = Field(..., min_length=1, max_length=20)
    section: str | None = Field(None, max_length=10)
    capacity: int | None = Field(None, ge=1, le=200)
    academic_year: str | None = Field(None, max_length=20)


class SchoolClassUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    grade: str | None = Field(None, min_length=1, max_length=20)
    section: str | None = Field(None, max_length=10)
    capacity: int | None = Field(None, ge=1, le=200)
    academic_year: str | None = Field(None, max_length=20)
    is_active: bool | None = None


class SchoolClassResponse(TimestampedSchema):
    name: str
    grade: str
    section: str | None = None
    capacity: int | None = None
    academic_year: str | None = None
    current_enrollment: int
    is_active: bool


class EnrollStudentRequest(BaseModel):
    student_id: uuid.UUID


class AssignTeacherRequest(BaseModel):
    teacher_id: uuid.UUID
    is_primary: bool = False


class ClassStudentResponse(BaseModel):
    student_id: uuid.UUID
    first_name: str
    last_name: str
    enrolled_at: datetime


class ClassTeacherResponse(BaseModel):
    teacher_id: uuid.UUID
    first_name: str
    last_name: str
    subject: str | None = None
    is_primary: bool
