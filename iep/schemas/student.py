"""Pydantic schemas for Student entities."""

import uuid
from datetime import date

from pydantic import BaseModel, EmailStr, Field

from iep.schemas.common import TimestampedSchema


class StudentBase(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr | None = None
    student_number: str | None = Field(None, max_length=50)
    date_of_birth: date | None = None


class StudentCreate(StudentBase):
    """Schema for creating a student, optionally enrolling them straight away."""

    class_id: uuid.UUID | None = None
    user_id: uuid.UUID | None = None


class StudentUpdate(BaseModel):
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    email: EmailStr | None = None
    student_number: str | None = Field(None, max_length=50)
    date_of_birth: date | None = None
    is_active: bool | None = None


class StudentResponse(TimestampedSchema):
    first_name: str
    last_name: str
    email: str | None = None
    student_number: str | None = None
    date_of_birth: date | None = None
    user_id: uuid.UUID | None = None
    class_id: uuid.UUID | None = None
    is_active: bool
    full_name: str
