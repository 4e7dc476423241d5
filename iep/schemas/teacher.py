"""Pydantic schemas for Teacher entities."""

import uuid

from pydantic import BaseModel, EmailStr, Field

from iep.schemas.common import TimestampedSchema


class TeacherCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    subject: str | None = Field(None, max_length=100)
    user_id: uuid.UUID | None = None


class TeacherUpdate(BaseModel):
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    email: EmailStr | None = None
    subject: str | None = Field(None, max_length=100)
    is_active: bool | None = None


class TeacherResponse(TimestampedSchema):
    first_name: str
    last_name: str
    email: str
    subject: str | None = None
    user_id: uuid.UUID | None = None
    is_active: bool
    full_name: str
