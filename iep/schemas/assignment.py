"""Pydantic schemas for assignments, submissions and their statistics."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import AliasChoices, BaseModel, Field, model_validator

from iep.models.assignment import AssignmentStatus, AssignmentType
from iep.schemas.common import CamelModel, TimestampedSchema


class RubricCriterion(BaseModel):
    criterion: str = Field(..., min_length=1)
    points: int = Field(..., ge=0)
    description: str | None = None


class AssignmentCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    instructions: str | None = None
    type: AssignmentType = AssignmentType.HOMEWORK
    subject: str = Field(..., min_length=1, max_length=100)
    class_id: uuid.UUID
    teacher_id: uuid.UUID
    due_date: datetime
    max_score: int = Field(100, ge=1, le=1000)
    rubric: list[RubricCriterion] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)


class AssignmentUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    instructions: str | None = None
    type: AssignmentType | None = None
    subject: str | None = Field(None, min_length=1, max_length=100)
    due_date: datetime | None = None
    max_score: int | None = Field(None, ge=1, le=1000)
    status: AssignmentStatus | None = None
    is_graded: bool | None = None
    rubric: list[RubricCriterion] | None = None
    metadata: dict[str, Any] | None = None


class AssignmentResponse(TimestampedSchema):
    title: str
    description: str | None = None
    instructions: str | None = None
    type: str
    subject: str
    class_id: uuid.UUID
    teacher_id: uuid.UUID
    due_date: datetime
    max_score: int
    status: str
    is_graded: bool
    rubric: list[dict] = Field(default_factory=list)
    metadata: dict = Field(
        default_factory=dict,
        validation_alias=AliasChoices("extra_metadata", "metadata"),
    )


class SubmissionCreate(BaseModel):
    student_id: uuid.UUID
    content: str | None = None
    file_ids: list[uuid.UUID] = Field(default_factory=list)

    @model_validator(mode="after")
    def has_content_or_files(self):
        if not self.content and not self.file_ids:
            raise ValueError("A submission needs content or at least one file")
        return self


class SubmissionGrade(BaseModel):
    score: Decimal = Field(..., ge=0)
    feedback: str | None = None


class SubmissionResponse(TimestampedSchema):
    assignment_id: uuid.UUID
    student_id: uuid.UUID
    submitted_at: datetime
    content: str | None = None
    file_ids: list[str] = Field(default_factory=list)
    score: float | None = None
    feedback: str | None = None
    status: str
    graded_by: uuid.UUID | None = None
    graded_at: datetime | None = None


class RecentAssignment(CamelModel):
    id: uuid.UUID
    title: str
    subject: str
    due_date: datetime
    status: str


class AssignmentStatisticsResponse(CamelModel):
    total_assignments: int
    active_assignments: int
    completed_assignments: int
    pending_grades: int
    total_submissions: int
    graded_submissions: int
    average_score: float
    completion_rate: float
    recent_assignments: list[RecentAssignment] = Field(default_factory=list)


class AssignmentDetailStatisticsResponse(CamelModel):
    assignment_id: uuid.UUID
    total_students: int
    total_submissions: int
    graded_submissions: int
    late_submissions: int
    average_score: float
    completion_rate: float
