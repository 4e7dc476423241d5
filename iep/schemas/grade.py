"""Pydantic schemas for grades and grade calculations."""

import uuid
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from iep.models.grade import GradeType
from iep.schemas.common import CamelModel, TimestampedSchema


class GradeCreate(BaseModel):
    student_id: uuid.UUID
    class_id: uuid.UUID
    teacher_id: uuid.UUID | None = None
    assignment_id: uuid.UUID | None = None
    subject: str = Field(..., min_length=1, max_length=100)
    grade_type: GradeType
    grade_value: Decimal = Field(..., ge=0)
    max_grade: Decimal = Field(Decimal("100"), gt=0)
    weight: Decimal = Field(Decimal("1"), gt=0, le=10)
    grade_date: date
    exam_name: str | None = Field(None, max_length=255)
    description: str | None = None
    semester: int = Field(1, ge=1, le=2)
    academic_year: str = Field(..., min_length=4, max_length=20)

    @model_validator(mode="after")
    def value_within_max(self):
        if self.grade_value > self.max_grade:
            raise ValueError("grade_value cannot exceed max_grade")
        return self


class GradeBulkCreate(BaseModel):
    grades: list[GradeCreate] = Field(..., min_length=1, max_length=500)


class GradeUpdate(BaseModel):
    grade_value: Decimal | None = Field(None, ge=0)
    max_grade: Decimal | None = Field(None, gt=0)
    weight: Decimal | None = Field(None, gt=0, le=10)
    grade_type: GradeType | None = None
    grade_date: date | None = None
    exam_name: str | None = Field(None, max_length=255)
    description: str | None = None


class GradeResponse(TimestampedSchema):
    student_id: uuid.UUID
    class_id: uuid.UUID
    teacher_id: uuid.UUID | None = None
    assignment_id: uuid.UUID | None = None
    subject: str
    grade_type: str
    grade_value: float
    max_grade: float
    weight: float
    percentage: float
    grade_date: date
    exam_name: str | None = None
    description: str | None = None
    semester: int
    academic_year: str


class GradeCalculationResponse(CamelModel):
    student_id: uuid.UUID
    subject: str
    semester: int | None = None
    grade_count: int
    averages_by_type: dict[str, float]
    weighted_average: float
    letter_grade: str
    gpa: float


class GradeDistribution(BaseModel):
    A: int = 0
    B: int = 0
    C: int = 0
    D: int = 0
    F: int = 0


class ClassGradeStatisticsResponse(CamelModel):
    class_id: uuid.UUID | None = None
    subject: str | None = None
    count: int
    average: float
    highest: float
    lowest: float
    median: float
    standard_deviation: float
    distribution: GradeDistribution


class SubjectReport(CamelModel):
    subject: str
    weighted_average: float
    letter_grade: str
    gpa: float
    grade_count: int


class StudentReportResponse(CamelModel):
    student_id: uuid.UUID
    academic_year: str | None = None
    semester: int | None = None
    subjects: list[SubjectReport]
    overall_average: float
    overall_gpa: float
