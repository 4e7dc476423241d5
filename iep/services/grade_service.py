"""Grade service: grade CRUD plus weighted averages, letter grades and class analytics."""

import math
import uuid
from collections import defaultdict
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from iep.exceptions import ValidationException
from iep.models import Grade, GradeType, WebhookEventType
from iep.schemas.grade import GradeCreate, GradeUpdate
from iep.services.base_service import TenantScopedService
from iep.services.webhook_service import get_webhook_service

GRADE_TYPE_WEIGHTS = {
    GradeType.EXAM.value: 0.4,
    GradeType.HOMEWORK.value: 0.2,
    GradeType.PROJECT.value: 0.2,
    GradeType.PARTICIPATION.value: 0.1,
    GradeType.QUIZ.value: 0.1,
}

# (lower bound, letter, GPA points), highest first
LETTER_GRADES = (
    (90, "A", 4.0),
    (80, "B", 3.0),
    (70, "C", 2.0),
    (60, "D", 1.0),
)


def to_percentage(grade_value: float, max_grade: float) -> float:
    return float(grade_value) / float(max_grade) * 100 if max_grade else 0.0


def letter_grade(percentage: float) -> str:
    for bound, letter, _ in LETTER_GRADES:
        if percentage >= bound:
            return letter
    return "F"


def gpa_points(percentage: float) -> float:
    for bound, _, points in LETTER_GRADES:
        if percentage >= bound:
            return points
    return 0.0


def averages_by_type(grades: Iterable[Grade]) -> dict[str, float]:
    """Mean percentage per grade type."""
    buckets: dict[str, list[float]] = defaultdict(list)
    for grade in grades:
        buckets[grade.grade_type].append(to_percentage(grade.grade_value, grade.max_grade))
    return {
        grade_type: round(sum(values) / len(values), 2)
        for grade_type, values in buckets.items()
    }


def weighted_average(type_averages: dict[str, float]) -> float:
    """Combine per-type averages with the fixed type weights.

    Types without grades are left out and the remaining weights are
    renormalized, so a student with only homework is not pulled towards zero.
    """
    total_weight = sum(GRADE_TYPE_WEIGHTS.get(t, 0.0) for t in type_averages)
    if not total_weight:
        return 0.0
    weighted = sum(avg * GRADE_TYPE_WEIGHTS.get(t, 0.0) for t, avg in type_averages.items())
    return round(weighted / total_weight, 2)


def calculate_student_grades(grades: Iterable[Grade]) -> dict:
    grades = list(grades)
    type_averages = averages_by_type(grades)
    average = weighted_average(type_averages)
    return {
        "grade_count": len(grades),
        "averages_by_type": type_averages,
        "weighted_average": average,
        "letter_grade": letter_grade(average),
        "gpa": gpa_points(average),
    }


def class_statistics(percentages: list[float]) -> dict:
    """Summary statistics of a list of percentages.

    The median is the upper-middle element for even-length lists and the
    standard deviation is the population one.
    """
    distribution = {"A": 0, "B": 0, "C": 0, "D": 0, "F": 0}
    if not percentages:
        return {
            "count": 0,
            "average": 0.0,
            "highest": 0.0,
            "lowest": 0.0,
            "median": 0.0,
            "standard_deviation": 0.0,
            "distribution": distribution,
        }

    ordered = sorted(percentages)
    count = len(ordered)
    average = sum(ordered) / count
    variance = sum((value - average) ** 2 for value in ordered) / count

    for value in ordered:
        distribution[letter_grade(value)] += 1

    return {
        "count": count,
        "average": round(average, 2),
        "highest": round(ordered[-1], 2),
        "lowest": round(ordered[0], 2),
        "median": round(ordered[count // 2], 2),
        "standard_deviation": round(math.sqrt(variance), 2),
        "distribution": distribution,
    }


class GradeService(TenantScopedService[Grade]):
    """Service for managing grades."""

    model = Grade
    resource_name = "Grade"

    async def get_grades(
        self,
        db: AsyncSession,
        student_id: uuid.UUID | None = None,
        class_id: uuid.UUID | None = None,
        subject: str | None = None,
        grade_type: str | None = None,
        semester: int | None = None,
        academic_year: str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Grade], int]:
        query = self._filtered(student_id, class_id, subject, grade_type, semester, academic_year)
        return await self.paginate(db, query, page, page_size, order_by=Grade.grade_date.desc())

    def _filtered(
        self,
        student_id: uuid.UUID | None = None,
        class_id: uuid.UUID | None = None,
        subject: str | None = None,
        grade_type: str | None = None,
        semester: int | None = None,
        academic_year: str | None = None,
    ):
        query = self.scoped_query()
        if student_id:
            query = query.where(Grade.student_id == student_id)
        if class_id:
            query = query.where(Grade.class_id == class_id)
        if subject:
            query = query.where(Grade.subject == subject)
        if grade_type:
            query = query.where(Grade.grade_type == grade_type)
        if semester:
            query = query.where(Grade.semester == semester)
        if academic_year:
            query = query.where(Grade.academic_year == academic_year)
        return query

    async def create_grade(self, db: AsyncSession, data: GradeCreate) -> Grade:
        fields = data.model_dump()
        fields["grade_type"] = data.grade_type.value
        grade = await self.add(db, **fields)
        await get_webhook_service().dispatch_event(
            db,
            WebhookEventType.GRADE_CREATED.value,
            {
                "grade_id": str(grade.id),
                "student_id": str(grade.student_id),
                "subject": grade.subject,
                "grade_type": grade.grade_type,
                "percentage": grade.percentage,
            },
        )
        return grade

    async def bulk_create(self, db: AsyncSession, grades: list[GradeCreate]) -> list[Grade]:
        """Create several grades in the request transaction; one failure aborts all."""
        return [await self.create_grade(db, data) for data in grades]

    async def update_grade(self, db: AsyncSession, grade_id: uuid.UUID, data: GradeUpdate) -> Grade:
        grade = await self.get(db, grade_id)
        value = data.grade_value if data.grade_value is not None else grade.grade_value
        maximum = data.max_grade if data.max_grade is not None else grade.max_grade
        if value > maximum:
            raise ValidationException(
                [{"field": "grade_value", "message": "grade_value cannot exceed max_grade"}]
            )
        return await self.apply_update(db, grade, data)

    async def delete_grade(self, db: AsyncSession, grade_id: uuid.UUID) -> None:
        await self.remove(db, grade_id)

    async def calculate(
        self,
        db: AsyncSession,
        student_id: uuid.UUID,
        subject: str,
        semester: int | None = None,
        academic_year: str | None = None,
    ) -> dict:
        """Weighted average, letter grade and GPA of one student in one subject."""
        query = self._filtered(
            student_id=student_id, subject=subject, semester=semester, academic_year=academic_year
        )
        grades = (await db.execute(query)).scalars().all()
        return {
            "student_id": student_id,
            "subject": subject,
            "semester": semester,
            **calculate_student_grades(grades),
        }

    async def class_analytics(
        self,
        db: AsyncSession,
        class_id: uuid.UUID | None = None,
        subject: str | None = None,
        semester: int | None = None,
        academic_year: str | None = None,
    ) -> dict:
        query = self._filtered(
            class_id=class_id, subject=subject, semester=semester, academic_year=academic_year
        )
        grades = (await db.execute(query)).scalars().all()
        percentages = [to_percentage(g.grade_value, g.max_grade) for g in grades]
        return {"class_id": class_id, "subject": subject, **class_statistics(percentages)}

    async def student_report(
        self,
        db: AsyncSession,
        student_id: uuid.UUID,
        semester: int | None = None,
        academic_year: str | None = None,
    ) -> dict:
        """Per-subject results and overall average/GPA for a student."""
        query = self._filtered(student_id=student_id, semester=semester, academic_year=academic_year)
        grades = (await db.execute(query)).scalars().all()

        by_subject: dict[str, list[Grade]] = defaultdict(list)
        for grade in grades:
            by_subject[grade.subject].append(grade)

        subjects = []
        for subject in sorted(by_subject):
            result = calculate_student_grades(by_subject[subject])
            subjects.append(
                {
                    "subject": subject,
                    "weighted_average": result["weighted_average"],
                    "letter_grade": result["letter_grade"],
                    "gpa": result["gpa"],
                    "grade_count": result["grade_count"],
                }
            )

        overall_average = (
            round(sum(s["weighted_average"] for s in subjects) / len(subjects), 2) if subjects else 0.0
        )
        overall_gpa = round(sum(s["gpa"] for s in subjects) / len(subjects), 2) if subjects else 0.0

        return {
            "student_id": student_id,
            "academic_year": academic_year,
            "semester": semester,
            "subjects": subjects,
            "overall_average": overall_average,
            "overall_gpa": overall_gpa,
        }


# Singleton instance
_grade_service: GradeService | None = None


def get_grade_service() -> GradeService:
    """Get the grade service singleton."""
    global _grade_service
    if _grade_service is None:
        _grade_service = GradeService()
    return _grade_service
