from decimal import Decimal
from types import SimpleNamespace

import pytest

from iep.services.grade_service import (
    averages_by_type,
    calculate_student_grades,
    class_statistics,
    gpa_points,
    letter_grade,
    to_percentage,
    weighted_average,
)


def grade(grade_type, value, max_grade=100):
    return SimpleNamespace(grade_type=grade_type, grade_value=Decimal(value), max_grade=Decimal(max_grade))


@pytest.mark.parametrize(
    "percentage, letter, points",
    [(95, "A", 4.0), (90, "A", 4.0), (89.99, "B", 3.0), (70, "C", 2.0), (60, "D", 1.0), (59.9, "F", 0.0)],
)
def test_letter_grade_and_gpa(percentage, letter, points):
    assert letter_grade(percentage) == letter
    assert gpa_points(percentage) == points


def test_to_percentage():
    assert to_percentage(Decimal("45"), Decimal("50")) == pytest.approx(90.0)
    assert to_percentage(10, 0) == 0.0


def test_averages_by_type():
    grades = [grade("exam", 80), grade("exam", 40, 50), grade("homework", 18, 20)]

    assert averages_by_type(grades) == {"exam": 80.0, "homework": 90.0}


def test_weighted_average_uses_type_weights():
    averages = {"exam": 80, "homework": 90, "project": 70, "participation": 100, "quiz": 60}

    # 0.4*80 + 0.2*90 + 0.2*70 + 0.1*100 + 0.1*60
    assert weighted_average(averages) == 80.0


def test_weighted_average_renormalizes_missing_types():
    assert weighted_average({"homework": 85}) == 85.0
    # (0.4*70 + 0.2*100) / 0.6
    assert weighted_average({"exam": 70, "homework": 100}) == 80.0


def test_weighted_average_without_grades():
    assert weighted_average({}) == 0.0


def test_calculate_student_grades():
    result = calculate_student_grades([grade("exam", 92), grade("exam", 88), grade("quiz", 9, 10)])

    assert result["grade_count"] == 3
    assert result["averages_by_type"] == {"exam": 90.0, "quiz": 90.0}
    assert result["weighted_average"] == 90.0
    assert result["letter_grade"] == "A"
    assert result["gpa"] == 4.0


def test_class_statistics():
    stats = class_statistics([95, 85, 75, 65, 55])

    assert stats["count"] == 5
    assert stats["average"] == 75.0
    assert stats["highest"] == 95.0
    assert stats["lowest"] == 55.0
    assert stats["median"] == 75.0
    assert stats["standard_deviation"] == pytest.approx(14.14, abs=0.01)
    assert stats["distribution"] == {"A": 1, "B": 1, "C": 1, "D": 1, "F": 1}


def test_class_statistics_even_count_takes_upper_median():
    assert class_statistics([60, 70, 80, 90])["median"] == 80.0


def test_class_statistics_empty():
    stats = class_statistics([])

    assert stats["count"] == 0
    assert stats["average"] == 0.0
    assert sum(stats["distribution"].values()) == 0
