import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

from iep.services.assignment_service import (
    compute_assignment_detail_statistics,
    compute_assignment_statistics,
)
from iep.services.attendance_service import attendance_trend, compute_attendance_statistics

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def record(day_offset, status):
    return SimpleNamespace(date=date(2026, 10, 1) + timedelta(days=day_offset), status=status)


def test_attendance_statistics_counts_and_rates():
    records = [
        record(0, "present"),
        record(1, "present"),
        record(2, "late"),
        record(3, "absent"),
        record(4, "sick"),
    ]

    stats = compute_attendance_statistics(records)

    assert stats["total_days"] == 5
    assert stats["present_days"] == 2
    assert stats["late_days"] == 1
    assert stats["absent_days"] == 1
    assert stats["excused_days"] == 0
    assert stats["sick_days"] == 1
    # present and late both count as attended
    assert stats["attendance_rate"] == 60.0
    assert stats["punctuality_rate"] == 66.67


def test_attendance_statistics_empty():
    stats = compute_attendance_statistics([])

    assert stats["total_days"] == 0
    assert stats["attendance_rate"] == 0.0
    assert stats["punctuality_rate"] == 0.0
    assert stats["trend"] == "stable"


def test_trend_improving():
    records = [record(0, "absent"), record(1, "absent"), record(2, "present"), record(3, "present")]
    assert attendance_trend(records) == "improving"


def test_trend_declining_regardless_of_input_order():
    records = [record(3, "absent"), record(0, "present"), record(2, "absent"), record(1, "present")]
    assert attendance_trend(records) == "declining"


def test_trend_stable_within_threshold():
    records = [record(i, "present") for i in range(10)]
    assert attendance_trend(records) == "stable"


def assignment(status, due_in_days, created_offset=0, **extra):
    return SimpleNamespace(
        id=uuid.uuid4(),
        title=extra.get("title", "Ödev"),
        subject="Matematik",
        status=status,
        due_date=NOW + timedelta(days=due_in_days),
        created_at=NOW - timedelta(days=created_offset),
    )


def submission(assignment_id, status, score=None):
    return SimpleNamespace(
        assignment_id=assignment_id,
        status=status,
        score=Decimal(score) if score is not None else None,
    )


def test_assignment_statistics():
    open_one = assignment("published", 3, created_offset=1)
    past_due = assignment("published", -2, created_offset=5)
    draft = assignment("draft", 10, created_offset=0)
    submissions = [
        submission(open_one.id, "graded", 80),
        submission(open_one.id, "submitted"),
        submission(past_due.id, "returned", 60),
        submission(past_due.id, "late"),
    ]

    stats = compute_assignment_statistics([open_one, past_due, draft], submissions, now=NOW)

    assert stats["total_assignments"] == 3
    assert stats["active_assignments"] == 2
    assert stats["completed_assignments"] == 1
    assert stats["pending_grades"] == 1
    assert stats["total_submissions"] == 4
    assert stats["graded_submissions"] == 2
    assert stats["average_score"] == 70.0
    # graded + submitted over all submissions to published assignments
    assert stats["completion_rate"] == 50.0
    assert [a["id"] for a in stats["recent_assignments"]] == [draft.id, open_one.id, past_due.id]


def test_assignment_statistics_without_data():
    stats = compute_assignment_statistics([], [], now=NOW)

    assert stats["total_assignments"] == 0
    assert stats["average_score"] == 0.0
    assert stats["completion_rate"] == 0.0
    assert stats["recent_assignments"] == []


def test_recent_assignments_are_capped():
    assignments = [assignment("published", 1, created_offset=i) for i in range(8)]

    stats = compute_assignment_statistics(assignments, [], now=NOW)

    assert len(stats["recent_assignments"]) == 5


def test_assignment_detail_statistics():
    assignment_id = uuid.uuid4()
    submissions = [
        submission(assignment_id, "graded", 90),
        submission(assignment_id, "late"),
        submission(assignment_id, "submitted"),
    ]

    stats = compute_assignment_detail_statistics(assignment_id, submissions, enrolled_students=4)

    assert stats["total_students"] == 4
    assert stats["total_submissions"] == 3
    assert stats["graded_submissions"] == 1
    assert stats["late_submissions"] == 1
    assert stats["average_score"] == 90.0
    assert stats["completion_rate"] == 75.0
