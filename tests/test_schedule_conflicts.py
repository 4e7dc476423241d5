import uuid
from datetime import time
from types import SimpleNamespace

from iep.services.schedule_service import conflicts_between, detect_conflicts, slots_overlap

CLASS_A = uuid.uuid4()
CLASS_B = uuid.uuid4()
TEACHER = uuid.uuid4()


def slot(day, start, end, class_id=CLASS_A, teacher_id=None, classroom=None, subject="Matematik"):
    return SimpleNamespace(
        id=uuid.uuid4(),
        class_id=class_id,
        teacher_id=teacher_id,
        classroom=classroom,
        subject=subject,
        day_of_week=day,
        start_time=time(*start),
        end_time=time(*end),
    )


def test_overlapping_slots():
    assert slots_overlap(slot(0, (9, 0), (10, 0)), slot(0, (9, 30), (10, 30)))


def test_touching_slots_do_not_overlap():
    assert not slots_overlap(slot(0, (9, 0), (10, 0)), slot(0, (10, 0), (11, 0)))


def test_different_days_do_not_overlap():
    assert not slots_overlap(slot(0, (9, 0), (10, 0)), slot(1, (9, 0), (10, 0)))


def test_same_class_overlap_is_high_severity():
    first = slot(2, (9, 0), (10, 0))
    second = slot(2, (9, 40), (11, 0), subject="Fen Bilimleri")

    conflicts = conflicts_between(first, second)

    assert len(conflicts) == 1
    conflict = conflicts[0]
    assert conflict["type"] == "class_overlap"
    assert conflict["severity"] == "high"
    assert conflict["start_time"] == time(9, 40)
    assert conflict["end_time"] == time(10, 0)
    assert conflict["schedule_ids"] == [first.id, second.id]
    assert "Wednesday" in conflict["description"]


def test_teacher_and_classroom_overlap_across_classes():
    first = slot(1, (13, 0), (14, 0), class_id=CLASS_A, teacher_id=TEACHER, classroom="B-12")
    second = slot(1, (13, 30), (14, 30), class_id=CLASS_B, teacher_id=TEACHER, classroom="B-12")

    conflicts = {c["type"]: c["severity"] for c in conflicts_between(first, second)}

    assert conflicts == {"teacher_overlap": "high", "classroom_overlap": "medium"}


def test_missing_teacher_or_classroom_never_conflicts():
    first = slot(1, (13, 0), (14, 0), class_id=CLASS_A)
    second = slot(1, (13, 0), (14, 0), class_id=CLASS_B)

    assert conflicts_between(first, second) == []


def test_detect_conflicts_checks_every_pair():
    timetable = [
        slot(0, (9, 0), (10, 0)),
        slot(0, (9, 30), (10, 30)),
        slot(0, (9, 45), (11, 0)),
        slot(0, (11, 0), (12, 0)),
    ]

    conflicts = detect_conflicts(timetable)

    assert len(conflicts) == 3
    assert all(c["type"] == "class_overlap" for c in conflicts)
