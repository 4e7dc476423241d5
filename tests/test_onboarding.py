from types import SimpleNamespace

import pytest

from iep.exceptions import NotFoundException
from iep.services.onboarding_service import (
    ONBOARDING_STEPS,
    compute_onboarding_metrics,
    describe_steps,
    get_step,
    next_step,
    progress_percentage,
    validate_step,
)

SCHOOL_DATA = {
    "school_name": "Atatürk Özel Eğitim Okulu",
    "school_type": "special_education",
    "address": "Çankaya, Ankara",
    "phone": "+90 312 000 00 00",
    "email": "info@ataturkozel.k12.tr",
}


def test_step_template_order():
    assert [s.id for s in ONBOARDING_STEPS] == [
        "welcome",
        "school_setup",
        "user_profile",
        "class_setup",
        "integration_setup",
        "completion",
    ]
    assert [s.id for s in ONBOARDING_STEPS if not s.required] == ["class_setup", "integration_setup"]


def test_unknown_step():
    with pytest.raises(NotFoundException) as exc_info:
        get_step("payment_setup")
    assert exc_info.value.status_code == 404


def test_next_step_skips_finished_steps():
    assert next_step([]) == "welcome"
    assert next_step(["welcome", "school_setup"]) == "user_profile"
    assert next_step([s.id for s in ONBOARDING_STEPS]) is None


def test_prerequisites_must_be_finished():
    errors = validate_step(get_step("school_setup"), [], [], SCHOOL_DATA)

    assert errors == [{"field": "step", "message": "Step 'welcome' must be finished first"}]


def test_required_fields_are_reported():
    data = dict(SCHOOL_DATA, phone="")

    errors = validate_step(get_step("school_setup"), ["welcome"], [], data)

    assert [e["field"] for e in errors] == ["phone"]


def test_skipped_prerequisite_unlocks_step():
    assert validate_step(get_step("integration_setup"), ["welcome", "school_setup"], ["class_setup"], {}) == []


def test_progress_percentage():
    assert progress_percentage([], []) == 0.0
    assert progress_percentage(["welcome", "school_setup"], ["class_setup"]) == 50.0
    assert progress_percentage(["welcome", "unknown"], []) == 16.67


def test_describe_steps_statuses():
    progress = SimpleNamespace(completed_steps=["welcome"], skipped_steps=["class_setup"])

    statuses = {s["id"]: s["status"] for s in describe_steps(progress)}

    assert statuses == {
        "welcome": "completed",
        "school_setup": "available",
        "user_profile": "available",
        "class_setup": "skipped",
        "integration_setup": "available",
        "completion": "locked",
    }


def progress_record(completed, current_step, finished_seconds=None):
    return SimpleNamespace(
        completed_steps=completed,
        current_step=current_step,
        completed_at="2026-10-19T10:00:00Z" if finished_seconds else None,
        actual_completion_seconds=finished_seconds,
    )


def test_onboarding_metrics():
    all_steps = [s.id for s in ONBOARDING_STEPS]
    records = [
        progress_record(all_steps, "completion", finished_seconds=600),
        progress_record(all_steps, "completion", finished_seconds=1200),
        progress_record(["welcome"], "school_setup"),
        progress_record(["welcome"], "school_setup"),
        progress_record([], "welcome"),
    ]

    metrics = compute_onboarding_metrics(records)

    assert metrics["total_users"] == 5
    assert metrics["completed_users"] == 2
    assert metrics["completion_rate"] == 40.0
    assert metrics["average_completion_minutes"] == 15.0
    assert metrics["step_completion_rates"]["welcome"] == 80.0
    assert metrics["step_completion_rates"]["school_setup"] == 40.0
    assert metrics["most_common_exit_step"] == "school_setup"


def test_onboarding_metrics_without_users():
    metrics = compute_onboarding_metrics([])

    assert metrics["completion_rate"] == 0.0
    assert metrics["average_completion_minutes"] is None
    assert metrics["most_common_exit_step"] is None
