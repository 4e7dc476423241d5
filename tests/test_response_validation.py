import pytest

from iep.client import APIErrorType, ResponseValidator, schema_for_endpoint
from iep.client import schemas
from iep.client.validation import normalize_path


@pytest.mark.parametrize(
    "path, expected",
    [
        ("/api/v1/assignments/statistics", "/assignments/statistics"),
        ("/v1/assignments?page=2", "/assignments"),
        ("/assignments/", "/assignments"),
        ("/api/health", "/health"),
        ("/api", "/"),
    ],
)
def test_normalize_path(path, expected):
    assert normalize_path(path) == expected


@pytest.mark.parametrize(
    "method, path, schema",
    [
        ("GET", "/api/v1/assignments", schemas.AssignmentListResponse),
        ("GET", "/api/v1/assignments/statistics", schemas.AssignmentStatistics),
        ("GET", "/api/v1/assignments/0190a1b2-0000-7000-8000-000000000001", schemas.AssignmentResponse),
        ("GET", "/api/v1/assignments/abc/submissions", schemas.SubmissionListResponse),
        ("get", "/api/v1/attendance/statistics", schemas.AttendanceStatistics),
        ("GET", "/api/v1/grades/calculations?student_id=x", schemas.GradeCalculation),
        ("GET", "/api/health", schemas.HealthCheck),
    ],
)
def test_schema_for_endpoint(method, path, schema):
    assert schema_for_endpoint(method, path) is schema


def test_unknown_endpoint_has_no_schema():
    assert schema_for_endpoint("GET", "/api/v1/webhooks") is None
    assert schema_for_endpoint("DELETE", "/api/v1/assignments/abc") is None


def test_valid_statistics(stats_payload):
    result = ResponseValidator().validate(stats_payload(), schemas.AssignmentStatistics, "GET /assignments/statistics")

    assert result.success
    assert result.data.total_assignments == 12
    assert result.data.average_score == 78.25


def test_missing_field_is_reported_by_name(stats_payload):
    payload = stats_payload()
    del payload["completionRate"]

    result = ResponseValidator().validate(payload, schemas.AssignmentStatistics, "GET /assignments/statistics")

    assert not result.success
    assert result.status == 422
    assert result.error.type == APIErrorType.VALIDATION_ERROR
    assert result.error.field == "completionRate"
    assert "completionRate" in result.error.message
    assert result.error.details["schema"] == "AssignmentStatistics"


def test_wrong_type_is_reported(stats_payload):
    payload = stats_payload(totalAssignments="many")

    result = ResponseValidator().validate(payload, schemas.AssignmentStatistics, "GET /assignments/statistics")

    assert result.error.field == "totalAssignments"


def test_nested_field_path():
    payload = {
        "status": "success",
        "data": [{"id": "not-a-uuid"}],
    }

    result = ResponseValidator().validate(payload, schemas.AttendanceListResponse, "GET /attendance")

    assert not result.success
    assert result.error.field.startswith("data.0.")


def test_empty_body_is_rejected():
    result = ResponseValidator().validate(None, schemas.AssignmentStatistics, "GET /assignments/statistics")

    assert not result.success
    assert result.status == 500
    assert result.error.message == "No response data received"


def test_extra_fields_are_ignored(stats_payload):
    result = ResponseValidator().validate(
        stats_payload(experimentalFlag=True), schemas.AssignmentStatistics, "GET /assignments/statistics"
    )

    assert result.success
