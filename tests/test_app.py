import uuid

import pytest
from fastapi.testclient import TestClient

from iep import main
from iep.api.v1 import assignments
from iep.database import get_db
from iep.exceptions import NotFoundException
from iep.utils.security import create_access_token
from iep.utils.tenant_context import get_tenant_id

from conftest import TENANT_ID, USER_ID

OTHER_TENANT = uuid.UUID("0190a1b2-0000-7000-8000-000000000002")

STATS = {
    "total_assignments": 3,
    "active_assignments": 2,
    "completed_assignments": 1,
    "pending_grades": 1,
    "total_submissions": 4,
    "graded_submissions": 2,
    "average_score": 70.0,
    "completion_rate": 50.0,
    "recent_assignments": [],
}


def auth_headers(role="ADMIN", tenant_id=TENANT_ID, **extra):
    token = create_access_token(USER_ID, tenant_id, role, "mudur@ataturkozel.k12.tr")
    return {"Authorization": f"Bearer {token}", **extra}


class FakeAssignmentService:
    def __init__(self):
        self.tenants = []

    async def get_statistics(self, db):
        self.tenants.append(get_tenant_id())
        return STATS

    async def get_assignment_statistics(self, db, assignment_id):
        raise NotFoundException("Assignment")


@pytest.fixture
def service(monkeypatch):
    fake = FakeAssignmentService()
    monkeypatch.setattr(assignments, "get_assignment_service", lambda: fake)
    return fake


@pytest.fixture
def client():
    async def fake_db():
        yield None

    main.app.dependency_overrides[get_db] = fake_db
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


@pytest.mark.parametrize("path", ["/health", "/api/health"])
def test_health(client, monkeypatch, path):
    async def healthy():
        return "healthy"

    monkeypatch.setattr(main, "check_database", healthy)

    response = client.get(path)

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["checks"] == {"database": "healthy"}
    assert body["version"]


def test_health_reports_database_failure(client, monkeypatch):
    async def unhealthy():
        return "unhealthy"

    monkeypatch.setattr(main, "check_database", unhealthy)

    response = client.get("/api/health")

    assert response.status_code == 503
    assert response.json()["status"] == "unhealthy"


def test_statistics_are_camel_case_without_envelope(client, service):
    response = client.get(
        "/api/v1/assignments/statistics",
        headers=auth_headers(**{"x-tenant-id": str(TENANT_ID)}),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["totalAssignments"] == 3
    assert body["completionRate"] == 50.0
    assert "status" not in body
    assert service.tenants == [TENANT_ID]


def test_missing_token_is_unauthorized(client, service):
    response = client.get("/api/v1/assignments/statistics")

    assert response.status_code == 401
    assert response.json() == {"status": "error", "message": "Authentication required"}


def test_role_outside_allowed_set_is_forbidden(client, service):
    response = client.get("/api/v1/assignments/statistics", headers=auth_headers(role="STUDENT"))

    assert response.status_code == 403
    assert response.json()["status"] == "error"
    assert service.tenants == []


def test_tenant_header_must_match_token(client, service):
    response = client.get(
        "/api/v1/assignments/statistics",
        headers=auth_headers(**{"x-tenant-id": str(OTHER_TENANT)}),
    )

    assert response.status_code == 403
    assert response.json()["message"] == "İstenen okul oturumunuzla eşleşmiyor"
    assert service.tenants == []


def test_tenant_mismatch_message_follows_language(client, service):
    response = client.get(
        "/api/v1/assignments/statistics?lang=en",
        headers=auth_headers(**{"x-tenant-id": str(OTHER_TENANT)}),
    )

    assert response.json()["message"] == "The requested school does not match your session"


def test_malformed_tenant_header(client, service):
    response = client.get(
        "/api/v1/assignments/statistics",
        headers=auth_headers(**{"x-tenant-id": "okul-1"}),
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid x-tenant-id header"


def test_super_admin_acts_in_requested_tenant(client, service):
    response = client.get(
        "/api/v1/assignments/statistics",
        headers=auth_headers(role="SUPER_ADMIN", tenant_id=None, **{"x-tenant-id": str(OTHER_TENANT)}),
    )

    assert response.status_code == 200
    assert service.tenants == [OTHER_TENANT]


def test_not_found_uses_error_body(client, service):
    response = client.get(f"/api/v1/assignments/{uuid.uuid4()}/statistics", headers=auth_headers())

    assert response.status_code == 404
    assert response.json() == {"status": "error", "message": "Assignment not found"}


def test_request_validation_errors_list_fields(client, service):
    response = client.get("/api/v1/assignments/not-a-uuid/statistics", headers=auth_headers())

    assert response.status_code == 422
    body = response.json()
    assert body["message"] == "Validation failed"
    assert body["errors"][0]["field"] == "path.assignment_id"
