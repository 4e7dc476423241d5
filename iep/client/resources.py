"""Per-resource convenience clients on top of ``TenantAPIClient``."""

import uuid
from datetime import date
from typing import Any

from iep.client import schemas
from iep.client.api_client import APIResult, TenantAPIClient

API_PREFIX = "/api/v1"


def _params(**values: Any) -> dict[str, Any]:
    """Query parameters without the unset ones."""
    return {key: str(value) for key, value in values.items() if value is not None}


class ResourceClient:
    prefix = ""

    def __init__(self, client: TenantAPIClient):
        self.client = client

    def _path(self, *parts: Any) -> str:
        return "/".join([f"{API_PREFIX}{self.prefix}", *(str(part) for part in parts)])


class AssignmentAPIClient(ResourceClient):
    prefix = "/assignments"

    async def list_assignments(self, **filters: Any) -> APIResult[schemas.AssignmentListResponse]:
        return await self.client.get(self._path(), params=_params(**filters))

    async def get_statistics(self) -> APIResult[schemas.AssignmentStatistics]:
        return await self.client.get(self._path("statistics"))

    async def get_assignment(self, assignment_id: uuid.UUID) -> APIResult[schemas.AssignmentResponse]:
        return await self.client.get(self._path(assignment_id))

    async def create_assignment(self, data: dict[str, Any]) -> APIResult[schemas.AssignmentResponse]:
        return await self.client.post(self._path(), json=data)

    async def update_assignment(
        self, assignment_id: uuid.UUID, data: dict[str, Any]
    ) -> APIResult[schemas.AssignmentResponse]:
        return await self.client.put(self._path(assignment_id), json=data)

    async def delete_assignment(self, assignment_id: uuid.UUID) -> APIResult:
        return await self.client.delete(self._path(assignment_id))

    async def get_submissions(self, assignment_id: uuid.UUID) -> APIResult[schemas.SubmissionListResponse]:
        return await self.client.get(self._path(assignment_id, "submissions"))


class AttendanceAPIClient(ResourceClient):
    prefix = "/attendance"

    async def list_records(
        self,
        class_id: uuid.UUID | None = None,
        student_id: uuid.UUID | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        page: int = 1,
    ) -> APIResult[schemas.AttendanceListResponse]:
        return await self.client.get(
            self._path(),
            params=_params(
                class_id=class_id, student_id=student_id, date_from=date_from, date_to=date_to, page=page
            ),
        )

    async def get_statistics(
        self,
        class_id: uuid.UUID | None = None,
        student_id: uuid.UUID | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> APIResult[schemas.AttendanceStatistics]:
        return await self.client.get(
            self._path("statistics"),
            params=_params(class_id=class_id, student_id=student_id, date_from=date_from, date_to=date_to),
        )

    async def mark(
        self,
        student_id: uuid.UUID,
        class_id: uuid.UUID,
        status: str = "present",
        day: date | None = None,
        **extra: Any,
    ) -> APIResult[schemas.AttendanceRecordResponse]:
        body = {"student_id": str(student_id), "class_id": str(class_id), "status": status, **extra}
        if day:
            body["date"] = day.isoformat()
        return await self.client.post(self._path(), json=body)


class GradeAPIClient(ResourceClient):
    prefix = "/grades"

    async def list_grades(self, **filters: Any) -> APIResult[schemas.GradeListResponse]:
        return await self.client.get(self._path(), params=_params(**filters))

    async def get_calculations(
        self,
        student_id: uuid.UUID,
        subject: str,
        semester: int | None = None,
    ) -> APIResult[schemas.GradeCalculation]:
        return await self.client.get(
            self._path("calculations"),
            params=_params(student_id=student_id, subject=subject, semester=semester),
        )

    async def get_class_analytics(
        self,
        class_id: uuid.UUID | None = None,
        subject: str | None = None,
    ) -> APIResult[schemas.GradeStatistics]:
        return await self.client.get(
            self._path("analytics"), params=_params(class_id=class_id, subject=subject)
        )


class SystemAPIClient(ResourceClient):
    async def get_students(self, **filters: Any) -> APIResult[schemas.StudentListResponse]:
        return await self.client.get(f"{API_PREFIX}/students", params=_params(**filters))

    async def get_teachers(self, **filters: Any) -> APIResult[schemas.TeacherListResponse]:
        return await self.client.get(f"{API_PREFIX}/teachers", params=_params(**filters))

    async def get_classes(self, **filters: Any) -> APIResult[schemas.ClassListResponse]:
        return await self.client.get(f"{API_PREFIX}/classes", params=_params(**filters))

    async def get_health(self) -> APIResult[schemas.HealthCheck]:
        return await self.client.get("/api/health")
