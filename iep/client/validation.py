"""Response validation and the route -> response schema registry."""

import logging
import re
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from iep.client import schemas
from iep.client.errors import APIError, APIErrorType

logger = logging.getLogger(__name__)

_ID = r"[^/]+"

# (method, path pattern, schema); first match wins, so fixed segments such as
# /statistics are listed before the /{id} patterns they would also match.
ROUTE_SCHEMAS: list[tuple[str, re.Pattern, type[BaseModel]]] = [
    (method, re.compile(f"^{pattern}$"), schema)
    for method, pattern, schema in (
        ("GET", "/assignments", schemas.AssignmentListResponse),
        ("POST", "/assignments", schemas.AssignmentResponse),
        ("GET", "/assignments/statistics", schemas.AssignmentStatistics),
        ("GET", f"/assignments/{_ID}/submissions", schemas.SubmissionListResponse),
        ("GET", f"/assignments/{_ID}", schemas.AssignmentResponse),
        ("PUT", f"/assignments/{_ID}", schemas.AssignmentResponse),
        ("GET", "/attendance", schemas.AttendanceListResponse),
        ("POST", "/attendance", schemas.AttendanceRecordResponse),
        ("GET", "/attendance/statistics", schemas.AttendanceStatistics),
        ("GET", "/grades", schemas.GradeListResponse),
        ("GET", "/grades/calculations", schemas.GradeCalculation),
        ("GET", "/grades/analytics", schemas.GradeStatistics),
        ("GET", "/students", schemas.StudentListResponse),
        ("GET", "/teachers", schemas.TeacherListResponse),
        ("GET", "/classes", schemas.ClassListResponse),
        ("GET", "/health", schemas.HealthCheck),
    )
]


def normalize_path(path: str) -> str:
    """Drop the query string and the /api and /v1 prefixes."""
    path = path.split("?", 1)[0].rstrip("/") or "/"
    for prefix in ("/api", "/v1"):
        if path == prefix or path.startswith(prefix + "/"):
            path = path[len(prefix):] or "/"
    return path


def schema_for_endpoint(method: str, path: str) -> type[BaseModel] | None:
    normalized = normalize_path(path)
    for route_method, pattern, schema in ROUTE_SCHEMAS:
        if route_method == method.upper() and pattern.match(normalized):
            return schema
    return None


def _field_path(loc: tuple) -> str:
    return ".".join(str(part) for part in loc) or "body"


@dataclass
class ValidatedResponse:
    success: bool
    data: Any = None
    error: APIError | None = None
    status: int = 200


class ResponseValidator:
    """Checks a decoded JSON body against a pydantic schema."""

    def validate(self, payload: Any, schema: type[BaseModel], endpoint: str) -> ValidatedResponse:
        if payload is None:
            return ValidatedResponse(
                success=False,
                error=APIError(
                    type=APIErrorType.VALIDATION_ERROR,
                    message="No response data received",
                    details={"endpoint": endpoint},
                ),
                status=500,
            )

        try:
            data = schema.model_validate(payload)
        except ValidationError as e:
            problems = [
                {"field": _field_path(err["loc"]), "message": err["msg"]}
                for err in e.errors()
            ]
            fields = ", ".join(p["field"] for p in problems)
            logger.error(f"Response validation failed for {endpoint}: {fields}")
            return ValidatedResponse(
                success=False,
                error=APIError(
                    type=APIErrorType.VALIDATION_ERROR,
                    message=f"Response data structure validation failed: {fields}",
                    field=problems[0]["field"],
                    details={"endpoint": endpoint, "schema": schema.__name__, "errors": problems},
                ),
                status=422,
            )

        logger.debug(f"Response for {endpoint} matches {schema.__name__}")
        return ValidatedResponse(success=True, data=data)
