"""Python client for the İ-EP.APP API."""

from iep.client.api_client import APIResult, TenantAPIClient
from iep.client.errors import (
    APIClientError,
    APIError,
    APIErrorType,
    categorize_status,
    is_retryable,
    user_message,
)
from iep.client.resources import (
    AssignmentAPIClient,
    AttendanceAPIClient,
    GradeAPIClient,
    SystemAPIClient,
)
from iep.client.retry import retry_with_backoff
from iep.client.session import ClientSession, resolve_session, static_session
from iep.client.validation import ResponseValidator, ValidatedResponse, schema_for_endpoint

__all__ = [
    "APIResult",
    "TenantAPIClient",
    "APIClientError",
    "APIError",
    "APIErrorType",
    "categorize_status",
    "is_retryable",
    "user_message",
    "AssignmentAPIClient",
    "AttendanceAPIClient",
    "GradeAPIClient",
    "SystemAPIClient",
    "retry_with_backoff",
    "ClientSession",
    "resolve_session",
    "static_session",
    "ResponseValidator",
    "ValidatedResponse",
    "schema_for_endpoint",
]
