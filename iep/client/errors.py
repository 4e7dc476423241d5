"""Error taxonomy shared by every API client call.

Every failure, whether raised by the transport, answered by the server or
found while validating a body, is reduced to an ``APIError`` of one of six
categories before it reaches calling code.
"""

import logging
from enum import Enum
from typing import Any

from pydantic import BaseModel

from iep.services.i18n_service import get_i18n_service

logger = logging.getLogger(__name__)


class APIErrorType(str, Enum):
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    SERVER_ERROR = "SERVER_ERROR"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


RETRYABLE_ERRORS = frozenset(
    {APIErrorType.NETWORK_ERROR, APIErrorType.TIMEOUT_ERROR, APIErrorType.SERVER_ERROR}
)


class APIError(BaseModel):
    type: APIErrorType
    message: str
    field: str | None = None
    code: str | None = None
    details: dict[str, Any] | None = None


class APIClientError(Exception):
    """Raised by ``APIResult.raise_for_error`` for a failed call."""

    def __init__(self, error: APIError, status: int):
        self.error = error
        self.status = status
        super().__init__(error.message)


def categorize_status(status: int) -> APIErrorType:
    if status in (401, 403):
        return APIErrorType.AUTHENTICATION_ERROR
    if 400 <= status < 500:
        return APIErrorType.VALIDATION_ERROR
    if status >= 500:
        return APIErrorType.SERVER_ERROR
    return APIErrorType.UNKNOWN_ERROR


def is_retryable(error: APIError) -> bool:
    return error.type in RETRYABLE_ERRORS


def user_message(error: APIError, lang: str | None = None) -> str:
    """The localized, user-facing message for an error's category."""
    return get_i18n_service().t(f"client_errors.{error.type.value}", lang)


def log_error(error: APIError, method: str, endpoint: str) -> None:
    context = f" (field={error.field})" if error.field else ""
    code = f" [{error.code}]" if error.code else ""
    logger.error(f"{method} {endpoint} failed with {error.type.value}{code}: {error.message}{context}")
