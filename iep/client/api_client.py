"""Tenant-aware HTTP client for the İ-EP.APP API.

Failures never escape as exceptions: every call returns an ``APIResult``
whose ``error`` is one of the ``APIErrorType`` categories.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from functools import partial
from typing import Any, Awaitable, Callable, Generic, TypeVar

import httpx
from pydantic import BaseModel

from iep.client.errors import (
    APIClientError,
    APIError,
    APIErrorType,
    categorize_status,
    is_retryable,
    log_error,
)
from iep.client.retry import retry_with_backoff
from iep.client.session import SessionProvider, resolve_session
from iep.client.validation import ResponseValidator, schema_for_endpoint
from iep.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Only reads are safe to repeat
RETRYABLE_METHODS = frozenset({"GET", "HEAD"})


@dataclass
class APIResult(Generic[T]):
    success: bool
    status: int
    data: T | None = None
    error: APIError | None = None
    response_time_ms: int = 0
    retry_count: int = 0

    def raise_for_error(self) -> T | None:
        if not self.success:
            raise APIClientError(self.error, self.status)
        return self.data


@dataclass
class _Attempt:
    response: httpx.Response | None
    error: APIError | None


def _server_message(response: httpx.Response) -> tuple[str, str | None, Any]:
    """Message, first failing field and error list from an error body."""
    fallback = f"HTTP {response.status_code}: {response.reason_phrase}"
    try:
        body = response.json()
    except ValueError:
        return fallback, None, None
    if not isinstance(body, dict):
        return fallback, None, None

    message = next(
        (body[key] for key in ("message", "error", "detail") if isinstance(body.get(key), str) and body[key]),
        fallback,
    )
    errors = body.get("errors") or (body["detail"] if isinstance(body.get("detail"), list) else None)
    field = None
    if isinstance(errors, list) and errors and isinstance(errors[0], dict):
        field = errors[0].get("field") or ".".join(str(p) for p in errors[0].get("loc", ())) or None
    return message, field, errors


class TenantAPIClient:
    """Async client that attaches the caller's tenant to every request.

    Usage:
        async with TenantAPIClient(session_provider=static_session(session)) as api:
            result = await api.get("/api/v1/assignments/statistics")
    """

    def __init__(
        self,
        base_url: str | None = None,
        session_provider: SessionProvider | None = None,
        timeout_ms: int | None = None,
        max_retries: int | None = None,
        retry_base_delay_ms: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        validator: ResponseValidator | None = None,
    ):
        self.base_url = base_url or settings.api_base_url
        self.session_provider = session_provider or (lambda: None)
        self.timeout_ms = timeout_ms if timeout_ms is not None else settings.api_timeout_ms
        self.max_retries = max_retries if max_retries is not None else settings.api_max_retries
        self.retry_base_delay_ms = (
            retry_base_delay_ms if retry_base_delay_ms is not None else settings.api_retry_base_delay_ms
        )
        self.validator = validator or ResponseValidator()
        self._sleep = sleep
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout_ms / 1000),
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> "TenantAPIClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        validate: bool = True,
        schema: type[BaseModel] | None = None,
    ) -> APIResult:
        method = method.upper()
        started = time.monotonic()

        def elapsed() -> int:
            return int((time.monotonic() - started) * 1000)

        session = await resolve_session(self.session_provider)
        if session is None:
            error = APIError(
                type=APIErrorType.AUTHENTICATION_ERROR,
                message="No active session found - please login",
                code="401",
            )
            log_error(error, method, path)
            return APIResult(success=False, status=401, error=error, response_time_ms=elapsed())

        send = partial(self._send, method, path, session.headers(), params, json)
        if method in RETRYABLE_METHODS:
            attempt, retries = await retry_with_backoff(
                send,
                should_retry=lambda a: a.error is not None and is_retryable(a.error),
                max_retries=self.max_retries,
                base_delay=self.retry_base_delay_ms / 1000,
                sleep=self._sleep,
            )
        else:
            attempt, retries = await send(), 0

        status = attempt.response.status_code if attempt.response is not None else 0
        if attempt.error is not None:
            log_error(attempt.error, method, path)
            return APIResult(
                success=False,
                status=status,
                error=attempt.error,
                response_time_ms=elapsed(),
                retry_count=retries,
            )

        result = self._decode(method, path, attempt.response, validate, schema)
        result.response_time_ms = elapsed()
        result.retry_count = retries
        return result

    async def _send(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        params: dict[str, Any] | None,
        json: Any,
    ) -> _Attempt:
        # httpx limits each phase separately; the deadline bounds the whole attempt
        try:
            async with asyncio.timeout(self.timeout_ms / 1000):
                response = await self._http.request(method, path, headers=headers, params=params, json=json)
        except (httpx.TimeoutException, TimeoutError):
            return _Attempt(
                None,
                APIError(
                    type=APIErrorType.TIMEOUT_ERROR,
                    message=f"Request timeout after {self.timeout_ms}ms",
                    details={"timeout_ms": self.timeout_ms, "endpoint": path},
                ),
            )
        except httpx.TransportError as e:
            return _Attempt(
                None,
                APIError(
                    type=APIErrorType.NETWORK_ERROR,
                    message="Network connection failed",
                    details={"original_error": str(e)},
                ),
            )
        except httpx.HTTPError as e:
            return _Attempt(None, APIError(type=APIErrorType.UNKNOWN_ERROR, message=str(e)))

        if response.status_code >= 400:
            message, field, errors = _server_message(response)
            return _Attempt(
                response,
                APIError(
                    type=categorize_status(response.status_code),
                    message=message,
                    field=field,
                    code=str(response.status_code),
                    details={"errors": errors} if errors else None,
                ),
            )
        return _Attempt(response, None)

    def _decode(
        self,
        method: str,
        path: str,
        response: httpx.Response,
        validate: bool,
        schema: type[BaseModel] | None,
    ) -> APIResult:
        status = response.status_code
        try:
            payload = response.json() if response.content else None
        except ValueError as e:
            error = APIError(
                type=APIErrorType.VALIDATION_ERROR,
                message="Invalid JSON response from server",
                details={"parse_error": str(e)},
            )
            log_error(error, method, path)
            return APIResult(success=False, status=status, error=error)

        if not validate:
            return APIResult(success=True, status=status, data=payload)

        schema = schema or schema_for_endpoint(method, path)
        if schema is None:
            logger.warning(f"No response schema registered for {method} {path}, returning it unvalidated")
            return APIResult(success=True, status=status, data=payload)

        validated = self.validator.validate(payload, schema, f"{method} {path}")
        if not validated.success:
            log_error(validated.error, method, path)
            return APIResult(success=False, status=status, error=validated.error)
        return APIResult(success=True, status=status, data=validated.data)

    async def get(self, path: str, *, params: dict[str, Any] | None = None, **kwargs) -> APIResult:
        return await self.request("GET", path, params=params, **kwargs)

    async def post(self, path: str, json: Any = None, **kwargs) -> APIResult:
        return await self.request("POST", path, json=json, **kwargs)

    async def put(self, path: str, json: Any = None, **kwargs) -> APIResult:
        return await self.request("PUT", path, json=json, **kwargs)

    async def delete(self, path: str, **kwargs) -> APIResult:
        return await self.request("DELETE", path, **kwargs)
