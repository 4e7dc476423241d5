from datetime import datetime, timezone

import jwt
import pytest

from iep.client import APIError, APIErrorType, ClientSession, categorize_status, is_retryable, user_message
from iep.client.retry import backoff_delay, retry_with_backoff
from iep.client.session import resolve_session, static_session


@pytest.mark.parametrize(
    "status, expected",
    [
        (400, APIErrorType.VALIDATION_ERROR),
        (401, APIErrorType.AUTHENTICATION_ERROR),
        (403, APIErrorType.AUTHENTICATION_ERROR),
        (404, APIErrorType.VALIDATION_ERROR),
        (409, APIErrorType.VALIDATION_ERROR),
        (422, APIErrorType.VALIDATION_ERROR),
        (500, APIErrorType.SERVER_ERROR),
        (503, APIErrorType.SERVER_ERROR),
        (302, APIErrorType.UNKNOWN_ERROR),
    ],
)
def test_categorize_status(status, expected):
    assert categorize_status(status) == expected


def test_only_transient_categories_are_retryable():
    retryable = {t for t in APIErrorType if is_retryable(APIError(type=t, message="x"))}
    assert retryable == {
        APIErrorType.NETWORK_ERROR,
        APIErrorType.TIMEOUT_ERROR,
        APIErrorType.SERVER_ERROR,
    }


def test_user_message_is_localized():
    error = APIError(type=APIErrorType.TIMEOUT_ERROR, message="Request timeout after 10000ms")

    assert user_message(error, "tr") == "İstek zaman aşımına uğradı. Lütfen tekrar deneyin."
    assert user_message(error, "en") == "The request timed out. Please try again."


def test_user_message_exists_for_every_category():
    for error_type in APIErrorType:
        message = user_message(APIError(type=error_type, message=""), "tr")
        assert message != f"client_errors.{error_type.value}"


def test_backoff_delay_doubles():
    assert [backoff_delay(n, 1.0) for n in (1, 2, 3)] == [1.0, 2.0, 4.0]
    assert backoff_delay(2, 0.25) == 0.5


async def test_retry_with_backoff_stops_on_success():
    outcomes = iter(["fail", "fail", "ok"])
    delays = []

    async def operation():
        return next(outcomes)

    async def sleep(delay):
        delays.append(delay)

    result, retries = await retry_with_backoff(
        operation, should_retry=lambda o: o == "fail", max_retries=5, base_delay=0.5, sleep=sleep
    )

    assert (result, retries) == ("ok", 2)
    assert delays == [0.5, 1.0]


async def test_retry_with_backoff_zero_retries_runs_once():
    calls = []

    async def operation():
        calls.append(1)
        return "fail"

    async def sleep(delay):
        raise AssertionError("must not sleep")

    result, retries = await retry_with_backoff(operation, lambda o: True, max_retries=0, sleep=sleep)

    assert (result, retries) == ("fail", 0)
    assert len(calls) == 1


def test_session_from_access_token():
    exp = datetime(2030, 1, 1, tzinfo=timezone.utc)
    token = jwt.encode(
        {"sub": "user-1", "tenant_id": "tenant-1", "email": "ogretmen@okul.k12.tr", "exp": exp},
        "any-secret",
        algorithm="HS256",
    )

    session = ClientSession.from_access_token(token)

    assert session.user_id == "user-1"
    assert session.tenant_id == "tenant-1"
    assert session.email == "ogretmen@okul.k12.tr"
    assert session.expires_at == exp
    assert session.headers()["x-tenant-id"] == "tenant-1"


def test_super_admin_token_needs_explicit_tenant():
    token = jwt.encode({"sub": "admin", "tenant_id": None}, "any-secret", algorithm="HS256")

    with pytest.raises(ValueError):
        ClientSession.from_access_token(token)

    assert ClientSession.from_access_token(token, tenant_id="tenant-9").tenant_id == "tenant-9"


async def test_resolve_session_handles_missing_session():
    assert await resolve_session(static_session(None)) is None
