import asyncio
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from iep.client import (
    APIClientError,
    APIErrorType,
    AssignmentAPIClient,
    ClientSession,
    SystemAPIClient,
    TenantAPIClient,
    static_session,
)
from iep.client.schemas import AssignmentStatistics

from conftest import TENANT_ID, USER_ID

STATS_PATH = "/api/v1/assignments/statistics"


class Recorder:
    """MockTransport handler that replays a list of responses."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response


async def test_get_sends_tenant_and_auth_headers(make_client, stats_payload):
    handler = Recorder(httpx.Response(200, json=stats_payload()))
    client = make_client(handler)

    result = await client.get(STATS_PATH)

    assert result.success
    assert result.status == 200
    assert result.retry_count == 0
    assert isinstance(result.data, AssignmentStatistics)
    assert result.data.completion_rate == 87.5

    request = handler.requests[0]
    assert request.headers["x-tenant-id"] == str(TENANT_ID)
    assert request.headers["Authorization"] == "Bearer token-abc"
    assert request.headers["X-User-ID"] == str(USER_ID)
    assert request.headers["X-User-Email"] == "mudur@ataturkozel.k12.tr"


async def test_missing_session_fails_without_network_call(make_client, stats_payload):
    handler = Recorder(httpx.Response(200, json=stats_payload()))
    client = make_client(handler, session=None)

    result = await client.get(STATS_PATH)

    assert not result.success
    assert result.status == 401
    assert result.error.type == APIErrorType.AUTHENTICATION_ERROR
    assert result.error.message == "No active session found - please login"
    assert handler.requests == []


async def test_expired_session_counts_as_missing(make_client, client_session, stats_payload):
    expired = ClientSession(
        user_id=client_session.user_id,
        tenant_id=client_session.tenant_id,
        expires_at=datetime.now(timezone.utc) - timedelta(minutes=1),
    )
    handler = Recorder(httpx.Response(200, json=stats_payload()))

    result = await make_client(handler, session=expired).get(STATS_PATH)

    assert result.error.type == APIErrorType.AUTHENTICATION_ERROR
    assert handler.requests == []


async def test_async_session_provider(make_client, client_session, stats_payload):
    handler = Recorder(httpx.Response(200, json=stats_payload()))
    client = make_client(handler)

    async def provider():
        return client_session

    client.session_provider = provider
    result = await client.get(STATS_PATH)

    assert result.success


async def test_get_retries_server_errors_with_exponential_backoff(make_client, sleeps, stats_payload):
    handler = Recorder(
        httpx.Response(503, json={"status": "error", "message": "Service unavailable"}),
        httpx.Response(502, json={"status": "error", "message": "Bad gateway"}),
        httpx.Response(200, json=stats_payload()),
    )

    result = await make_client(handler).get(STATS_PATH)

    assert result.success
    assert result.retry_count == 2
    assert len(handler.requests) == 3
    assert sleeps == [1.0, 2.0]


async def test_get_gives_up_after_max_retries(make_client, sleeps):
    handler = Recorder(httpx.Response(500, json={"status": "error", "message": "Boom"}))

    result = await make_client(handler).get(STATS_PATH)

    assert not result.success
    assert result.status == 500
    assert result.retry_count == 2
    assert result.error.type == APIErrorType.SERVER_ERROR
    assert result.error.message == "Boom"
    assert result.error.code == "500"
    assert len(handler.requests) == 3
    assert sleeps == [1.0, 2.0]


async def test_writes_are_never_retried(make_client, sleeps):
    handler = Recorder(httpx.Response(500, json={"status": "error", "message": "Boom"}))

    result = await make_client(handler).post("/api/v1/assignments", json={"title": "Ödev"})

    assert result.error.type == APIErrorType.SERVER_ERROR
    assert result.retry_count == 0
    assert len(handler.requests) == 1
    assert sleeps == []


@pytest.mark.parametrize("status", [401, 403])
async def test_auth_failures_are_not_retried(make_client, sleeps, status):
    handler = Recorder(httpx.Response(status, json={"status": "error", "message": "Authentication required"}))

    result = await make_client(handler).get(STATS_PATH)

    assert result.status == status
    assert result.error.type == APIErrorType.AUTHENTICATION_ERROR
    assert len(handler.requests) == 1
    assert sleeps == []


async def test_client_error_carries_first_failing_field(make_client):
    body = {
        "status": "error",
        "message": "Validation failed",
        "errors": [{"field": "due_date", "message": "Field required"}],
    }
    handler = Recorder(httpx.Response(422, json=body))

    result = await make_client(handler).post("/api/v1/assignments", json={})

    assert result.error.type == APIErrorType.VALIDATION_ERROR
    assert result.error.message == "Validation failed"
    assert result.error.field == "due_date"
    assert result.error.details == {"errors": body["errors"]}


async def test_error_map_body_is_kept_without_field(make_client):
    body = {"message": "bad", "errors": {"title": "required"}}
    handler = Recorder(httpx.Response(422, json=body))

    result = await make_client(handler).post("/api/v1/assignments", json={})

    assert not result.success
    assert result.error.type == APIErrorType.VALIDATION_ERROR
    assert result.error.message == "bad"
    assert result.error.field is None
    assert result.error.details == {"errors": {"title": "required"}}


async def test_error_without_json_body_uses_status_line(make_client):
    handler = Recorder(httpx.Response(404, text="not here"))

    result = await make_client(handler).get("/api/v1/assignments/unknown-id")

    assert result.error.type == APIErrorType.VALIDATION_ERROR
    assert result.error.message == "HTTP 404: Not Found"


async def test_timeout_is_categorized_and_retried(make_client, sleeps):
    handler = Recorder(httpx.ReadTimeout("timed out"))

    result = await make_client(handler, timeout_ms=10000).get(STATS_PATH)

    assert not result.success
    assert result.status == 0
    assert result.error.type == APIErrorType.TIMEOUT_ERROR
    assert result.error.message == "Request timeout after 10000ms"
    assert len(handler.requests) == 3
    assert sleeps == [1.0, 2.0]


async def test_slow_body_hits_overall_deadline(make_client):
    async def trickle():
        for byte in b'{"status": "success"}':
            yield bytes([byte])
            await asyncio.sleep(0.05)

    async def handler(request):
        return httpx.Response(200, content=trickle())

    result = await make_client(handler, timeout_ms=200, max_retries=0).get("/api/v1/webhooks")

    assert result.error.type == APIErrorType.TIMEOUT_ERROR
    assert result.error.message == "Request timeout after 200ms"
    assert result.response_time_ms < 1000


async def test_trickling_server_times_out(client_session, monkeypatch):
    for var in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "http_proxy", "https_proxy", "all_proxy"):
        monkeypatch.delenv(var, raising=False)

    body = b'{"status": "success", "data": []}'

    async def serve(reader, writer):
        await reader.readuntil(b"\r\n\r\n")
        writer.write(
            b"HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n"
            b"Content-Length: " + str(len(body)).encode() + b"\r\n\r\n"
        )
        try:
            for byte in body:
                writer.write(bytes([byte]))
                await writer.drain()
                await asyncio.sleep(0.1)
        except ConnectionError:
            pass
        finally:
            writer.close()

    server = await asyncio.start_server(serve, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    try:
        async with TenantAPIClient(
            base_url=f"http://127.0.0.1:{port}",
            session_provider=static_session(client_session),
            timeout_ms=300,
            max_retries=0,
        ) as api:
            result = await api.get("/api/v1/webhooks")
    finally:
        server.close()

    assert result.status == 0
    assert result.error.type == APIErrorType.TIMEOUT_ERROR
    assert result.error.message == "Request timeout after 300ms"
    assert result.response_time_ms < 1000


async def test_connection_failure_is_a_network_error(make_client):
    handler = Recorder(httpx.ConnectError("connection refused"))

    result = await make_client(handler, max_retries=0).get(STATS_PATH)

    assert result.status == 0
    assert result.error.type == APIErrorType.NETWORK_ERROR
    assert result.error.message == "Network connection failed"
    assert "connection refused" in result.error.details["original_error"]


async def test_invalid_json_is_a_validation_error(make_client):
    handler = Recorder(httpx.Response(200, text="<html>oops</html>"))

    result = await make_client(handler).get(STATS_PATH)

    assert not result.success
    assert result.error.type == APIErrorType.VALIDATION_ERROR
    assert result.error.message == "Invalid JSON response from server"


async def test_schema_mismatch_never_returns_unvalidated_data(make_client, stats_payload):
    payload = stats_payload()
    del payload["completionRate"]
    handler = Recorder(httpx.Response(200, json=payload))

    result = await make_client(handler).get(STATS_PATH)

    assert not result.success
    assert result.data is None
    assert result.error.type == APIErrorType.VALIDATION_ERROR
    assert result.error.field == "completionRate"
    assert result.retry_count == 0


async def test_unregistered_route_returns_raw_payload(make_client):
    handler = Recorder(httpx.Response(200, json={"status": "success", "data": {"anything": 1}}))

    result = await make_client(handler).get("/api/v1/webhooks")

    assert result.success
    assert result.data == {"status": "success", "data": {"anything": 1}}


async def test_validation_can_be_switched_off(make_client):
    handler = Recorder(httpx.Response(200, json={"unexpected": True}))

    result = await make_client(handler).get(STATS_PATH, validate=False)

    assert result.success
    assert result.data == {"unexpected": True}


async def test_raise_for_error(make_client):
    handler = Recorder(httpx.Response(403, json={"status": "error", "message": "Forbidden"}))

    result = await make_client(handler).get(STATS_PATH)

    with pytest.raises(APIClientError) as exc_info:
        result.raise_for_error()
    assert exc_info.value.status == 403
    assert exc_info.value.error.type == APIErrorType.AUTHENTICATION_ERROR


async def test_resource_client_drops_empty_filters(make_client):
    handler = Recorder(httpx.Response(200, json={"status": "success", "data": []}))
    assignments = AssignmentAPIClient(make_client(handler))

    result = await assignments.list_assignments(status="published", subject=None, page=2)

    assert result.success
    request = handler.requests[0]
    assert request.url.path == "/api/v1/assignments"
    assert dict(request.url.params) == {"status": "published", "page": "2"}


async def test_health_check_is_validated(make_client):
    body = {"status": "healthy", "timestamp": "2026-10-19T09:00:00Z", "version": "1.0.0", "checks": {"database": "healthy"}}
    handler = Recorder(httpx.Response(200, json=body))

    result = await SystemAPIClient(make_client(handler)).get_health()

    assert result.success
    assert result.data.checks == {"database": "healthy"}
    assert handler.requests[0].url.path == "/api/health"
