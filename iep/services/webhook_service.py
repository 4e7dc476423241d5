"""Webhook service for dispatching events to external endpoints."""

import hashlib
import hmac
import json
import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

import httpx
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from iep.config import settings
from iep.exceptions import NotFoundException, ValidationException
from iep.models import WebhookEndpoint, WebhookEvent, WebhookEventStatus
from iep.schemas.webhook import WebhookEndpointCreate, WebhookEndpointUpdate
from iep.services.base_service import TenantScopedService
from iep.utils.tenant_context import get_current_user_email, get_tenant_id, get_tenant_id_or_none

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-IEP-Signature"
EVENT_HEADER = "X-IEP-Event"
DELIVERY_HEADER = "X-IEP-Delivery"


def sign_payload(payload: str, secret: str) -> str:
    """Sign a payload with HMAC-SHA256, GitHub style (``sha256=<hex>``)."""
    signature = hmac.new(
        secret.encode(),
        payload.encode(),
        hashlib.sha256,
    ).hexdigest()
    return f"sha256={signature}"


def verify_signature(payload: str, secret: str, signature: str) -> bool:
    return hmac.compare_digest(sign_payload(payload, secret), signature)


def build_delivery(
    event_type: str,
    data: dict[str, Any],
    secret: str,
    delivery_id: str | None = None,
    test: bool = False,
) -> tuple[str, dict[str, str]]:
    """Serialize an event body and the headers that go with it."""
    envelope = {
        "event": event_type,
        "data": data,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if delivery_id:
        envelope["webhook_id"] = delivery_id
    if test:
        envelope["test"] = True
    body = json.dumps(envelope, default=str)

    headers = {
        "Content-Type": "application/json",
        SIGNATURE_HEADER: sign_payload(body, secret),
        EVENT_HEADER: event_type,
    }
    if delivery_id:
        headers[DELIVERY_HEADER] = delivery_id
    if test:
        headers["X-IEP-Test"] = "true"
    return body, headers


class WebhookService(TenantScopedService[WebhookEndpoint]):
    """Service for managing webhooks and dispatching events."""

    model = WebhookEndpoint
    resource_name = "Webhook endpoint"
    soft_delete = False

    def __init__(self, transport: httpx.AsyncBaseTransport | None = None):
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=settings.webhook_timeout_seconds,
            transport=self._transport,
        )

    async def create_endpoint(self, db: AsyncSession, data: WebhookEndpointCreate) -> WebhookEndpoint:
        endpoint = await self.add(
            db,
            url=str(data.url),
            description=data.description,
            events=[event.value for event in data.events],
            is_active=data.is_active,
        )
        logger.info(f"Created webhook endpoint {endpoint.id} for {endpoint.url}")
        return endpoint

    async def update_endpoint(
        self,
        db: AsyncSession,
        endpoint_id: UUID,
        data: WebhookEndpointUpdate,
    ) -> WebhookEndpoint:
        endpoint = await self.get(db, endpoint_id)
        update_data = data.model_dump(exclude_unset=True)
        if "url" in update_data and update_data["url"] is not None:
            update_data["url"] = str(update_data["url"])
        if "events" in update_data and update_data["events"] is not None:
            update_data["events"] = [event.value for event in data.events]
        return await self.apply_update(db, endpoint, update_data)

    async def list_endpoints(self, db: AsyncSession) -> list[WebhookEndpoint]:
        result = await db.execute(self.scoped_query().order_by(WebhookEndpoint.created_at.desc()))
        return list(result.scalars().all())

    async def get_active_endpoints_for_event(
        self,
        db: AsyncSession,
        event_type: str,
    ) -> list[WebhookEndpoint]:
        """Get all active endpoints subscribed to an event type."""
        result = await db.execute(
            self.scoped_query().where(WebhookEndpoint.is_active == True)  # noqa: E712
        )
        return [ep for ep in result.scalars().all() if ep.subscribes_to(event_type)]

    async def dispatch_event(
        self,
        db: AsyncSession,
        event_type: str,
        payload: dict[str, Any],
    ) -> list[WebhookEvent]:
        """Record and deliver an event to every subscribed endpoint.

        Delivery failures are logged and recorded on the event, never raised,
        so a broken integration cannot fail the request that triggered it.
        """
        if get_tenant_id_or_none() is None:
            return []

        endpoints = await self.get_active_endpoints_for_event(db, event_type)
        # JSONB cannot hold UUID, Decimal or datetime values
        payload = json.loads(json.dumps(payload, default=str))

        events = []
        for endpoint in endpoints:
            event = WebhookEvent(
                tenant_id=endpoint.tenant_id,
                endpoint_id=endpoint.id,
                event_type=event_type,
                payload=payload,
                status=WebhookEventStatus.PENDING.value,
                attempts=0,
            )
            db.add(event)
            await db.flush()
            await self._deliver_event(event, endpoint)
            events.append(event)

        await db.flush()
        return events

    async def _deliver_event(self, event: WebhookEvent, endpoint: WebhookEndpoint) -> bool:
        """Deliver a webhook event to its endpoint."""
        body, headers = build_delivery(
            event.event_type,
            event.payload,
            endpoint.secret,
            delivery_id=str(event.id),
        )

        try:
            async with self._client() as client:
                response = await client.post(endpoint.url, content=body, headers=headers)
        except httpx.HTTPError as e:
            event.record_attempt(False, response_body=str(e))
            logger.error(f"Webhook event {event.id} delivery error: {e}")
            return False

        success = 200 <= response.status_code < 300
        event.record_attempt(success, response.status_code, response.text)
        if success:
            logger.info(f"Webhook event {event.id} delivered successfully")
        else:
            logger.warning(f"Webhook event {event.id} failed with status {response.status_code}")
        return success

    async def test_endpoint(self, db: AsyncSession, endpoint_id: UUID, event_type: str) -> dict:
        """Send a test event to a webhook endpoint without recording it."""
        endpoint = await self.get(db, endpoint_id)
        body, headers = build_delivery(
            event_type,
            {
                "test": True,
                "message": "İ-EP.APP test webhook",
                "event_type": event_type,
                "triggered_by": get_current_user_email(),
            },
            endpoint.secret,
            test=True,
        )

        try:
            async with self._client() as client:
                response = await client.post(endpoint.url, content=body, headers=headers)
        except httpx.HTTPError as e:
            return {"success": False, "status_code": None, "message": str(e)}

        success = 200 <= response.status_code < 300
        return {
            "success": success,
            "status_code": response.status_code,
            "message": "Delivered" if success else f"Endpoint answered {response.status_code}",
        }

    async def get_endpoint_events(
        self,
        db: AsyncSession,
        endpoint_id: UUID,
        limit: int = 50,
    ) -> list[WebhookEvent]:
        """Get recent events for a webhook endpoint."""
        await self.get(db, endpoint_id)

        result = await db.execute(
            select(WebhookEvent)
            .where(
                WebhookEvent.endpoint_id == endpoint_id,
                WebhookEvent.tenant_id == get_tenant_id(),
            )
            .order_by(WebhookEvent.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def retry_event(self, db: AsyncSession, event_id: UUID) -> WebhookEvent:
        """Redeliver an event that has not been delivered yet."""
        result = await db.execute(
            select(WebhookEvent).where(
                WebhookEvent.id == event_id,
                WebhookEvent.tenant_id == get_tenant_id(),
            )
        )
        event = result.scalar_one_or_none()
        if not event:
            raise NotFoundException("Webhook event")
        if not event.can_retry:
            raise ValidationException(
                [{"field": "event_id", "message": "Event was delivered or has no attempts left"}]
            )

        endpoint = await self.get(db, event.endpoint_id)
        await self._deliver_event(event, endpoint)
        await db.flush()
        return event


# Singleton instance
_webhook_service: WebhookService | None = None


def get_webhook_service() -> WebhookService:
    """Get the webhook service singleton."""
    global _webhook_service
    if _webhook_service is None:
        _webhook_service = WebhookService()
    return _webhook_service
