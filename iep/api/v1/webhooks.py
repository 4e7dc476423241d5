"""Webhook API endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from iep.database import get_db
from iep.models.user import Role
from iep.schemas.common import APIResponse
from iep.schemas.webhook import (
    WebhookEndpointCreate,
    WebhookEndpointResponse,
    WebhookEndpointUpdate,
    WebhookEndpointWithSecret,
    WebhookEventResponse,
    WebhookTestRequest,
    WebhookTestResponse,
)
from iep.services.webhook_service import get_webhook_service
from iep.utils.permissions import require_role

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=APIResponse[list[WebhookEndpointResponse]])
@require_role(Role.ADMIN)
async def list_endpoints(
    db: AsyncSession = Depends(get_db),
):
    """List all webhook endpoints."""
    endpoints = await get_webhook_service().list_endpoints(db)
    return APIResponse(data=[WebhookEndpointResponse.model_validate(ep) for ep in endpoints])


@router.post("", response_model=APIResponse[WebhookEndpointWithSecret], status_code=201)
@require_role(Role.ADMIN)
async def create_endpoint(
    data: WebhookEndpointCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create a new webhook endpoint.

    The signing secret is only ever returned here.
    """
    endpoint = await get_webhook_service().create_endpoint(db, data)
    await db.commit()
    return APIResponse(
        data=WebhookEndpointWithSecret.model_validate(endpoint),
        message="Webhook endpoint created. Store the secret securely - it won't be shown again.",
    )


@router.get("/{endpoint_id}", response_model=APIResponse[WebhookEndpointResponse])
@require_role(Role.ADMIN)
async def get_endpoint(
    endpoint_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    endpoint = await get_webhook_service().get(db, endpoint_id)
    return APIResponse(data=WebhookEndpointResponse.model_validate(endpoint))


@router.put("/{endpoint_id}", response_model=APIResponse[WebhookEndpointResponse])
@require_role(Role.ADMIN)
async def update_endpoint(
    endpoint_id: UUID,
    data: WebhookEndpointUpdate,
    db: AsyncSession = Depends(get_db),
):
    endpoint = await get_webhook_service().update_endpoint(db, endpoint_id, data)
    await db.commit()
    return APIResponse(
        data=WebhookEndpointResponse.model_validate(endpoint),
        message="Webhook endpoint updated",
    )


@router.delete("/{endpoint_id}", response_model=APIResponse[None])
@require_role(Role.ADMIN)
async def delete_endpoint(
    endpoint_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    await get_webhook_service().remove(db, endpoint_id)
    await db.commit()
    logger.info(f"Deleted webhook endpoint {endpoint_id}")
    return APIResponse(message="Webhook endpoint deleted")


@router.post("/{endpoint_id}/test", response_model=APIResponse[WebhookTestResponse])
@require_role(Role.ADMIN)
async def test_endpoint(
    endpoint_id: UUID,
    data: WebhookTestRequest,
    db: AsyncSession = Depends(get_db),
):
    """Send a signed test event to an endpoint."""
    result = await get_webhook_service().test_endpoint(db, endpoint_id, data.event_type.value)
    return APIResponse(data=WebhookTestResponse(**result))


@router.get("/{endpoint_id}/events", response_model=APIResponse[list[WebhookEventResponse]])
@require_role(Role.ADMIN)
async def list_endpoint_events(
    endpoint_id: UUID,
    limit: int = Query(50, ge=1, le=200),
    db: AsyncSession = Depends(get_db),
):
    events = await get_webhook_service().get_endpoint_events(db, endpoint_id, limit=limit)
    return APIResponse(data=[WebhookEventResponse.model_validate(e) for e in events])


@router.post("/events/{event_id}/retry", response_model=APIResponse[WebhookEventResponse])
@require_role(Role.ADMIN)
async def retry_event(
    event_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    event = await get_webhook_service().retry_event(db, event_id)
    await db.commit()
    return APIResponse(data=WebhookEventResponse.model_validate(event))
