"""Webhook schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, HttpUrl

from iep.models.webhook import WebhookEventType


class WebhookEndpointCreate(BaseModel):
    url: HttpUrl
    events: list[WebhookEventType] = Field(..., min_length=1)
    description: str | None = Field(None, max_length=255)
    is_active: bool = True


class WebhookEndpointUpdate(BaseModel):
    url: HttpUrl | None = None
    events: list[WebhookEventType] | None = None
    description: str | None = Field(None, max_length=255)
    is_active: bool | None = None


class WebhookEndpointResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tenant_id: UUID
    url: str
    description: str | None = None
    events: list[str]
    is_active: bool
    created_at: datetime
    updated_at: datetime


class WebhookEndpointWithSecret(WebhookEndpointResponse):
    """Returned once, on creation. The secret is never listed again."""

    secret: str


class WebhookEventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    endpoint_id: UUID
    event_type: str
    payload: dict
    status: str
    attempts: int
    last_attempt_at: datetime | None = None
    response_code: int | None = None
    created_at: datetime


class WebhookTestResponse(BaseModel):
    success: bool
    status_code: int | None = None
    message: str


class WebhookTestRequest(BaseModel):
    event_type: WebhookEventType = WebhookEventType.STUDENT_CREATED
