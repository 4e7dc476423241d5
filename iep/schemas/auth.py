"""Authentication-related Pydantic schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    # Required when the same email exists in several schools
    tenant_subdomain: str | None = None


class LoginResponse(BaseModel):
    """Login response with tokens.

    ``user_id``, ``email`` and ``tenant_id`` are what API clients keep as
    their session and echo back in request headers.
    """

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # Seconds until the access token expires
    user_id: uuid.UUID
    email: str
    tenant_id: uuid.UUID | None
    role: str


class RefreshTokenRequest(BaseModel):
    refresh_token: str


class CurrentUserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    tenant_id: uuid.UUID | None
    email: str
    first_name: str
    last_name: str
    role: str
    language: str
    is_active: bool
    last_login_at: datetime | None = None
