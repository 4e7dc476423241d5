"""Tenant schemas."""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from iep.models.tenant import SchoolType


class TenantCreate(BaseModel):
    """Super-admin request to create a school together with its first admin."""

    name: str = Field(..., min_length=1, max_length=255)
    subdomain: str = Field(..., min_length=2, max_length=100, pattern=r"^[a-z0-9][a-z0-9-]*$")
    email: EmailStr
    phone: str | None = Field(None, max_length=50)
    address: str | None = None
    school_type: SchoolType = SchoolType.SPECIAL_EDUCATION
    admin_email: EmailStr
    admin_password: str = Field(..., min_length=8)
    admin_first_name: str = Field(..., min_length=1, max_length=100)
    admin_last_name: str = Field(..., min_length=1, max_length=100)


class TenantSettingsUpdate(BaseModel):
    """Partial settings update, applied key by key (dot-notation allowed)."""

    settings: dict[str, Any]


class TenantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    subdomain: str
    email: str
    phone: str | None
    address: str | None
    school_type: str
    settings: dict
    is_active: bool
    onboarding_completed: bool
    created_at: datetime
