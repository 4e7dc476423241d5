"""School (tenant) API endpoints."""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from iep.database import get_db
from iep.models.user import Role
from iep.schemas.common import APIResponse, PaginationMeta
from iep.schemas.tenant import TenantCreate, TenantResponse, TenantSettingsUpdate
from iep.services.tenant_service import get_tenant_service
from iep.utils.permissions import require_role

router = APIRouter()


@router.get("/current", response_model=APIResponse[TenantResponse])
@require_role(*Role)
async def get_current_tenant(
    db: AsyncSession = Depends(get_db),
):
    """Get the school of the logged-in user."""
    tenant = await get_tenant_service().get_current_tenant(db)
    return APIResponse(data=TenantResponse.model_validate(tenant))


@router.patch("/current/settings", response_model=APIResponse[TenantResponse])
@require_role(Role.ADMIN)
async def update_tenant_settings(
    data: TenantSettingsUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Update school settings (dot-notation keys, e.g. ``features.gradebook``)."""
    tenant = await get_tenant_service().update_settings(db, data.settings)
    await db.commit()
    return APIResponse(data=TenantResponse.model_validate(tenant), message="Settings updated")


@router.get("/current/stats", response_model=APIResponse[dict])
@require_role(Role.ADMIN, Role.TEACHER)
async def get_tenant_stats(
    db: AsyncSession = Depends(get_db),
):
    """Headline counts for the school dashboard."""
    return APIResponse(data=await get_tenant_service().get_tenant_stats(db))


@router.get("", response_model=APIResponse[list[TenantResponse]])
@require_role(Role.SUPER_ADMIN)
async def list_tenants(
    search: str | None = Query(None, description="Search by name or subdomain"),
    is_active: bool | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """List all schools (super admin only)."""
    tenants, total = await get_tenant_service().get_tenants(
        db, search=search, is_active=is_active, page=page, page_size=page_size
    )
    return APIResponse(
        data=[TenantResponse.model_validate(t) for t in tenants],
        pagination=PaginationMeta.build(page, page_size, total),
    )


@router.post("", response_model=APIResponse[TenantResponse], status_code=201)
@require_role(Role.SUPER_ADMIN)
async def create_tenant(
    data: TenantCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create a school with its first admin account (super admin only)."""
    tenant, _ = await get_tenant_service().create_tenant(db, data)
    await db.commit()
    return APIResponse(data=TenantResponse.model_validate(tenant), message="School created successfully")


@router.get("/{tenant_id}", response_model=APIResponse[TenantResponse])
@require_role(Role.SUPER_ADMIN)
async def get_tenant(
    tenant_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    tenant = await get_tenant_service().get_tenant(db, tenant_id)
    return APIResponse(data=TenantResponse.model_validate(tenant))
