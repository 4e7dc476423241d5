"""Tenant (school) management service."""

import logging
import uuid
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from iep.config import settings
from iep.exceptions import ConflictException, NotFoundException
from iep.models import (
    Role,
    SchoolClass,
    StorageQuota,
    Student,
    Teacher,
    Tenant,
    User,
    get_default_tenant_settings,
)
from iep.schemas.tenant import TenantCreate
from iep.utils.security import hash_password
from iep.utils.tenant_context import get_tenant_id

logger = logging.getLogger(__name__)


class TenantService:
    """Service for managing schools.

    Tenants are the one resource not scoped by the request tenant; listing
    and creating them is reserved for SUPER_ADMIN at the route layer.
    """

    async def get_tenants(
        self,
        db: AsyncSession,
        search: str | None = None,
        is_active: bool | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Tenant], int]:
        query = select(Tenant).where(Tenant.deleted_at.is_(None))
        if is_active is not None:
            query = query.where(Tenant.is_active == is_active)
        if search:
            search_term = f"%{search}%"
            query = query.where(Tenant.name.ilike(search_term) | Tenant.subdomain.ilike(search_term))

        count_query = select(func.count()).select_from(query.subquery())
        total = (await db.execute(count_query)).scalar() or 0

        query = query.order_by(Tenant.name).offset((page - 1) * page_size).limit(page_size)
        result = await db.execute(query)
        return list(result.scalars().all()), total

    async def get_tenant(self, db: AsyncSession, tenant_id: uuid.UUID) -> Tenant:
        result = await db.execute(
            select(Tenant).where(Tenant.id == tenant_id, Tenant.deleted_at.is_(None))
        )
        tenant = result.scalar_one_or_none()
        if not tenant:
            raise NotFoundException("Tenant")
        return tenant

    async def get_current_tenant(self, db: AsyncSession) -> Tenant:
        return await self.get_tenant(db, get_tenant_id())

    async def get_tenant_by_subdomain(self, db: AsyncSession, subdomain: str) -> Tenant | None:
        result = await db.execute(
            select(Tenant).where(Tenant.subdomain == subdomain, Tenant.deleted_at.is_(None))
        )
        return result.scalar_one_or_none()

    async def create_tenant(self, db: AsyncSession, data: TenantCreate) -> tuple[Tenant, User]:
        """Create a school, its first ADMIN user and its storage quota."""
        if await self.get_tenant_by_subdomain(db, data.subdomain):
            raise ConflictException(f"Subdomain '{data.subdomain}' is already taken")

        tenant = Tenant(
            name=data.name,
            subdomain=data.subdomain,
            email=data.email,
            phone=data.phone,
            address=data.address,
            school_type=data.school_type.value,
            settings=get_default_tenant_settings(),
            is_active=True,
            onboarding_completed=False,
        )
        db.add(tenant)
        await db.flush()

        admin = User(
            tenant_id=tenant.id,
            email=data.admin_email.lower(),
            password_hash=hash_password(data.admin_password),
            first_name=data.admin_first_name,
            last_name=data.admin_last_name,
            role=Role.ADMIN.value,
            is_active=True,
            language="tr",
        )
        db.add(admin)
        db.add(
            StorageQuota(
                tenant_id=tenant.id,
                quota_bytes=settings.default_storage_quota_bytes,
                used_bytes=0,
                file_count=0,
            )
        )
        await db.flush()
        await db.refresh(tenant)

        logger.info(f"Created tenant {tenant.id} ({tenant.subdomain}) with admin {admin.email}")
        return tenant, admin

    async def update_settings(self, db: AsyncSession, values: dict[str, Any]) -> Tenant:
        """Merge dot-notation keys into the current tenant's settings."""
        tenant = await self.get_current_tenant(db)
        for key, value in values.items():
            tenant.set_setting(key, value)
        await db.flush()
        await db.refresh(tenant)
        return tenant

    async def get_tenant_stats(self, db: AsyncSession) -> dict:
        """Headline counts for the school dashboard."""
        tenant_id = get_tenant_id()

        async def count(model) -> int:
            query = select(func.count()).select_from(model).where(
                model.tenant_id == tenant_id,
                model.deleted_at.is_(None),
            )
            return (await db.execute(query)).scalar() or 0

        return {
            "total_students": await count(Student),
            "total_teachers": await count(Teacher),
            "total_classes": await count(SchoolClass),
            "total_users": await count(User),
        }


# Singleton instance
_tenant_service: TenantService | None = None


def get_tenant_service() -> TenantService:
    """Get the tenant service singleton."""
    global _tenant_service
    if _tenant_service is None:
        _tenant_service = TenantService()
    return _tenant_service
