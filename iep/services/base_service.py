"""Shared tenant-scoped CRUD behaviour for resource services."""

import uuid
from typing import Any, Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from iep.exceptions import NotFoundException
from iep.models.base import Base
from iep.utils.tenant_context import get_tenant_id

ModelType = TypeVar("ModelType", bound=Base)


class TenantScopedService(Generic[ModelType]):
    """Generic CRUD with tenant isolation.

    The tenant always comes from the request context, never from the caller.
    Rows of another tenant are indistinguishable from missing rows, so a
    guessed id yields 404 rather than 403.

    Type Parameters:
        ModelType: SQLAlchemy model with ``tenant_id`` (and ``deleted_at`` when
            ``soft_delete`` is True)
    """

    model: type[ModelType]
    resource_name: str = "Resource"
    soft_delete: bool = True

    def scoped_query(self) -> Select:
        """SELECT of the model restricted to the current tenant's live rows."""
        tenant_id = get_tenant_id()
        query = select(self.model).where(self.model.tenant_id == tenant_id)
        if self.soft_delete:
            query = query.where(self.model.deleted_at.is_(None))
        return query

    async def get(self, db: AsyncSession, obj_id: uuid.UUID) -> ModelType:
        """Get a single row by ID.

        Raises:
            NotFoundException: If the row is missing, deleted or owned by another tenant
        """
        query = self.scoped_query().where(self.model.id == obj_id)
        result = await db.execute(query)
        obj = result.scalar_one_or_none()
        if not obj:
            raise NotFoundException(self.resource_name)
        return obj

    async def paginate(
        self,
        db: AsyncSession,
        query: Select,
        page: int = 1,
        page_size: int = 20,
        order_by: Any = None,
    ) -> tuple[list[ModelType], int]:
        """Run a list query, returning one page of rows and the total count."""
        count_query = select(func.count()).select_from(query.subquery())
        total = (await db.execute(count_query)).scalar() or 0

        if order_by is not None:
            query = query.order_by(*order_by) if isinstance(order_by, (list, tuple)) else query.order_by(order_by)
        query = query.offset((page - 1) * page_size).limit(page_size)

        result = await db.execute(query)
        return list(result.scalars().unique().all()), total

    async def add(self, db: AsyncSession, **fields: Any) -> ModelType:
        """Insert a row stamped with the current tenant."""
        obj = self.model(tenant_id=get_tenant_id(), **fields)
        db.add(obj)
        await db.flush()
        await db.refresh(obj)
        return obj

    async def apply_update(
        self,
        db: AsyncSession,
        obj: ModelType,
        data: BaseModel | dict[str, Any],
    ) -> ModelType:
        """Copy the explicitly-set fields of ``data`` onto ``obj``."""
        if isinstance(data, BaseModel):
            data = data.model_dump(exclude_unset=True)
        for field, value in data.items():
            setattr(obj, field, value.value if hasattr(value, "value") else value)
        await db.flush()
        await db.refresh(obj)
        return obj

    async def remove(self, db: AsyncSession, obj_id: uuid.UUID) -> None:
        """Soft delete (or hard delete, for models without soft delete support)."""
        obj = await self.get(db, obj_id)
        if self.soft_delete:
            obj.soft_delete()
            if hasattr(obj, "is_active"):
                obj.is_active = False
        else:
            await db.delete(obj)
        await db.flush()
