"""Database configuration and session management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from iep.config import settings
from iep.utils.tenant_context import get_tenant_id_or_none


def create_engine() -> AsyncEngine:
    """Create the async database engine."""
    # NullPool in development so connections are never shared across reloads
    pool_class = NullPool if settings.is_development else None

    engine_kwargs = {
        "echo": settings.app_debug,
        "future": True,
    }

    if pool_class:
        engine_kwargs["poolclass"] = pool_class
    else:
        engine_kwargs["pool_size"] = settings.database_pool_size
        engine_kwargs["max_overflow"] = settings.database_max_overflow
        engine_kwargs["pool_pre_ping"] = True

    return create_async_engine(settings.async_database_url, **engine_kwargs)


# Global engine instance
engine = create_engine()

# Session factory
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def apply_tenant_scope(session: AsyncSession) -> None:
    """Expose the request tenant to row-level security policies.

    The setting is transaction-local, so it never leaks to the next
    request that reuses the pooled connection.
    """
    tenant_id = get_tenant_id_or_none()
    if tenant_id is None:
        return
    await session.execute(
        text("SELECT set_config('app.current_tenant_id', :tenant_id, true)"),
        {"tenant_id": str(tenant_id)},
    )


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that yields a tenant-scoped database session."""
    async with async_session_factory() as session:
        try:
            await apply_tenant_scope(session)
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def get_db_context() -> AsyncGenerator[AsyncSession, None]:
    """Context manager for database session (for use outside of FastAPI dependencies)."""
    async with async_session_factory() as session:
        try:
            await apply_tenant_scope(session)
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def close_db() -> None:
    """Close database connections."""
    await engine.dispose()
