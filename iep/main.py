"""FastAPI application factory and entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.cors import CORSMiddleware

from iep.config import settings
from iep.database import async_session_factory, close_db
from iep.exceptions import create_exception_handlers
from iep.models.base import utcnow
from iep.schemas.health import HealthCheckResponse

log_level = logging.DEBUG if settings.is_development else getattr(logging, settings.app_log_level)
logging.basicConfig(
    level=log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    force=True,
)
logger = logging.getLogger(__name__)
logger.info(f"Logging configured at level: {logging.getLevelName(log_level)}")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events."""
        logger.info(f"Starting {settings.app_name} in {settings.app_env} mode")
        yield
        logger.info(f"Shutting down {settings.app_name}")
        await close_db()

    app = FastAPI(
        title=settings.app_name,
        description="Multi-tenant school management platform",
        version=settings.app_version,
        docs_url="/api/docs" if settings.app_debug else None,
        redoc_url="/api/redoc" if settings.app_debug else None,
        openapi_url="/api/openapi.json" if settings.app_debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.is_development else [settings.app_base_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Starlette runs the last added middleware first: authentication must
    # populate the user context before the tenant header is checked.
    from iep.middleware import AuthMiddleware, TenantMiddleware
    app.add_middleware(TenantMiddleware)
    app.add_middleware(AuthMiddleware)

    for exc_class, handler in create_exception_handlers().items():
        app.add_exception_handler(exc_class, handler)

    register_routers(app)

    return app


async def check_database() -> str:
    try:
        async with async_session_factory() as session:
            await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Health check database failure: {e}")
        return "unhealthy"
    return "healthy"


def register_routers(app: FastAPI):
    """Register the versioned API and the health checks."""
    from iep.api.v1 import api_router

    app.include_router(api_router, prefix="/api/v1")

    @app.get("/health", tags=["Health"], response_model=HealthCheckResponse)
    @app.get("/api/health", tags=["Health"], response_model=HealthCheckResponse)
    async def health_check():
        """Health check endpoint for load balancers and monitoring."""
        checks = {"database": await check_database()}
        healthy = all(status == "healthy" for status in checks.values())
        body = HealthCheckResponse(
            status="healthy" if healthy else "unhealthy",
            timestamp=utcnow(),
            version=settings.app_version,
            checks=checks,
        )
        return JSONResponse(
            status_code=200 if healthy else 503,
            content=body.model_dump(mode="json"),
        )


# Create the app instance
app = create_app()


def main():
    """Entry point for running the application."""
    import uvicorn

    uvicorn.run(
        "iep.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_level=settings.app_log_level.lower(),
    )


if __name__ == "__main__":
    main()
