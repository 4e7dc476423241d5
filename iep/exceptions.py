"""Custom exception classes and global exception handlers."""

import logging
import traceback

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class IEPException(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundException(IEPException):
    """Resource not found exception."""

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found", 404)


class ForbiddenException(IEPException):
    """Access forbidden exception."""

    def __init__(self, message: str = "You don't have permission to perform this action"):
        super().__init__(message, 403)


class UnauthorizedException(IEPException):
    """Authentication required exception."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, 401)


class ConflictException(IEPException):
    """Resource conflict exception."""

    def __init__(self, message: str = "Resource already exists"):
        super().__init__(message, 409)


class ValidationException(IEPException):
    """Validation error exception with field-level errors."""

    def __init__(self, errors: list[dict] | str):
        if isinstance(errors, str):
            errors = [{"field": "general", "message": errors}]
        super().__init__("Validation failed", 422)
        self.errors = errors


class TenantContextError(IEPException):
    """Tenant context not set error."""

    def __init__(self, message: str = "Tenant context is required"):
        super().__init__(message, 400)


class UserContextError(IEPException):
    """User context not set error."""

    def __init__(self, message: str = "User context is required"):
        super().__init__(message, 401)


def error_body(message: str, errors: list[dict] | None = None) -> dict:
    content = {"status": "error", "message": message}
    if errors is not None:
        content["errors"] = errors
    return content


def create_exception_handlers() -> dict:
    """Create the exception handlers registered on the application."""

    async def iep_exception_handler(request: Request, exc: IEPException):
        """Handle application exceptions."""
        logger.warning(
            f"IEPException on {request.method} {request.url.path}: {exc.message} (status={exc.status_code})"
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.message, getattr(exc, "errors", None)),
        )

    async def validation_exception_handler(request: Request, exc: ValidationException):
        """Handle validation exceptions with field-level errors."""
        logger.warning(f"ValidationException on {request.method} {request.url.path}: {exc.errors}")
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.message, exc.errors),
        )

    async def request_validation_handler(request: Request, exc: RequestValidationError):
        """Turn FastAPI request validation errors into the common error body."""
        errors = [
            {
                "field": ".".join(str(part) for part in error["loc"] if part != "body"),
                "message": error["msg"],
            }
            for error in exc.errors()
        ]
        logger.warning(f"Request validation failed on {request.method} {request.url.path}: {errors}")
        return JSONResponse(status_code=422, content=error_body("Validation failed", errors))

    async def http_exception_handler(request: Request, exc: HTTPException):
        """Render HTTPException (raised by permission checks) in the common error body."""
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    async def generic_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        from iep.services.i18n_service import get_i18n_service
        from iep.utils.tenant_context import get_current_language

        logger.error(f"Unhandled exception on {request.method} {request.url.path}")
        logger.error(f"Exception: {type(exc).__name__}: {exc}")
        tb_lines = traceback.format_exception(type(exc), exc, exc.__traceback__)
        logger.error("".join(tb_lines))

        return JSONResponse(
            status_code=500,
            content=error_body(get_i18n_service().t("errors.internal", get_current_language())),
        )

    return {
        IEPException: iep_exception_handler,
        ValidationException: validation_exception_handler,
        RequestValidationError: request_validation_handler,
        HTTPException: http_exception_handler,
        Exception: generic_exception_handler,
    }
