"""Middleware exports."""

from iep.middleware.auth import AuthMiddleware
from iep.middleware.tenant import TenantMiddleware

__all__ = ["AuthMiddleware", "TenantMiddleware"]
