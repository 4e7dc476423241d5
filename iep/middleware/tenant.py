"""Tenant context middleware.

Runs after AuthMiddleware. It reconciles the ``x-tenant-id`` header with the
tenant carried in the token and detects the request language.
"""

import logging
import uuid
from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from iep.config import settings
from iep.exceptions import error_body
from iep.services.i18n_service import get_i18n_service
from iep.utils.tenant_context import (
    get_current_user_id_or_none,
    get_tenant_id_or_none,
    is_super_admin,
    set_current_language,
    set_tenant_id,
)

logger = logging.getLogger(__name__)

TENANT_HEADER = "x-tenant-id"


class TenantMiddleware(BaseHTTPMiddleware):
    """Middleware for tenant-specific context setup.

    Handles:
    - Language detection from ``?lang``, the language cookie or Accept-Language
    - ``x-tenant-id``: must match the token's tenant; SUPER_ADMIN may use it
      to act inside any tenant
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and set up tenant context."""
        language = self._detect_language(request)
        set_current_language(language)

        header_value = request.headers.get(TENANT_HEADER)
        if header_value and get_current_user_id_or_none() is not None:
            try:
                requested = uuid.UUID(header_value)
            except ValueError:
                return JSONResponse(
                    status_code=400,
                    content=error_body(f"Invalid {TENANT_HEADER} header"),
                )

            if is_super_admin():
                set_tenant_id(requested)
            elif requested != get_tenant_id_or_none():
                logger.warning(
                    f"Tenant mismatch for user {get_current_user_id_or_none()}: "
                    f"header {requested}, token {get_tenant_id_or_none()}"
                )
                return JSONResponse(
                    status_code=403,
                    content=error_body(get_i18n_service().t("errors.tenant_mismatch", language)),
                )

        return await call_next(request)

    def _detect_language(self, request: Request) -> str:
        """Detect preferred language from request.

        Priority:
        1. Query parameter: ?lang=en
        2. Cookie: language=en
        3. Accept-Language header
        4. Default language from settings
        """
        lang = request.query_params.get("lang")
        if lang and lang in settings.supported_languages_list:
            return lang

        lang = request.cookies.get("language")
        if lang and lang in settings.supported_languages_list:
            return lang

        accept_lang = request.headers.get("Accept-Language", "")
        for lang in self._parse_accept_language(accept_lang):
            if lang in settings.supported_languages_list:
                return lang

        return settings.default_language

    def _parse_accept_language(self, header: str) -> list[str]:
        """Parse Accept-Language header and return languages in preference order.

        Example header: tr-TR,tr;q=0.9,en;q=0.8
        """
        if not header:
            return []

        languages = []
        for part in header.split(","):
            part = part.strip()
            if not part:
                continue

            if ";q=" in part:
                lang, q = part.split(";q=")
                try:
                    quality = float(q)
                except ValueError:
                    quality = 0.0
            else:
                lang = part
                quality = 1.0

            languages.append((lang.split("-")[0].lower(), quality))

        languages.sort(key=lambda x: x[1], reverse=True)
        return [lang for lang, _ in languages]
