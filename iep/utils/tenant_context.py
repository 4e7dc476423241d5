"""Request context management using contextvars.

Tracks the current tenant, user, role and language for the lifetime of a
request. Services read the tenant from here instead of taking it as an
argument, so a handler can never forget to scope a query.
"""

import contextvars
import uuid

from iep.exceptions import TenantContextError, UserContextError

_tenant_id: contextvars.ContextVar[uuid.UUID | None] = contextvars.ContextVar(
    "tenant_id", default=None
)
_current_user_id: contextvars.ContextVar[uuid.UUID | None] = contextvars.ContextVar(
    "current_user_id", default=None
)
_current_user_role: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "current_user_role", default=None
)
_current_user_email: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "current_user_email", default=None
)
_current_language: contextvars.ContextVar[str] = contextvars.ContextVar(
    "current_language", default="tr"
)


# === Tenant Context ===

def get_tenant_id() -> uuid.UUID:
    """Get the current tenant ID.

    Raises:
        TenantContextError: If tenant context is not set
    """
    tid = _tenant_id.get()
    if tid is None:
        raise TenantContextError("Tenant context is not set")
    return tid


def get_tenant_id_or_none() -> uuid.UUID | None:
    """Get the current tenant ID or None if not set."""
    return _tenant_id.get()


def set_tenant_id(tid: uuid.UUID | None) -> None:
    _tenant_id.set(tid)


# === User Context ===

def get_current_user_id() -> uuid.UUID:
    """Get the current user ID.

    Raises:
        UserContextError: If user context is not set
    """
    uid = _current_user_id.get()
    if uid is None:
        raise UserContextError("User context is not set")
    return uid


def get_current_user_id_or_none() -> uuid.UUID | None:
    return _current_user_id.get()


def set_current_user_id(uid: uuid.UUID | None) -> None:
    _current_user_id.set(uid)


def get_current_user_role() -> str | None:
    return _current_user_role.get()


def set_current_user_role(role: str | None) -> None:
    _current_user_role.set(role)


def get_current_user_email() -> str | None:
    return _current_user_email.get()


def set_current_user_email(email: str | None) -> None:
    _current_user_email.set(email)


# === Language Context ===

def get_current_language() -> str:
    return _current_language.get()


def set_current_language(lang: str) -> None:
    _current_language.set(lang)


def clear_all_context() -> None:
    """Clear all context variables.

    Called at the start and end of each request to prevent context leakage.
    """
    _tenant_id.set(None)
    _current_user_id.set(None)
    _current_user_role.set(None)
    _current_user_email.set(None)
    _current_language.set("tr")


def is_super_admin() -> bool:
    return get_current_user_role() == "SUPER_ADMIN"


def is_staff() -> bool:
    """Check if the current user is staff (super admin, admin or teacher)."""
    return get_current_user_role() in ("SUPER_ADMIN", "ADMIN", "TEACHER")
