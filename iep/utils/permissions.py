"""Role-based permission decorators and utilities."""

from functools import wraps
from typing import Callable

from fastapi import HTTPException

from iep.models.user import Role
from iep.utils.tenant_context import get_current_user_role


def _role_values(roles: tuple[Role | str, ...]) -> set[str]:
    return {role.value if isinstance(role, Role) else role for role in roles}


def require_role(*allowed_roles: Role | str) -> Callable:
    """Decorator that enforces role-based access control.

    Usage:
        @router.post("/students")
        @require_role(Role.ADMIN, Role.TEACHER)
        async def create_student(...):
            ...

    A request without a role (no valid token) is answered with 401, a role
    outside ``allowed_roles`` with 403. SUPER_ADMIN passes every check.
    """
    role_values = _role_values(allowed_roles)

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            current_role = get_current_user_role()

            if current_role is None:
                raise HTTPException(status_code=401, detail="Authentication required")

            if current_role == Role.SUPER_ADMIN.value:
                return await func(*args, **kwargs)

            if current_role not in role_values:
                raise HTTPException(
                    status_code=403,
                    detail="You don't have permission to perform this action",
                )

            return await func(*args, **kwargs)

        return wrapper

    return decorator
