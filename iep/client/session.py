"""Client-side session: who is calling and on behalf of which tenant."""

import inspect
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Union

import jwt

TENANT_HEADER = "x-tenant-id"


@dataclass(frozen=True)
class ClientSession:
    user_id: str
    tenant_id: str
    email: str | None = None
    access_token: str | None = None
    expires_at: datetime | None = None

    @property
    def is_expired(self) -> bool:
        return self.expires_at is not None and self.expires_at <= datetime.now(timezone.utc)

    def headers(self) -> dict[str, str]:
        headers = {TENANT_HEADER: self.tenant_id}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        if self.email:
            headers["X-User-Email"] = self.email
        if self.user_id:
            headers["X-User-ID"] = self.user_id
        return headers

    @classmethod
    def from_access_token(cls, token: str, tenant_id: str | None = None) -> "ClientSession":
        """Build a session from the claims of an access token issued by /auth/login.

        The signature is not verified here; the server does that on every
        request. ``tenant_id`` overrides the token's tenant, which is how a
        SUPER_ADMIN picks the school to act on.
        """
        claims = jwt.decode(token, options={"verify_signature": False})
        tenant = tenant_id or claims.get("tenant_id")
        if not tenant:
            raise ValueError("Access token carries no tenant; pass tenant_id explicitly")
        exp = claims.get("exp")
        return cls(
            user_id=str(claims["sub"]),
            tenant_id=str(tenant),
            email=claims.get("email"),
            access_token=token,
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc) if exp else None,
        )


SessionProvider = Callable[[], Union[ClientSession, None, Awaitable[ClientSession | None]]]


def static_session(session: ClientSession | None) -> SessionProvider:
    return lambda: session


async def resolve_session(provider: SessionProvider) -> ClientSession | None:
    """The provider's current session, or None when it is absent or expired."""
    session = provider()
    if inspect.isawaitable(session):
        session = await session
    if session is None or session.is_expired:
        return None
    return session
