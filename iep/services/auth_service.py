"""Authentication service for login and token management."""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from iep.config import settings
from iep.exceptions import NotFoundException, UnauthorizedException
from iep.models import Tenant, User
from iep.models.base import utcnow
from iep.schemas.auth import LoginRequest, LoginResponse
from iep.utils.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    verify_password,
)


class AuthService:
    """Service for handling authentication operations."""

    def _issue_tokens(self, user: User) -> LoginResponse:
        access_token = create_access_token(
            user_id=user.id,
            tenant_id=user.tenant_id,
            role=user.role,
            email=user.email,
        )
        return LoginResponse(
            access_token=access_token,
            refresh_token=create_refresh_token(user_id=user.id),
            token_type="bearer",
            expires_in=settings.jwt_access_token_expire_minutes * 60,
            user_id=user.id,
            email=user.email,
            tenant_id=user.tenant_id,
            role=user.role,
        )

    async def login(self, db: AsyncSession, request: LoginRequest) -> LoginResponse:
        """Authenticate a user and return tokens.

        Raises:
            UnauthorizedException: If credentials are invalid, the account is
                inactive, or the email is ambiguous without a subdomain
        """
        stmt = select(User).where(
            User.email == request.email.lower(),
            User.deleted_at.is_(None),
        )
        if request.tenant_subdomain:
            stmt = stmt.join(Tenant, Tenant.id == User.tenant_id).where(
                Tenant.subdomain == request.tenant_subdomain,
                Tenant.deleted_at.is_(None),
            )
        result = await db.execute(stmt)
        users = list(result.scalars().all())

        if len(users) > 1:
            raise UnauthorizedException("This email is registered in several schools; specify the school")
        user = users[0] if users else None

        if not user or not verify_password(request.password, user.password_hash):
            raise UnauthorizedException("Invalid email or password")

        if not user.is_active:
            raise UnauthorizedException("Your account is inactive")

        if user.tenant and not user.tenant.is_active:
            raise UnauthorizedException("This school account is suspended")

        user.last_login_at = utcnow()
        await db.flush()

        return self._issue_tokens(user)

    async def refresh(self, db: AsyncSession, refresh_token: str) -> LoginResponse:
        """Exchange a refresh token for a fresh token pair."""
        payload = decode_refresh_token(refresh_token)
        if not payload:
            raise UnauthorizedException("Invalid or expired refresh token")

        user = await self.get_user(db, uuid.UUID(payload["sub"]))
        if not user.is_active:
            raise UnauthorizedException("Your account is inactive")
        return self._issue_tokens(user)

    async def get_user(self, db: AsyncSession, user_id: uuid.UUID) -> User:
        result = await db.execute(
            select(User).where(User.id == user_id, User.deleted_at.is_(None))
        )
        user = result.scalar_one_or_none()
        if not user:
            raise NotFoundException("User")
        return user


# Singleton instance
_auth_service: AuthService | None = None


def get_auth_service() -> AuthService:
    """Get the auth service singleton."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service
