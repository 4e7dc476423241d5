"""Authentication API endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from iep.database import get_db
from iep.models.user import Role
from iep.schemas.auth import (
    CurrentUserResponse,
    LoginRequest,
    LoginResponse,
    RefreshTokenRequest,
)
from iep.schemas.common import APIResponse
from iep.services.auth_service import get_auth_service
from iep.utils.permissions import require_role
from iep.utils.tenant_context import get_current_user_id

router = APIRouter()


@router.post("/login", response_model=APIResponse[LoginResponse])
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """Authenticate a user and return tokens plus the session identity."""
    login_response = await get_auth_service().login(db, request)
    await db.commit()
    return APIResponse(data=login_response, message="Login successful")


@router.post("/refresh", response_model=APIResponse[LoginResponse])
async def refresh_token(
    request: RefreshTokenRequest,
    db: AsyncSession = Depends(get_db),
):
    """Exchange a refresh token for a new token pair."""
    return APIResponse(data=await get_auth_service().refresh(db, request.refresh_token))


@router.get("/me", response_model=APIResponse[CurrentUserResponse])
@require_role(*Role)
async def get_me(
    db: AsyncSession = Depends(get_db),
):
    """Get the logged-in user's profile."""
    user = await get_auth_service().get_user(db, get_current_user_id())
    return APIResponse(data=CurrentUserResponse.model_validate(user))
