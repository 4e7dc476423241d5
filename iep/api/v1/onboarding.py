"""Onboarding API endpoints for the current user."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from iep.database import get_db
from iep.exceptions import NotFoundException
from iep.models.onboarding import OnboardingProgress
from iep.models.user import Role
from iep.schemas.common import APIResponse
from iep.schemas.onboarding import (
    OnboardingMetricsResponse,
    OnboardingProgressResponse,
    OnboardingStart,
    OnboardingStepInfo,
    StepCompleteRequest,
)
from iep.services.onboarding_service import (
    describe_steps,
    get_onboarding_service,
    progress_percentage,
)
from iep.utils.permissions import require_role

router = APIRouter()

# Onboarding is for school users; SUPER_ADMIN has no tenant to set up
SCHOOL_ROLES = (Role.ADMIN, Role.TEACHER, Role.STUDENT, Role.PARENT)


def _progress_response(progress: OnboardingProgress) -> OnboardingProgressResponse:
    return OnboardingProgressResponse(
        id=progress.id,
        user_id=progress.user_id,
        current_step=progress.current_step,
        completed_steps=progress.completed_steps,
        skipped_steps=progress.skipped_steps,
        progress_percentage=progress_percentage(progress.completed_steps, progress.skipped_steps),
        is_completed=progress.completed_at is not None,
        started_at=progress.started_at,
        completed_at=progress.completed_at,
        steps=[OnboardingStepInfo(**step) for step in describe_steps(progress)],
    )


@router.get("", response_model=OnboardingProgressResponse)
@require_role(*SCHOOL_ROLES)
async def get_progress(
    db: AsyncSession = Depends(get_db),
):
    progress = await get_onboarding_service().get_progress(db)
    if progress is None:
        raise NotFoundException("Onboarding progress")
    return _progress_response(progress)


@router.post("/start", response_model=OnboardingProgressResponse, status_code=201)
@require_role(*SCHOOL_ROLES)
async def start_onboarding(
    data: OnboardingStart,
    db: AsyncSession = Depends(get_db),
):
    progress = await get_onboarding_service().start(db, data.preferences)
    await db.commit()
    return _progress_response(progress)


@router.get("/metrics", response_model=OnboardingMetricsResponse)
@require_role(Role.ADMIN)
async def get_metrics(
    db: AsyncSession = Depends(get_db),
):
    """Completion funnel of every user in the school."""
    return OnboardingMetricsResponse(**await get_onboarding_service().get_metrics(db))


@router.post("/steps/{step_id}/complete", response_model=OnboardingProgressResponse)
@require_role(*SCHOOL_ROLES)
async def complete_step(
    step_id: str,
    data: StepCompleteRequest,
    db: AsyncSession = Depends(get_db),
):
    progress = await get_onboarding_service().complete_step(db, step_id, data.data)
    await db.commit()
    return _progress_response(progress)


@router.post("/steps/{step_id}/skip", response_model=OnboardingProgressResponse)
@require_role(*SCHOOL_ROLES)
async def skip_step(
    step_id: str,
    db: AsyncSession = Depends(get_db),
):
    progress = await get_onboarding_service().skip_step(db, step_id)
    await db.commit()
    return _progress_response(progress)
