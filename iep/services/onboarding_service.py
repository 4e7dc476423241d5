"""Onboarding service guiding a new school through setup."""

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from iep.exceptions import ConflictException, NotFoundException, ValidationException
from iep.models import OnboardingProgress, Role, Tenant
from iep.models.base import utcnow
from iep.utils.tenant_context import get_current_user_id, get_current_user_role, get_tenant_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OnboardingStep:
    id: str
    title: str
    required: bool
    estimated_minutes: int
    prerequisites: tuple[str, ...] = ()
    required_fields: tuple[str, ...] = ()


ONBOARDING_STEPS = (
    OnboardingStep("welcome", "Hoş Geldiniz", True, 1, (), ("tutorial_completed",)),
    OnboardingStep(
        "school_setup",
        "Okul Kurulumu",
        True,
        4,
        ("welcome",),
        ("school_name", "school_type", "address", "phone", "email"),
    ),
    OnboardingStep("user_profile", "Kullanıcı Profili", True, 3, ("welcome",), ("display_name",)),
    OnboardingStep(
        "class_setup",
        "Sınıf Kurulumu",
        False,
        5,
        ("school_setup",),
        ("class_name", "grade_level", "subject"),
    ),
    OnboardingStep("integration_setup", "Entegrasyon Kurulumu", False, 2, ("class_setup",)),
    OnboardingStep("completion", "Tamamlandı", True, 1, ("user_profile",), ("completion_acknowledged",)),
)
STEPS_BY_ID = {step.id: step for step in ONBOARDING_STEPS}
FINAL_STEP = "completion"


def get_step(step_id: str) -> OnboardingStep:
    try:
        return STEPS_BY_ID[step_id]
    except KeyError:
        raise NotFoundException(f"Onboarding step '{step_id}'")


def next_step(done: list[str]) -> str | None:
    """The first step, in template order, not yet completed or skipped."""
    for step in ONBOARDING_STEPS:
        if step.id not in done:
            return step.id
    return None


def step_status(step: OnboardingStep, completed: list[str], skipped: list[str]) -> str:
    if step.id in completed:
        return "completed"
    if step.id in skipped:
        return "skipped"
    done = set(completed) | set(skipped)
    return "available" if all(p in done for p in step.prerequisites) else "locked"


def validate_step(step: OnboardingStep, completed: list[str], skipped: list[str], data: dict[str, Any]) -> list[dict]:
    """Prerequisite and required-field errors for completing a step."""
    done = set(completed) | set(skipped)
    errors = [
        {"field": "step", "message": f"Step '{prerequisite}' must be finished first"}
        for prerequisite in step.prerequisites
        if prerequisite not in done
    ]
    errors.extend(
        {"field": name, "message": f"{name} is required"}
        for name in step.required_fields
        if not data.get(name)
    )
    return errors


def progress_percentage(completed: list[str], skipped: list[str]) -> float:
    done = set(completed) | set(skipped)
    return round(len(done & set(STEPS_BY_ID)) / len(ONBOARDING_STEPS) * 100, 2)


def compute_onboarding_metrics(records: list[OnboardingProgress]) -> dict:
    total = len(records)
    finished = [r for r in records if r.completed_at is not None]
    durations = [r.actual_completion_seconds for r in finished if r.actual_completion_seconds]

    step_rates = {
        step.id: round(sum(1 for r in records if step.id in r.completed_steps) / total * 100, 2) if total else 0.0
        for step in ONBOARDING_STEPS
    }
    exits = Counter(r.current_step for r in records if r.completed_at is None)

    return {
        "total_users": total,
        "completed_users": len(finished),
        "completion_rate": round(len(finished) / total * 100, 2) if total else 0.0,
        "average_completion_minutes": round(sum(durations) / len(durations) / 60, 2) if durations else None,
        "step_completion_rates": step_rates,
        "most_common_exit_step": exits.most_common(1)[0][0] if exits else None,
    }


class OnboardingService:
    """Service for onboarding progress of the current user."""

    async def get_progress(self, db: AsyncSession) -> OnboardingProgress | None:
        result = await db.execute(
            select(OnboardingProgress).where(
                OnboardingProgress.tenant_id == get_tenant_id(),
                OnboardingProgress.user_id == get_current_user_id(),
            )
        )
        return result.scalar_one_or_none()

    async def _require_progress(self, db: AsyncSession) -> OnboardingProgress:
        progress = await self.get_progress(db)
        if progress is None:
            raise NotFoundException("Onboarding progress")
        return progress

    async def start(self, db: AsyncSession, preferences: dict[str, Any]) -> OnboardingProgress:
        if await self.get_progress(db):
            raise ConflictException("Onboarding has already been started")

        progress = OnboardingProgress(
            tenant_id=get_tenant_id(),
            user_id=get_current_user_id(),
            current_step=ONBOARDING_STEPS[0].id,
            completed_steps=[],
            skipped_steps=[],
            step_data={},
            preferences=preferences,
            started_at=utcnow(),
        )
        db.add(progress)
        await db.flush()
        await db.refresh(progress)
        return progress

    async def complete_step(self, db: AsyncSession, step_id: str, data: dict[str, Any]) -> OnboardingProgress:
        step = get_step(step_id)
        progress = await self._require_progress(db)

        if step.id in progress.completed_steps:
            raise ConflictException(f"Step '{step.id}' is already completed")

        errors = validate_step(step, progress.completed_steps, progress.skipped_steps, data)
        if errors:
            raise ValidationException(errors)

        # JSONB columns need new objects to register as changed
        progress.completed_steps = [*progress.completed_steps, step.id]
        progress.step_data = {**progress.step_data, step.id: data}
        progress.current_step = next_step(progress.completed_steps + progress.skipped_steps) or FINAL_STEP

        if step.id == FINAL_STEP:
            await self._finish(db, progress)

        await db.flush()
        await db.refresh(progress)
        return progress

    async def skip_step(self, db: AsyncSession, step_id: str, reason: str = "") -> OnboardingProgress:
        step = get_step(step_id)
        if step.required:
            raise ValidationException([{"field": "step", "message": "Cannot skip a required step"}])

        progress = await self._require_progress(db)
        if step.id in progress.completed_steps or step.id in progress.skipped_steps:
            raise ConflictException(f"Step '{step.id}' is already finished")

        progress.skipped_steps = [*progress.skipped_steps, step.id]
        progress.step_data = {**progress.step_data, step.id: {"skipped": True, "reason": reason}}
        progress.current_step = next_step(progress.completed_steps + progress.skipped_steps) or FINAL_STEP

        await db.flush()
        await db.refresh(progress)
        return progress

    async def _finish(self, db: AsyncSession, progress: OnboardingProgress) -> None:
        now = utcnow()
        progress.completed_at = now
        progress.actual_completion_seconds = int((now - progress.started_at).total_seconds())

        if get_current_user_role() == Role.ADMIN.value:
            tenant = await db.get(Tenant, progress.tenant_id)
            if tenant is not None:
                tenant.onboarding_completed = True

        logger.info(f"User {progress.user_id} completed onboarding in {progress.actual_completion_seconds}s")

    async def get_metrics(self, db: AsyncSession) -> dict:
        result = await db.execute(
            select(OnboardingProgress).where(OnboardingProgress.tenant_id == get_tenant_id())
        )
        return compute_onboarding_metrics(list(result.scalars().all()))


def describe_steps(progress: OnboardingProgress) -> list[dict]:
    return [
        {
            "id": step.id,
            "title": step.title,
            "required": step.required,
            "prerequisites": list(step.prerequisites),
            "estimated_minutes": step.estimated_minutes,
            "required_fields": list(step.required_fields),
            "status": step_status(step, progress.completed_steps, progress.skipped_steps),
        }
        for step in ONBOARDING_STEPS
    ]


# Singleton instance
_onboarding_service: OnboardingService | None = None


def get_onboarding_service() -> OnboardingService:
    """Get the onboarding service singleton."""
    global _onboarding_service
    if _onboarding_service is None:
        _onboarding_service = OnboardingService()
    return _onboarding_service
