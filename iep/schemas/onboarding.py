"""Onboarding schemas."""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from iep.schemas.common import CamelModel


class OnboardingStart(BaseModel):
    preferences: dict[str, Any] = Field(default_factory=dict)


class StepCompleteRequest(BaseModel):
    data: dict[str, Any] = Field(default_factory=dict)


class OnboardingStepInfo(CamelModel):
    id: str
    title: str
    required: bool
    prerequisites: list[str]
    estimated_minutes: int
    required_fields: list[str]
    status: str  # completed | skipped | available | locked


class OnboardingProgressResponse(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    current_step: str | None
    completed_steps: list[str]
    skipped_steps: list[str]
    progress_percentage: float
    is_completed: bool
    started_at: datetime
    completed_at: datetime | None = None
    steps: list[OnboardingStepInfo]


class OnboardingMetricsResponse(CamelModel):
    total_users: int
    completed_users: int
    completion_rate: float
    average_completion_minutes: float | None = None
    step_completion_rates: dict[str, float]
    most_common_exit_step: str | None = None
