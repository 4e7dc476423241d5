"""Health check schema."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class HealthCheckResponse(BaseModel):
    status: Literal["healthy", "degraded", "unhealthy"]
    timestamp: datetime
    version: str | None = None
    checks: dict[str, str] | None = None
