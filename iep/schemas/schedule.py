"""Timetable schemas."""

import uuid
from datetime import datetime, time

from pydantic import BaseModel, ConfigDict, Field, model_validator

from iep.schemas.common import CamelModel


class ScheduleCreate(BaseModel):
    class_id: uuid.UUID
    teacher_id: uuid.UUID
    subject: str = Field(..., min_length=1, max_length=100)
    day_of_week: int = Field(..., ge=0, le=6)
    start_time: time
    end_time: time
    classroom: str | None = Field(None, max_length=50)
    allow_conflicts: bool = False

    @model_validator(mode="after")
    def start_before_end(self):
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


class ScheduleUpdate(BaseModel):
    teacher_id: uuid.UUID | None = None
    subject: str | None = Field(None, min_length=1, max_length=100)
    day_of_week: int | None = Field(None, ge=0, le=6)
    start_time: time | None = None
    end_time: time | None = None
    classroom: str | None = Field(None, max_length=50)
    allow_conflicts: bool = False


class ScheduleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    tenant_id: uuid.UUID
    class_id: uuid.UUID
    teacher_id: uuid.UUID
    subject: str
    day_of_week: int
    start_time: time
    end_time: time
    classroom: str | None = None
    created_at: datetime


class ScheduleConflictResponse(CamelModel):
    type: str
    severity: str
    day_of_week: int
    start_time: time
    end_time: time
    schedule_ids: list[uuid.UUID]
    description: str
