"""Weekly timetable service with conflict detection."""

import uuid
from itertools import combinations
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession
from uuid_extensions import uuid7

from iep.exceptions import ConflictException, ValidationException
from iep.models import ClassSchedule
from iep.schemas.schedule import ScheduleCreate, ScheduleUpdate
from iep.services.base_service import TenantScopedService
from iep.services.class_service import get_class_service
from iep.services.teacher_service import get_teacher_service
from iep.utils.tenant_context import get_tenant_id

DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

# conflict type -> (shared attribute, severity)
CONFLICT_RULES = {
    "teacher_overlap": ("teacher_id", "high"),
    "class_overlap": ("class_id", "high"),
    "classroom_overlap": ("classroom", "medium"),
}


def slots_overlap(a: ClassSchedule, b: ClassSchedule) -> bool:
    """Same weekday and intersecting [start, end) ranges; touching slots do not overlap."""
    return (
        a.day_of_week == b.day_of_week
        and a.start_time < b.end_time
        and b.start_time < a.end_time
    )


def conflicts_between(a: ClassSchedule, b: ClassSchedule) -> list[dict]:
    if not slots_overlap(a, b):
        return []

    conflicts = []
    for conflict_type, (attribute, severity) in CONFLICT_RULES.items():
        value = getattr(a, attribute)
        if value is None or value != getattr(b, attribute):
            continue
        conflicts.append({
            "type": conflict_type,
            "severity": severity,
            "day_of_week": a.day_of_week,
            "start_time": max(a.start_time, b.start_time),
            "end_time": min(a.end_time, b.end_time),
            "schedule_ids": [a.id, b.id],
            "description": (
                f"{a.subject} and {b.subject} overlap on {DAY_NAMES[a.day_of_week]} "
                f"({conflict_type.replace('_', ' ')})"
            ),
        })
    return conflicts


def detect_conflicts(slots: Iterable[ClassSchedule]) -> list[dict]:
    """Every pairwise conflict in a timetable."""
    conflicts = []
    for a, b in combinations(list(slots), 2):
        conflicts.extend(conflicts_between(a, b))
    return conflicts


class ScheduleService(TenantScopedService[ClassSchedule]):
    """Service for managing class timetables."""

    model = ClassSchedule
    resource_name = "Schedule"
    soft_delete = False

    async def get_schedules(
        self,
        db: AsyncSession,
        class_id: uuid.UUID | None = None,
        teacher_id: uuid.UUID | None = None,
        day_of_week: int | None = None,
    ) -> list[ClassSchedule]:
        query = self.scoped_query()
        if class_id:
            query = query.where(ClassSchedule.class_id == class_id)
        if teacher_id:
            query = query.where(ClassSchedule.teacher_id == teacher_id)
        if day_of_week is not None:
            query = query.where(ClassSchedule.day_of_week == day_of_week)
        result = await db.execute(
            query.order_by(ClassSchedule.day_of_week, ClassSchedule.start_time)
        )
        return list(result.scalars().all())

    async def get_conflicts(self, db: AsyncSession) -> list[dict]:
        return detect_conflicts(await self.get_schedules(db))

    async def create_schedule(self, db: AsyncSession, data: ScheduleCreate) -> ClassSchedule:
        """Create a slot, refusing conflicts unless ``allow_conflicts`` is set."""
        await get_class_service().get(db, data.class_id)
        await get_teacher_service().get(db, data.teacher_id)

        candidate = ClassSchedule(
            id=uuid7(),
            tenant_id=get_tenant_id(),
            **data.model_dump(exclude={"allow_conflicts"}),
        )
        await self._check_conflicts(db, candidate, data.allow_conflicts)

        db.add(candidate)
        await db.flush()
        await db.refresh(candidate)
        return candidate

    async def update_schedule(
        self,
        db: AsyncSession,
        schedule_id: uuid.UUID,
        data: ScheduleUpdate,
    ) -> ClassSchedule:
        schedule = await self.get(db, schedule_id)
        update_data = data.model_dump(exclude_unset=True, exclude={"allow_conflicts"})
        if update_data.get("teacher_id"):
            await get_teacher_service().get(db, update_data["teacher_id"])

        # Validate the would-be slot before touching the persistent row
        candidate = ClassSchedule(
            id=schedule.id,
            tenant_id=schedule.tenant_id,
            class_id=schedule.class_id,
            teacher_id=update_data.get("teacher_id", schedule.teacher_id),
            subject=update_data.get("subject", schedule.subject),
            day_of_week=update_data.get("day_of_week", schedule.day_of_week),
            start_time=update_data.get("start_time", schedule.start_time),
            end_time=update_data.get("end_time", schedule.end_time),
            classroom=update_data.get("classroom", schedule.classroom),
        )
        if candidate.start_time >= candidate.end_time:
            raise ValidationException(
                [{"field": "end_time", "message": "start_time must be before end_time"}]
            )
        await self._check_conflicts(db, candidate, data.allow_conflicts)

        return await self.apply_update(db, schedule, update_data)

    async def delete_schedule(self, db: AsyncSession, schedule_id: uuid.UUID) -> None:
        await self.remove(db, schedule_id)

    async def _check_conflicts(self, db: AsyncSession, candidate: ClassSchedule, allow: bool) -> None:
        existing = await self.get_schedules(db, day_of_week=candidate.day_of_week)
        conflicts = [
            conflict
            for slot in existing
            if slot.id != candidate.id
            for conflict in conflicts_between(candidate, slot)
        ]
        if conflicts and not allow:
            raise ConflictException(
                "Schedule conflicts: " + "; ".join(c["description"] for c in conflicts)
            )


# Singleton instance
_schedule_service: ScheduleService | None = None


def get_schedule_service() -> ScheduleService:
    """Get the schedule service singleton."""
    global _schedule_service
    if _schedule_service is None:
        _schedule_service = ScheduleService()
    return _schedule_service
