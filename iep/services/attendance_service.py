"""Attendance service for marking, bulk entry and statistics."""

import uuid
from datetime import date
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from iep.exceptions import IEPException, NotFoundException
from iep.models import AttendanceRecord, AttendanceStatus, Student, WebhookEventType
from iep.schemas.attendance import (
    AttendanceMark,
    AttendanceUpdate,
    BulkAttendanceCreate,
    BulkAttendanceResponse,
)
from iep.services.base_service import TenantScopedService
from iep.services.class_service import get_class_service, teacher_class_ids
from iep.services.webhook_service import get_webhook_service
from iep.utils.tenant_context import get_current_user_id_or_none, get_tenant_id

TREND_THRESHOLD = 5.0


def _attendance_rate(records: list[AttendanceRecord]) -> float:
    if not records:
        return 0.0
    attended = sum(
        1 for r in records
        if r.status in (AttendanceStatus.PRESENT.value, AttendanceStatus.LATE.value)
    )
    return attended / len(records) * 100


def attendance_trend(records: Iterable[AttendanceRecord]) -> str:
    """Compare the attendance rate of the first and second half of the window."""
    ordered = sorted(records, key=lambda r: r.date)
    if len(ordered) < 2:
        return "stable"

    middle = len(ordered) // 2
    difference = _attendance_rate(ordered[middle:]) - _attendance_rate(ordered[:middle])
    if difference > TREND_THRESHOLD:
        return "improving"
    if difference < -TREND_THRESHOLD:
        return "declining"
    return "stable"


def compute_attendance_statistics(records: Iterable[AttendanceRecord]) -> dict:
    records = list(records)
    counts = {status.value: 0 for status in AttendanceStatus}
    for record in records:
        counts[record.status] = counts.get(record.status, 0) + 1

    present = counts[AttendanceStatus.PRESENT.value]
    late = counts[AttendanceStatus.LATE.value]
    return {
        "total_days": len(records),
        "present_days": present,
        "absent_days": counts[AttendanceStatus.ABSENT.value],
        "late_days": late,
        "excused_days": counts[AttendanceStatus.EXCUSED.value],
        "sick_days": counts[AttendanceStatus.SICK.value],
        "attendance_rate": round(_attendance_rate(records), 2),
        "punctuality_rate": round(present / (present + late) * 100, 2) if present + late else 0.0,
        "trend": attendance_trend(records),
    }


class AttendanceService(TenantScopedService[AttendanceRecord]):
    """Service for managing attendance."""

    model = AttendanceRecord
    resource_name = "Attendance record"

    async def get_attendance_records(
        self,
        db: AsyncSession,
        class_id: uuid.UUID | None = None,
        student_id: uuid.UUID | None = None,
        status: str | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> tuple[list[AttendanceRecord], int]:
        query = await self._filtered(db, class_id, student_id, date_from, date_to)
        if status:
            query = query.where(AttendanceRecord.status == status)
        return await self.paginate(
            db, query, page, page_size, order_by=(AttendanceRecord.date.desc(), AttendanceRecord.student_id)
        )

    async def _filtered(
        self,
        db: AsyncSession,
        class_id: uuid.UUID | None = None,
        student_id: uuid.UUID | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ):
        query = self.scoped_query()

        allowed = await teacher_class_ids(db)
        if allowed is not None:
            query = query.where(AttendanceRecord.class_id.in_(allowed))

        if class_id:
            query = query.where(AttendanceRecord.class_id == class_id)
        if student_id:
            query = query.where(AttendanceRecord.student_id == student_id)
        if date_from:
            query = query.where(AttendanceRecord.date >= date_from)
        if date_to:
            query = query.where(AttendanceRecord.date <= date_to)
        return query

    async def mark_attendance(self, db: AsyncSession, data: AttendanceMark) -> AttendanceRecord:
        """Create or overwrite the record for a student on a date."""
        await get_class_service().get(db, data.class_id)
        await self._get_student(db, data.student_id)

        record = await self._upsert(
            db,
            student_id=data.student_id,
            class_id=data.class_id,
            day=data.date,
            status=data.status.value,
            time_in=data.time_in,
            time_out=data.time_out,
            notes=data.notes,
            excuse_reason=data.excuse_reason,
        )
        await db.flush()
        await db.refresh(record)

        await get_webhook_service().dispatch_event(
            db,
            WebhookEventType.ATTENDANCE_MARKED.value,
            {
                "record_id": str(record.id),
                "student_id": str(record.student_id),
                "class_id": str(record.class_id),
                "date": record.date.isoformat(),
                "status": record.status,
            },
        )
        return record

    async def record_bulk_attendance(
        self,
        db: AsyncSession,
        data: BulkAttendanceCreate,
    ) -> BulkAttendanceResponse:
        """Record attendance for multiple students at once.

        Unknown students are reported per row; the rest are still saved.
        """
        await get_class_service().get(db, data.class_id)

        success_count = 0
        errors = []

        for record_data in data.records:
            try:
                await self._get_student(db, record_data.student_id)
            except IEPException as e:
                errors.append({"student_id": str(record_data.student_id), "error": e.message})
                continue

            await self._upsert(
                db,
                student_id=record_data.student_id,
                class_id=data.class_id,
                day=data.date,
                status=record_data.status.value,
                time_in=record_data.time_in,
                notes=record_data.notes,
            )
            success_count += 1

        await db.flush()

        if success_count:
            await get_webhook_service().dispatch_event(
                db,
                WebhookEventType.ATTENDANCE_BULK.value,
                {"class_id": str(data.class_id), "date": data.date.isoformat(), "count": success_count},
            )

        return BulkAttendanceResponse(
            success_count=success_count,
            error_count=len(errors),
            errors=errors,
        )

    async def update_attendance(
        self,
        db: AsyncSession,
        record_id: uuid.UUID,
        data: AttendanceUpdate,
    ) -> AttendanceRecord:
        record = await self.get(db, record_id)
        record.marked_by = get_current_user_id_or_none()
        return await self.apply_update(db, record, data)

    async def get_statistics(
        self,
        db: AsyncSession,
        class_id: uuid.UUID | None = None,
        student_id: uuid.UUID | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> dict:
        """Attendance statistics, defaulting to the current month."""
        today = date.today()
        date_from = date_from or today.replace(day=1)
        date_to = date_to or today

        query = await self._filtered(db, class_id, student_id, date_from, date_to)
        records = (await db.execute(query)).scalars().all()
        return compute_attendance_statistics(records)

    async def get_class_summary(self, db: AsyncSession, class_id: uuid.UUID, day: date) -> dict:
        """Daily roll-call summary: who is marked and how."""
        school_class = await get_class_service().get(db, class_id)
        query = await self._filtered(db, class_id=class_id, date_from=day, date_to=day)
        records = (await db.execute(query)).scalars().all()

        stats = compute_attendance_statistics(records)
        total_students = school_class.current_enrollment
        return {
            "class_id": class_id,
            "date": day,
            "total_students": total_students,
            "marked": len(records),
            "unmarked": max(total_students - len(records), 0),
            "present": stats["present_days"],
            "absent": stats["absent_days"],
            "late": stats["late_days"],
            "excused": stats["excused_days"],
            "sick": stats["sick_days"],
            "attendance_rate": stats["attendance_rate"],
        }

    async def get_absent_for_notification(self, db: AsyncSession, day: date) -> list[AttendanceRecord]:
        """Absences on a day whose parents have not been told yet."""
        query = await self._filtered(db, date_from=day, date_to=day)
        query = query.where(
            AttendanceRecord.status == AttendanceStatus.ABSENT.value,
            AttendanceRecord.parent_notified == False,  # noqa: E712
        )
        result = await db.execute(query.order_by(AttendanceRecord.class_id))
        return list(result.scalars().all())

    async def mark_parent_notified(self, db: AsyncSession, record_id: uuid.UUID) -> AttendanceRecord:
        record = await self.get(db, record_id)
        record.parent_notified = True
        await db.flush()
        await db.refresh(record)
        return record

    async def _upsert(
        self,
        db: AsyncSession,
        student_id: uuid.UUID,
        class_id: uuid.UUID,
        day: date,
        **fields,
    ) -> AttendanceRecord:
        result = await db.execute(
            select(AttendanceRecord).where(
                AttendanceRecord.tenant_id == get_tenant_id(),
                AttendanceRecord.student_id == student_id,
                AttendanceRecord.date == day,
            )
        )
        record = result.scalar_one_or_none()
        if record is None:
            record = AttendanceRecord(
                tenant_id=get_tenant_id(),
                student_id=student_id,
                class_id=class_id,
                date=day,
            )
            db.add(record)
        else:
            # A re-mark revives a soft-deleted row instead of colliding with it
            record.deleted_at = None
            record.class_id = class_id

        for field, value in fields.items():
            setattr(record, field, value)
        record.marked_by = get_current_user_id_or_none()
        return record

    async def _get_student(self, db: AsyncSession, student_id: uuid.UUID) -> Student:
        """Get and verify a student exists."""
        result = await db.execute(
            select(Student).where(
                Student.id == student_id,
                Student.tenant_id == get_tenant_id(),
                Student.deleted_at.is_(None),
            )
        )
        student = result.scalar_one_or_none()
        if not student:
            raise NotFoundException("Student")
        return student


# Singleton instance
_attendance_service: AttendanceService | None = None


def get_attendance_service() -> AttendanceService:
    """Get the attendance service singleton."""
    global _attendance_service
    if _attendance_service is None:
        _attendance_service = AttendanceService()
    return _attendance_service
