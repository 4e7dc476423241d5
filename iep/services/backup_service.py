"""Backup, restore and disaster-recovery job bookkeeping.

Jobs capture a manifest of per-table row counts for the tenant; moving the
actual data is the job of the database platform.
"""

import hashlib
import json
import logging
import uuid
from datetime import datetime

from sqlalchemy import column, func, select, table
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from iep.exceptions import ValidationException
from iep.models import TENANT_SCOPED_TABLES, BackupJob, JobKind, JobStatus, WebhookEventType
from iep.models.base import utcnow
from iep.schemas.backup import BackupRequest
from iep.services.base_service import TenantScopedService
from iep.services.webhook_service import get_webhook_service
from iep.utils.tenant_context import get_current_user_id_or_none, get_tenant_id

logger = logging.getLogger(__name__)

WARNING_AFTER_HOURS = 24
CRITICAL_AFTER_HOURS = 48


def backup_health(last_backup_at: datetime | None, now: datetime | None = None) -> str:
    """critical with no backup or one older than 48h, warning past 24h, else healthy."""
    if last_backup_at is None:
        return "critical"
    hours = ((now or utcnow()) - last_backup_at).total_seconds() / 3600
    if hours > CRITICAL_AFTER_HOURS:
        return "critical"
    if hours > WARNING_AFTER_HOURS:
        return "warning"
    return "healthy"


def manifest_checksum(manifest: dict) -> tuple[str, int]:
    """SHA-256 and byte size of the canonical JSON form of a manifest."""
    body = json.dumps(manifest, sort_keys=True, default=str).encode()
    return hashlib.sha256(body).hexdigest(), len(body)


class BackupService(TenantScopedService[BackupJob]):
    """Service for backup jobs. Jobs are never deleted."""

    model = BackupJob
    resource_name = "Backup job"
    soft_delete = False

    async def get_jobs(
        self,
        db: AsyncSession,
        job_kind: str | None = None,
        status: str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[BackupJob], int]:
        query = self.scoped_query()
        if job_kind:
            query = query.where(BackupJob.job_kind == job_kind)
        if status:
            query = query.where(BackupJob.status == status)
        return await self.paginate(db, query, page, page_size, order_by=BackupJob.created_at.desc())

    async def run_backup(self, db: AsyncSession, data: BackupRequest) -> BackupJob:
        job = await self._start(db, JobKind.BACKUP, backup_type=data.backup_type.value)
        if data.note:
            job.details = {"note": data.note}

        try:
            async with db.begin_nested():
                counts = await self._row_counts(db)
        except SQLAlchemyError as e:
            logger.error(f"Backup {job.id} failed: {e}")
            await self._finish(db, job, error=str(e))
            await self._notify(db, WebhookEventType.BACKUP_FAILED, job)
            return job

        manifest = {"tenant_id": str(job.tenant_id), "backup_id": str(job.id), "tables": counts}
        checksum, size = manifest_checksum(manifest)
        job.checksum = checksum
        job.file_size = size
        job.storage_path = f"backups/{job.tenant_id}/{job.id}.json"
        job.details = {**job.details, "manifest": manifest}
        await self._finish(db, job)

        logger.info(f"Backup {job.id} completed ({sum(counts.values())} rows)")
        await self._notify(db, WebhookEventType.BACKUP_COMPLETED, job)
        return job

    async def restore(self, db: AsyncSession, backup_id: uuid.UUID, confirm: bool) -> BackupJob:
        """Record a restore from a completed backup."""
        if not confirm:
            raise ValidationException(
                [{"field": "confirm", "message": "A restore must be explicitly confirmed"}]
            )

        source = await self._completed_backup(db, backup_id)
        job = await self._start(
            db, JobKind.RESTORE, backup_type=source.backup_type, source_backup_id=source.id
        )
        job.details = {"restored_tables": source.details.get("manifest", {}).get("tables", {})}
        await self._finish(db, job)
        logger.warning(f"Restore {job.id} recorded from backup {source.id}")
        return job

    async def run_recovery_test(self, db: AsyncSession) -> BackupJob:
        """Verify the latest completed backup's manifest against its checksum."""
        result = await db.execute(
            self.scoped_query()
            .where(
                BackupJob.job_kind == JobKind.BACKUP.value,
                BackupJob.status == JobStatus.COMPLETED.value,
            )
            .order_by(BackupJob.completed_at.desc())
            .limit(1)
        )
        latest = result.scalar_one_or_none()

        job = await self._start(
            db,
            JobKind.RECOVERY_TEST,
            source_backup_id=latest.id if latest else None,
        )
        if latest is None:
            job.details = {"passed": False}
            await self._finish(db, job, error="No completed backup to test")
            return job

        manifest = latest.details.get("manifest")
        passed = manifest is not None and manifest_checksum(manifest)[0] == latest.checksum
        job.details = {"passed": passed, "backup_id": str(latest.id)}
        await self._finish(db, job, error=None if passed else "Backup manifest checksum mismatch")
        return job

    async def get_status(self, db: AsyncSession) -> dict:
        """Backup health summary for the dashboard."""
        jobs = (await db.execute(self.scoped_query())).scalars().all()

        backups = [j for j in jobs if j.job_kind == JobKind.BACKUP.value]
        completed = [j for j in backups if j.status == JobStatus.COMPLETED.value and j.completed_at]
        tests = [j for j in jobs if j.job_kind == JobKind.RECOVERY_TEST.value and j.completed_at]

        last_backup = max(completed, key=lambda j: j.completed_at, default=None)
        last_test = max(tests, key=lambda j: j.completed_at, default=None)
        now = utcnow()
        last_backup_at = last_backup.completed_at if last_backup else None

        return {
            "health": backup_health(last_backup_at, now),
            "last_backup_at": last_backup_at,
            "hours_since_last_backup": (
                round((now - last_backup_at).total_seconds() / 3600, 2) if last_backup_at else None
            ),
            "total_backups": len(completed),
            "failed_backups": sum(1 for j in backups if j.status == JobStatus.FAILED.value),
            "total_size_bytes": sum(j.file_size or 0 for j in completed),
            "last_recovery_test_at": last_test.completed_at if last_test else None,
            "last_recovery_test_passed": bool(last_test.details.get("passed")) if last_test else None,
        }

    async def _start(self, db: AsyncSession, kind: JobKind, **fields) -> BackupJob:
        return await self.add(
            db,
            job_kind=kind.value,
            status=JobStatus.RUNNING.value,
            requested_by=get_current_user_id_or_none(),
            started_at=utcnow(),
            details={},
            **fields,
        )

    async def _finish(self, db: AsyncSession, job: BackupJob, error: str | None = None) -> None:
        job.status = JobStatus.FAILED.value if error else JobStatus.COMPLETED.value
        job.error_message = error
        job.completed_at = utcnow()
        await db.flush()
        await db.refresh(job)

    async def _completed_backup(self, db: AsyncSession, backup_id: uuid.UUID) -> BackupJob:
        job = await self.get(db, backup_id)
        if job.job_kind != JobKind.BACKUP.value or job.status != JobStatus.COMPLETED.value:
            raise ValidationException(
                [{"field": "backup_id", "message": "Only completed backups can be restored"}]
            )
        return job

    async def _row_counts(self, db: AsyncSession) -> dict[str, int]:
        tenant_id = get_tenant_id()
        counts = {}
        for name in TENANT_SCOPED_TABLES:
            tbl = table(name, column("tenant_id"))
            query = select(func.count()).select_from(tbl).where(tbl.c.tenant_id == tenant_id)
            counts[name] = (await db.execute(query)).scalar() or 0
        return counts

    async def _notify(self, db: AsyncSession, event: WebhookEventType, job: BackupJob) -> None:
        await get_webhook_service().dispatch_event(
            db,
            event.value,
            {
                "backup_id": str(job.id),
                "backup_type": job.backup_type,
                "status": job.status,
                "file_size": job.file_size,
                "error_message": job.error_message,
            },
        )


# Singleton instance
_backup_service: BackupService | None = None


def get_backup_service() -> BackupService:
    """Get the backup service singleton."""
    global _backup_service
    if _backup_service is None:
        _backup_service = BackupService()
    return _backup_service
