"""SQLAlchemy models for İ-EP.APP."""

from iep.models.base import (
    Base,
    BaseModel,
    SoftDeleteMixin,
    TenantOwnedMixin,
    TenantScopedModel,
    TimestampMixin,
)
from iep.models.tenant import Tenant, SchoolType, get_default_tenant_settings
from iep.models.user import User, Role
from iep.models.student import Student
from iep.models.teacher import Teacher
from iep.models.school_class import SchoolClass, ClassStudent, ClassTeacher
from iep.models.assignment import (
    Assignment,
    AssignmentStatus,
    AssignmentSubmission,
    AssignmentType,
    SubmissionStatus,
)
from iep.models.grade import Grade, GradeType
from iep.models.attendance import AttendanceRecord, AttendanceStatus
from iep.models.file_entity import (
    FileCategory,
    FileEntity,
    FileShare,
    FileStatus,
    SharePermission,
    StorageQuota,
)
from iep.models.webhook import (
    WebhookEndpoint,
    WebhookEvent,
    WebhookEventType,
    WebhookEventStatus,
    generate_webhook_secret,
)
from iep.models.backup import BackupJob, BackupType, JobKind, JobStatus
from iep.models.schedule import ClassSchedule
from iep.models.onboarding import OnboardingProgress

# Tables protected by the row-level security policy. users is left out
# because login resolves the account before any tenant is known.
TENANT_SCOPED_TABLES = (
    "students",
    "teachers",
    "school_classes",
    "class_students",
    "class_teachers",
    "assignments",
    "assignment_submissions",
    "grades",
    "attendance_records",
    "file_entities",
    "file_shares",
    "storage_quotas",
    "webhook_endpoints",
    "webhook_events",
    "backup_jobs",
    "class_schedules",
    "onboarding_progress",
)

__all__ = [
    # Base
    "Base",
    "BaseModel",
    "TenantOwnedMixin",
    "TenantScopedModel",
    "TimestampMixin",
    "SoftDeleteMixin",
    # Tenant / users
    "Tenant",
    "SchoolType",
    "get_default_tenant_settings",
    "User",
    "Role",
    # People
    "Student",
    "Teacher",
    # Classes
    "SchoolClass",
    "ClassStudent",
    "ClassTeacher",
    # Academic
    "Assignment",
    "AssignmentStatus",
    "AssignmentSubmission",
    "AssignmentType",
    "SubmissionStatus",
    "Grade",
    "GradeType",
    "AttendanceRecord",
    "AttendanceStatus",
    "ClassSchedule",
    # Files
    "FileCategory",
    "FileEntity",
    "FileShare",
    "FileStatus",
    "SharePermission",
    "StorageQuota",
    # Webhooks
    "WebhookEndpoint",
    "WebhookEvent",
    "WebhookEventType",
    "WebhookEventStatus",
    "generate_webhook_secret",
    # Operations
    "BackupJob",
    "BackupType",
    "JobKind",
    "JobStatus",
    "OnboardingProgress",
    "TENANT_SCOPED_TABLES",
]
