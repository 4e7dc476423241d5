"""Service layer for business logic."""

from iep.services.assignment_service import AssignmentService, get_assignment_service
from iep.services.attendance_service import AttendanceService, get_attendance_service
from iep.services.auth_service import AuthService, get_auth_service
from iep.services.backup_service import BackupService, get_backup_service
from iep.services.class_service import ClassService, get_class_service
from iep.services.file_service import FileService, get_file_service
from iep.services.grade_service import GradeService, get_grade_service
from iep.services.i18n_service import I18nService, get_i18n_service
from iep.services.onboarding_service import OnboardingService, get_onboarding_service
from iep.services.schedule_service import ScheduleService, get_schedule_service
from iep.services.student_service import StudentService, get_student_service
from iep.services.teacher_service import TeacherService, get_teacher_service
from iep.services.tenant_service import TenantService, get_tenant_service
from iep.services.webhook_service import WebhookService, get_webhook_service

__all__ = [
    "AuthService",
    "get_auth_service",
    "TenantService",
    "get_tenant_service",
    "StudentService",
    "get_student_service",
    "TeacherService",
    "get_teacher_service",
    "ClassService",
    "get_class_service",
    "AssignmentService",
    "get_assignment_service",
    "GradeService",
    "get_grade_service",
    "AttendanceService",
    "get_attendance_service",
    "FileService",
    "get_file_service",
    "WebhookService",
    "get_webhook_service",
    "BackupService",
    "get_backup_service",
    "ScheduleService",
    "get_schedule_service",
    "OnboardingService",
    "get_onboarding_service",
    "I18nService",
    "get_i18n_service",
]
