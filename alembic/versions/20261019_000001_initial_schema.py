"""Initial schema with all tables and row-level security

Revision ID: 20261019_000001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '20261019_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Kept in sync with iep.models.TENANT_SCOPED_TABLES
TENANT_SCOPED_TABLES = (
    'students',
    'teachers',
    'school_classes',
    'class_students',
    'class_teachers',
    'assignments',
    'assignment_submissions',
    'grades',
    'attendance_records',
    'file_entities',
    'file_shares',
    'storage_quotas',
    'webhook_endpoints',
    'webhook_events',
    'backup_jobs',
    'class_schedules',
    'onboarding_progress',
)


def _uuid(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, postgresql.UUID(as_uuid=True), nullable=nullable)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def _deleted_at() -> sa.Column:
    return sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True)


def _tenant_fk() -> sa.ForeignKeyConstraint:
    return sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], ondelete='CASCADE')


def upgrade() -> None:
    # === TENANTS ===
    op.create_table(
        'tenants',
        _uuid('id'),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('subdomain', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('school_type', sa.String(length=50), nullable=False, server_default='special_education'),
        sa.Column('settings', postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default='{}'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('onboarding_completed', sa.Boolean(), nullable=False, server_default='false'),
        *_timestamps(),
        _deleted_at(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('subdomain')
    )
    op.create_index('idx_tenants_subdomain', 'tenants', ['subdomain'], postgresql_where=sa.text('deleted_at IS NULL'))

    # === USERS ===
    op.create_table(
        'users',
        _uuid('id'),
        _uuid('tenant_id', nullable=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('language', sa.String(length=5), nullable=False, server_default='tr'),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        _deleted_at(),
        _tenant_fk(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(
        'idx_users_email_tenant', 'users', ['email', 'tenant_id'], unique=True,
        postgresql_where=sa.text('deleted_at IS NULL AND tenant_id IS NOT NULL'),
    )
    op.create_index(
        'idx_users_email_super', 'users', ['email'], unique=True,
        postgresql_where=sa.text('deleted_at IS NULL AND tenant_id IS NULL'),
    )
    op.create_index(
        'idx_users_tenant_role', 'users', ['tenant_id', 'role'],
        postgresql_where=sa.text('deleted_at IS NULL'),
    )

    # === STUDENTS ===
    op.create_table(
        'students',
        _uuid('id'),
        _uuid('tenant_id'),
        _uuid('user_id', nullable=True),
        sa.Column('student_number', sa.String(length=50), nullable=True),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        *_timestamps(),
        _deleted_at(),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_students_tenant_id', 'students', ['tenant_id'])
    op.create_index('idx_students_tenant', 'students', ['tenant_id'], postgresql_where=sa.text('deleted_at IS NULL'))
    op.create_index(
        'idx_students_number_tenant', 'students', ['tenant_id', 'student_number'], unique=True,
        postgresql_where=sa.text('deleted_at IS NULL AND student_number IS NOT NULL'),
    )

    # === TEACHERS ===
    op.create_table(
        'teachers',
        _uuid('id'),
        _uuid('tenant_id'),
        _uuid('user_id', nullable=True),
        sa.Column('first_name', sa.String(length=100), nullable=False),
        sa.Column('last_name', sa.String(length=100), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('subject', sa.String(length=100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        *_timestamps(),
        _deleted_at(),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_teachers_tenant_id', 'teachers', ['tenant_id'])
    op.create_index('idx_teachers_tenant', 'teachers', ['tenant_id'], postgresql_where=sa.text('deleted_at IS NULL'))

    # === SCHOOL CLASSES ===
    op.create_table(
        'school_classes',
        _uuid('id'),
        _uuid('tenant_id'),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('grade', sa.String(length=20), nullable=False),
        sa.Column('section', sa.String(length=10), nullable=True),
        sa.Column('capacity', sa.Integer(), nullable=True),
        sa.Column('academic_year', sa.String(length=20), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        *_timestamps(),
        _deleted_at(),
        _tenant_fk(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_school_classes_tenant_id', 'school_classes', ['tenant_id'])
    op.create_index('idx_classes_tenant', 'school_classes', ['tenant_id'], postgresql_where=sa.text('deleted_at IS NULL'))

    # === CLASS STUDENTS ===
    op.create_table(
        'class_students',
        _uuid('id'),
        _uuid('tenant_id'),
        _uuid('class_id'),
        _uuid('student_id'),
        sa.Column('enrolled_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        *_timestamps(),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['class_id'], ['school_classes.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('class_id', 'student_id', name='uq_class_students_pair')
    )
    op.create_index('ix_class_students_tenant_id', 'class_students', ['tenant_id'])
    op.create_index('ix_class_students_class_id', 'class_students', ['class_id'])
    op.create_index('ix_class_students_student_id', 'class_students', ['student_id'])

    # === CLASS TEACHERS ===
    op.create_table(
        'class_teachers',
        _uuid('id'),
        _uuid('tenant_id'),
        _uuid('class_id'),
        _uuid('teacher_id'),
        sa.Column('is_primary', sa.Boolean(), nullable=False, server_default='false'),
        *_timestamps(),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['class_id'], ['school_classes.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['teacher_id'], ['teachers.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('class_id', 'teacher_id', name='uq_class_teachers_pair')
    )
    op.create_index('ix_class_teachers_tenant_id', 'class_teachers', ['tenant_id'])
    op.create_index('ix_class_teachers_class_id', 'class_teachers', ['class_id'])
    op.create_index('ix_class_teachers_teacher_id', 'class_teachers', ['teacher_id'])

    # === ASSIGNMENTS ===
    op.create_table(
        'assignments',
        _uuid('id'),
        _uuid('tenant_id'),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('instructions', sa.Text(), nullable=True),
        sa.Column('type', sa.String(length=20), nullable=False, server_default='homework'),
        sa.Column('subject', sa.String(length=100), nullable=False),
        _uuid('class_id'),
        _uuid('teacher_id'),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('max_score', sa.Integer(), nullable=False, server_default='100'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='draft'),
        sa.Column('is_graded', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('rubric', postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default='[]'),
        sa.Column('metadata', postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default='{}'),
        *_timestamps(),
        _deleted_at(),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['class_id'], ['school_classes.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['teacher_id'], ['teachers.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_assignments_tenant_id', 'assignments', ['tenant_id'])
    op.create_index('ix_assignments_teacher_id', 'assignments', ['teacher_id'])
    op.create_index(
        'idx_assignments_tenant_status', 'assignments', ['tenant_id', 'status'],
        postgresql_where=sa.text('deleted_at IS NULL'),
    )
    op.create_index('idx_assignments_class_due', 'assignments', ['class_id', 'due_date'])

    # === ASSIGNMENT SUBMISSIONS ===
    op.create_table(
        'assignment_submissions',
        _uuid('id'),
        _uuid('tenant_id'),
        _uuid('assignment_id'),
        _uuid('student_id'),
        sa.Column('submitted_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('file_ids', postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default='[]'),
        sa.Column('score', sa.Numeric(precision=6, scale=2), nullable=True),
        sa.Column('feedback', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='submitted'),
        _uuid('graded_by', nullable=True),
        sa.Column('graded_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        _deleted_at(),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['assignment_id'], ['assignments.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['graded_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('assignment_id', 'student_id', name='uq_submission_assignment_student')
    )
    op.create_index('ix_assignment_submissions_tenant_id', 'assignment_submissions', ['tenant_id'])
    op.create_index('ix_assignment_submissions_assignment_id', 'assignment_submissions', ['assignment_id'])
    op.create_index('ix_assignment_submissions_student_id', 'assignment_submissions', ['student_id'])
    op.create_index('idx_submissions_status', 'assignment_submissions', ['tenant_id', 'status'])

    # === GRADES ===
    op.create_table(
        'grades',
        _uuid('id'),
        _uuid('tenant_id'),
        _uuid('student_id'),
        _uuid('class_id'),
        _uuid('teacher_id', nullable=True),
        _uuid('assignment_id', nullable=True),
        sa.Column('subject', sa.String(length=100), nullable=False),
        sa.Column('grade_type', sa.String(length=20), nullable=False),
        sa.Column('grade_value', sa.Numeric(precision=6, scale=2), nullable=False),
        sa.Column('max_grade', sa.Numeric(precision=6, scale=2), nullable=False, server_default='100'),
        sa.Column('weight', sa.Numeric(precision=4, scale=2), nullable=False, server_default='1'),
        sa.Column('grade_date', sa.Date(), nullable=False),
        sa.Column('exam_name', sa.String(length=255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('semester', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('academic_year', sa.String(length=20), nullable=False),
        *_timestamps(),
        _deleted_at(),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['class_id'], ['school_classes.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['teacher_id'], ['teachers.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['assignment_id'], ['assignments.id'], ondelete='SET NULL'),
        sa.CheckConstraint('grade_value >= 0', name='ck_grades_value_non_negative'),
        sa.CheckConstraint('max_grade > 0', name='ck_grades_max_positive'),
        sa.CheckConstraint('semester IN (1, 2)', name='ck_grades_semester'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_grades_tenant_id', 'grades', ['tenant_id'])
    op.create_index(
        'idx_grades_student_subject', 'grades', ['tenant_id', 'student_id', 'subject'],
        postgresql_where=sa.text('deleted_at IS NULL'),
    )
    op.create_index('idx_grades_class', 'grades', ['class_id', 'subject'])

    # === ATTENDANCE ===
    op.create_table(
        'attendance_records',
        _uuid('id'),
        _uuid('tenant_id'),
        _uuid('student_id'),
        _uuid('class_id'),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='present'),
        sa.Column('time_in', sa.Time(), nullable=True),
        sa.Column('time_out', sa.Time(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('excuse_reason', sa.Text(), nullable=True),
        _uuid('marked_by', nullable=True),
        sa.Column('parent_notified', sa.Boolean(), nullable=False, server_default='false'),
        *_timestamps(),
        _deleted_at(),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['class_id'], ['school_classes.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['marked_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tenant_id', 'student_id', 'date', name='uq_attendance_student_date')
    )
    op.create_index('ix_attendance_records_tenant_id', 'attendance_records', ['tenant_id'])
    op.create_index('idx_attendance_tenant_date', 'attendance_records', ['tenant_id', 'date'])
    op.create_index('idx_attendance_class_date', 'attendance_records', ['class_id', 'date'])

    # === FILES ===
    op.create_table(
        'file_entities',
        _uuid('id'),
        _uuid('tenant_id'),
        sa.Column('storage_path', sa.String(length=500), nullable=False),
        sa.Column('original_name', sa.String(length=255), nullable=False),
        sa.Column('content_type', sa.String(length=100), nullable=False),
        sa.Column('file_size', sa.BigInteger(), nullable=False),
        sa.Column('category', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='PENDING'),
        _uuid('uploaded_by', nullable=True),
        *_timestamps(),
        _deleted_at(),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['uploaded_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_file_entities_tenant_id', 'file_entities', ['tenant_id'])
    op.create_index('idx_files_tenant', 'file_entities', ['tenant_id'], postgresql_where=sa.text('deleted_at IS NULL'))

    op.create_table(
        'file_shares',
        _uuid('id'),
        _uuid('tenant_id'),
        _uuid('file_id'),
        _uuid('shared_with_user_id', nullable=True),
        _uuid('shared_with_class_id', nullable=True),
        sa.Column('permission', sa.String(length=20), nullable=False, server_default='VIEW'),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        _uuid('shared_by', nullable=True),
        *_timestamps(),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['file_id'], ['file_entities.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['shared_with_user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['shared_with_class_id'], ['school_classes.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['shared_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_file_shares_tenant_id', 'file_shares', ['tenant_id'])
    op.create_index('ix_file_shares_file_id', 'file_shares', ['file_id'])

    op.create_table(
        'storage_quotas',
        _uuid('tenant_id'),
        sa.Column('quota_bytes', sa.BigInteger(), nullable=False),
        sa.Column('used_bytes', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('file_count', sa.Integer(), nullable=False, server_default='0'),
        *_timestamps(),
        _tenant_fk(),
        sa.PrimaryKeyConstraint('tenant_id')
    )

    # === WEBHOOKS ===
    op.create_table(
        'webhook_endpoints',
        _uuid('id'),
        _uuid('tenant_id'),
        sa.Column('url', sa.String(length=500), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.Column('secret', sa.String(length=255), nullable=False),
        sa.Column('events', postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default='[]'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        *_timestamps(),
        _tenant_fk(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_webhook_endpoints_tenant_id', 'webhook_endpoints', ['tenant_id'])
    op.create_index(
        'idx_webhooks_tenant_active', 'webhook_endpoints', ['tenant_id'],
        postgresql_where=sa.text('is_active = true'),
    )

    op.create_table(
        'webhook_events',
        _uuid('id'),
        _uuid('tenant_id'),
        _uuid('endpoint_id'),
        sa.Column('event_type', sa.String(length=100), nullable=False),
        sa.Column('payload', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='PENDING'),
        sa.Column('attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_attempt_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('response_code', sa.Integer(), nullable=True),
        sa.Column('response_body', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['endpoint_id'], ['webhook_endpoints.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_webhook_events_tenant_id', 'webhook_events', ['tenant_id'])
    op.create_index(
        'idx_webhook_events_status', 'webhook_events', ['status'],
        postgresql_where=sa.text("status IN ('PENDING', 'FAILED')"),
    )

    # === BACKUPS ===
    op.create_table(
        'backup_jobs',
        _uuid('id'),
        _uuid('tenant_id'),
        sa.Column('job_kind', sa.String(length=20), nullable=False, server_default='BACKUP'),
        sa.Column('backup_type', sa.String(length=20), nullable=False, server_default='full'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        _uuid('source_backup_id', nullable=True),
        _uuid('requested_by', nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('file_size', sa.BigInteger(), nullable=True),
        sa.Column('checksum', sa.String(length=128), nullable=True),
        sa.Column('storage_path', sa.String(length=500), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('details', postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default='{}'),
        *_timestamps(),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['source_backup_id'], ['backup_jobs.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['requested_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_backup_jobs_tenant_id', 'backup_jobs', ['tenant_id'])
    op.create_index('idx_backup_jobs_tenant_kind', 'backup_jobs', ['tenant_id', 'job_kind', 'created_at'])
    op.create_index(
        'idx_backup_jobs_completed', 'backup_jobs', ['tenant_id', 'completed_at'],
        postgresql_where=sa.text("status = 'completed'"),
    )

    # === SCHEDULES ===
    op.create_table(
        'class_schedules',
        _uuid('id'),
        _uuid('tenant_id'),
        _uuid('class_id'),
        _uuid('teacher_id'),
        sa.Column('subject', sa.String(length=100), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('classroom', sa.String(length=50), nullable=True),
        *_timestamps(),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['class_id'], ['school_classes.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['teacher_id'], ['teachers.id'], ondelete='CASCADE'),
        sa.CheckConstraint('day_of_week BETWEEN 0 AND 6', name='ck_schedule_day'),
        sa.CheckConstraint('start_time < end_time', name='ck_schedule_time_range'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_class_schedules_tenant_id', 'class_schedules', ['tenant_id'])
    op.create_index('idx_schedules_tenant_day', 'class_schedules', ['tenant_id', 'day_of_week'])

    # === ONBOARDING ===
    op.create_table(
        'onboarding_progress',
        _uuid('id'),
        _uuid('tenant_id'),
        _uuid('user_id'),
        sa.Column('current_step', sa.String(length=50), nullable=False),
        sa.Column('completed_steps', postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default='[]'),
        sa.Column('skipped_steps', postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default='[]'),
        sa.Column('step_data', postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default='{}'),
        sa.Column('preferences', postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default='{}'),
        sa.Column('started_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('actual_completion_seconds', sa.Integer(), nullable=True),
        *_timestamps(),
        _tenant_fk(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('tenant_id', 'user_id', name='uq_onboarding_tenant_user')
    )
    op.create_index('ix_onboarding_progress_tenant_id', 'onboarding_progress', ['tenant_id'])

    # === ROW LEVEL SECURITY ===
    # current_setting(..., true) yields NULL when no tenant is set, which hides every row
    for table in TENANT_SCOPED_TABLES:
        op.execute(f'ALTER TABLE {table} ENABLE ROW LEVEL SECURITY')
        op.execute(
            f"CREATE POLICY tenant_isolation ON {table} "
            f"USING (tenant_id = current_setting('app.current_tenant_id', true)::uuid)"
        )


def downgrade() -> None:
    for table in reversed(TENANT_SCOPED_TABLES):
        op.execute(f'DROP POLICY IF EXISTS tenant_isolation ON {table}')
        op.execute(f'ALTER TABLE {table} DISABLE ROW LEVEL SECURITY')

    op.drop_table('onboarding_progress')
    op.drop_table('class_schedules')
    op.drop_table('backup_jobs')
    op.drop_table('webhook_events')
    op.drop_table('webhook_endpoints')
    op.drop_table('storage_quotas')
    op.drop_table('file_shares')
    op.drop_table('file_entities')
    op.drop_table('attendance_records')
    op.drop_table('grades')
    op.drop_table('assignment_submissions')
    op.drop_table('assignments')
    op.drop_table('class_teachers')
    op.drop_table('class_students')
    op.drop_table('school_classes')
    op.drop_table('teachers')
    op.drop_table('students')
    op.drop_table('users')
    op.drop_table('tenants')
