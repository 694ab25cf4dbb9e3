"""initial_portal_schema

Revision ID: 20260301_0000
Revises:
Create Date: 2026-03-01 00:00:00.000000+00:00

"""
from alembic import op
import sqlalchemy as sa

from samit.database_types import GUID


revision = '20260301_0000'
down_revision = None
branch_labels = None
depends_on = None

user_role = sa.Enum('user', 'lembaga', 'admin', name='user_role')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', GUID(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('magic_link_token', sa.String(), nullable=True),
        sa.Column('magic_link_expires_at', sa.DateTime(), nullable=True),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        sa.Column('last_login_ip', sa.String(length=45), nullable=True),
        sa.Column('failed_login_attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('account_locked_until', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_magic_link_token'), 'users', ['magic_link_token'], unique=False)

    # default_cv_id gets its foreign key once resumes exists
    op.create_table(
        'profiles',
        sa.Column('id', GUID(), nullable=False),
        sa.Column('role', user_role, nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('socials', sa.JSON(), nullable=True),
        sa.Column('default_cv_id', GUID(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_profiles_role'), 'profiles', ['role'], unique=False)

    op.create_table(
        'resumes',
        sa.Column('id', GUID(), nullable=False),
        sa.Column('user_id', GUID(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('file_url', sa.String(), nullable=False),
        sa.Column('storage_path', sa.String(), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=False),
        sa.Column('is_default', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('uploaded_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_resumes_user_id'), 'resumes', ['user_id'], unique=False)
    op.create_index(
        'uq_resumes_one_default_per_user', 'resumes', ['user_id'], unique=True,
        postgresql_where=sa.text('is_default'),
        sqlite_where=sa.text('is_default = 1'),
    )

    # Batch mode for SQLite compatibility
    with op.batch_alter_table('profiles', schema=None) as batch_op:
        batch_op.create_foreign_key(
            'fk_profiles_default_cv_id', 'resumes', ['default_cv_id'], ['id'], ondelete='SET NULL'
        )

    op.create_table(
        'organizations',
        sa.Column('id', GUID(), nullable=False),
        sa.Column('owner_id', GUID(), nullable=False),
        sa.Column('slug', sa.String(), nullable=False),
        sa.Column('display_name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('website', sa.String(length=500), nullable=True),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('employee_count', sa.String(length=50), nullable=True),
        sa.Column('verification_status', sa.String(), nullable=False, server_default='pending'),
        sa.Column('verification_notes', sa.Text(), nullable=True),
        sa.Column('verified_at', sa.DateTime(), nullable=True),
        sa.Column('legal_documents', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['owner_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_organizations_owner_id'), 'organizations', ['owner_id'], unique=True)
    op.create_index(op.f('ix_organizations_slug'), 'organizations', ['slug'], unique=True)
    op.create_index(op.f('ix_organizations_verification_status'), 'organizations', ['verification_status'], unique=False)

    op.create_table(
        'jobs',
        sa.Column('id', GUID(), nullable=False),
        sa.Column('org_id', GUID(), nullable=False),
        sa.Column('slug', sa.String(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('requirements', sa.Text(), nullable=True),
        sa.Column('benefits', sa.Text(), nullable=True),
        sa.Column('category', sa.String(), nullable=True),
        sa.Column('employment_type', sa.String(), nullable=True),
        sa.Column('location_type', sa.String(), nullable=True),
        sa.Column('location_city', sa.String(length=100), nullable=True),
        sa.Column('jlpt_required', sa.String(length=2), nullable=True),
        sa.Column('salary_min', sa.Integer(), nullable=True),
        sa.Column('salary_max', sa.Integer(), nullable=True),
        sa.Column('salary_currency', sa.String(length=3), nullable=False, server_default='JPY'),
        sa.Column('show_salary', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('application_deadline', sa.Date(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('published_at', sa.DateTime(), nullable=True),
        sa.Column('applications_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('views_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['org_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_jobs_org_id'), 'jobs', ['org_id'], unique=False)
    op.create_index(op.f('ix_jobs_slug'), 'jobs', ['slug'], unique=True)
    op.create_index(op.f('ix_jobs_category'), 'jobs', ['category'], unique=False)
    op.create_index(op.f('ix_jobs_employment_type'), 'jobs', ['employment_type'], unique=False)
    op.create_index(op.f('ix_jobs_jlpt_required'), 'jobs', ['jlpt_required'], unique=False)
    op.create_index(op.f('ix_jobs_is_active'), 'jobs', ['is_active'], unique=False)

    op.create_table(
        'applications',
        sa.Column('id', GUID(), nullable=False),
        sa.Column('job_id', GUID(), nullable=False),
        sa.Column('applicant_id', GUID(), nullable=False),
        sa.Column('cv_url', sa.String(), nullable=False),
        sa.Column('cover_letter', sa.Text(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='applied'),
        sa.Column('status_notes', sa.Text(), nullable=True),
        sa.Column('applied_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['applicant_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('job_id', 'applicant_id', name='uq_application_job_applicant')
    )
    op.create_index(op.f('ix_applications_applicant_id'), 'applications', ['applicant_id'], unique=False)
    op.create_index('idx_applications_job_status', 'applications', ['job_id', 'status'], unique=False)

    op.create_table(
        'classes',
        sa.Column('id', GUID(), nullable=False),
        sa.Column('slug', sa.String(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('class_type', sa.String(), nullable=False, server_default='kaiwa'),
        sa.Column('jlpt_level', sa.String(length=2), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('schedule', sa.String(length=255), nullable=True),
        sa.Column('is_online', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('meeting_link', sa.String(length=500), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('max_students', sa.Integer(), nullable=True),
        sa.Column('enrolled_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('price', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_classes_slug'), 'classes', ['slug'], unique=True)
    op.create_index(op.f('ix_classes_class_type'), 'classes', ['class_type'], unique=False)
    op.create_index(op.f('ix_classes_jlpt_level'), 'classes', ['jlpt_level'], unique=False)
    op.create_index(op.f('ix_classes_is_active'), 'classes', ['is_active'], unique=False)

    op.create_table(
        'class_enrollments',
        sa.Column('id', GUID(), nullable=False),
        sa.Column('user_id', GUID(), nullable=False),
        sa.Column('class_id', GUID(), nullable=False),
        sa.Column('status', sa.String(), nullable=False, server_default='registered'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('enrolled_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['class_id'], ['classes.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'class_id', name='uq_enrollment_user_class')
    )
    op.create_index(op.f('ix_class_enrollments_user_id'), 'class_enrollments', ['user_id'], unique=False)
    op.create_index(op.f('ix_class_enrollments_class_id'), 'class_enrollments', ['class_id'], unique=False)

    op.create_table(
        'activity_logs',
        sa.Column('id', GUID(), nullable=False),
        sa.Column('actor_id', GUID(), nullable=True),
        sa.Column('action', sa.String(), nullable=False),
        sa.Column('target_type', sa.String(), nullable=False),
        sa.Column('target_id', GUID(), nullable=False),
        sa.Column('meta', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['actor_id'], ['profiles.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_activity_logs_actor_id'), 'activity_logs', ['actor_id'], unique=False)
    op.create_index(op.f('ix_activity_logs_target_id'), 'activity_logs', ['target_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_activity_logs_target_id'), table_name='activity_logs')
    op.drop_index(op.f('ix_activity_logs_actor_id'), table_name='activity_logs')
    op.drop_table('activity_logs')
    op.drop_index(op.f('ix_class_enrollments_class_id'), table_name='class_enrollments')
    op.drop_index(op.f('ix_class_enrollments_user_id'), table_name='class_enrollments')
    op.drop_table('class_enrollments')
    op.drop_index(op.f('ix_classes_is_active'), table_name='classes')
    op.drop_index(op.f('ix_classes_jlpt_level'), table_name='classes')
    op.drop_index(op.f('ix_classes_class_type'), table_name='classes')
    op.drop_index(op.f('ix_classes_slug'), table_name='classes')
    op.drop_table('classes')
    op.drop_index('idx_applications_job_status', table_name='applications')
    op.drop_index(op.f('ix_applications_applicant_id'), table_name='applications')
    op.drop_table('applications')
    for column in ('is_active', 'jlpt_required', 'employment_type', 'category', 'slug', 'org_id'):
        op.drop_index(op.f(f'ix_jobs_{column}'), table_name='jobs')
    op.drop_table('jobs')
    op.drop_index(op.f('ix_organizations_verification_status'), table_name='organizations')
    op.drop_index(op.f('ix_organizations_slug'), table_name='organizations')
    op.drop_index(op.f('ix_organizations_owner_id'), table_name='organizations')
    op.drop_table('organizations')
    with op.batch_alter_table('profiles', schema=None) as batch_op:
        batch_op.drop_constraint('fk_profiles_default_cv_id', type_='foreignkey')
    op.drop_index('uq_resumes_one_default_per_user', table_name='resumes')
    op.drop_index(op.f('ix_resumes_user_id'), table_name='resumes')
    op.drop_table('resumes')
    op.drop_index(op.f('ix_profiles_role'), table_name='profiles')
    op.drop_table('profiles')
    user_role.drop(op.get_bind(), checkfirst=True)
    op.drop_index(op.f('ix_users_magic_link_token'), table_name='users')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')
