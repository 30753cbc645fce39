"""admissions core: counters, applications, academic years, student registrations

Revision ID: 3c1e7a2b9d40
Revises:
Create Date: 2026-10-19 12:00:00
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '3c1e7a2b9d40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'application_counters',
        sa.Column('year_key', sa.String(), primary_key=True),
        sa.Column('year', sa.String(), nullable=False),
        sa.Column('last_number', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('last_updated', sa.DateTime(), nullable=False),
    )
    op.create_table(
        'admission_applications',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('application_id', sa.String(), nullable=True, unique=True),
        sa.Column('application_id_provisional', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('status', sa.String(), nullable=False, server_default='draft'),
        sa.Column('payment_status', sa.String(), nullable=False, server_default='pending'),
        sa.Column('registration_number', sa.String(), nullable=True),
        sa.Column('personal_info', sa.JSON(), nullable=False),
        sa.Column('contact_info', sa.JSON(), nullable=False),
        sa.Column('academic_background', sa.JSON(), nullable=False),
        sa.Column('program_selection', sa.JSON(), nullable=False),
        sa.Column('documents', sa.JSON(), nullable=False),
        sa.Column('review_notes', sa.Text(), nullable=True),
        sa.Column('last_reviewed_by', sa.String(), nullable=True),
        sa.Column('last_reviewed_at', sa.DateTime(), nullable=True),
        sa.Column('director_approved_program', sa.String(), nullable=True),
        sa.Column('director_approved_level', sa.String(), nullable=True),
        sa.Column('transferred_to_portal', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('transferred_at', sa.DateTime(), nullable=True),
        sa.Column('transfer_error', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('submitted_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_admission_applications_user_id', 'admission_applications', ['user_id'])
    op.create_index('ix_admission_applications_status', 'admission_applications', ['status'])

    op.create_table(
        'academic_years',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('year', sa.String(), nullable=True),
        sa.Column('display_name', sa.String(), nullable=True),
        sa.Column('admission_status', sa.String(), nullable=False, server_default='pending'),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_table(
        'system_config',
        sa.Column('key', sa.String(), primary_key=True),
        sa.Column('current_academic_year_id', sa.String(), nullable=True),
        sa.Column('current_academic_year', sa.String(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_table(
        'academic_settings',
        sa.Column('key', sa.String(), primary_key=True),
        sa.Column('current_year', sa.String(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_table(
        'student_registrations',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('registration_number', sa.String(), nullable=False, unique=True),
        sa.Column('application_id', sa.String(), nullable=False),
        sa.Column('surname', sa.String(), nullable=False),
        sa.Column('other_names', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False, unique=True),
        sa.Column('programme', sa.String(), nullable=False),
        sa.Column('entry_level', sa.String(), nullable=False),
        sa.Column('current_level', sa.String(), nullable=False),
        sa.Column('schedule_type', sa.String(), nullable=False),
        sa.Column('entry_academic_year', sa.String(), nullable=False),
        sa.Column('status', sa.String(), nullable=False, server_default='approved'),
        sa.Column('registered_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_student_registrations_application_id', 'student_registrations', ['application_id'])


def downgrade() -> None:
    op.drop_index('ix_student_registrations_application_id', table_name='student_registrations')
    op.drop_table('student_registrations')
    op.drop_table('academic_settings')
    op.drop_table('system_config')
    op.drop_table('academic_years')
    op.drop_index('ix_admission_applications_status', table_name='admission_applications')
    op.drop_index('ix_admission_applications_user_id', table_name='admission_applications')
    op.drop_table('admission_applications')
    op.drop_table('application_counters')
