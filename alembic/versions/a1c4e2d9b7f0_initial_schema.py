"""initial schema

Revision ID: a1c4e2d9b7f0
Revises:
Create Date: 2026-01-10 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision: str = 'a1c4e2d9b7f0'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def table_exists(table_name: str) -> bool:
    conn = op.get_bind()
    inspector = inspect(conn)
    return inspector.has_table(table_name)


def upgrade() -> None:
    # База могла быть создана через init_db(): создаём только недостающие таблицы
    if not table_exists('users'):
        op.create_table(
            'users',
            sa.Column('id', sa.Integer(), primary_key=True, index=True),
            sa.Column('username', sa.String(), nullable=False, unique=True, index=True),
            sa.Column('full_name', sa.String(), nullable=False),
            sa.Column('role', sa.Enum('admin', 'teacher', name='user_role'), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        )

    if not table_exists('classes'):
        op.create_table(
            'classes',
            sa.Column('id', sa.Integer(), primary_key=True, index=True),
            sa.Column('name', sa.String(), nullable=False),
            sa.Column('teacher_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
            sa.Column('schedule', sa.String(), nullable=True),
            sa.Column('color', sa.String(), nullable=True),
            sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        )

    if not table_exists('students'):
        op.create_table(
            'students',
            sa.Column('id', sa.Integer(), primary_key=True, index=True),
            sa.Column('name', sa.String(), nullable=False),
            sa.Column('class_id', sa.Integer(), sa.ForeignKey('classes.id'), nullable=True, index=True),
            sa.Column('student_type', sa.String(), nullable=False, server_default='regular'),
            sa.Column('color_code', sa.String(), nullable=True),
            sa.Column('email', sa.String(), nullable=True),
            sa.Column('phone', sa.String(), nullable=True),
            sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        )

    if not table_exists('attendance'):
        op.create_table(
            'attendance',
            sa.Column('id', sa.Integer(), primary_key=True, index=True),
            sa.Column('student_id', sa.Integer(), sa.ForeignKey('students.id', ondelete='CASCADE'), nullable=False),
            sa.Column('class_id', sa.Integer(), sa.ForeignKey('classes.id', ondelete='CASCADE'), nullable=False, index=True),
            sa.Column('date', sa.String(), nullable=False, index=True),
            sa.Column('status', sa.String(), nullable=False, server_default=''),
            sa.Column('notes', sa.Text(), nullable=True),
            sa.Column('time', sa.String(), nullable=True),
            sa.Column('teacher_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
            sa.UniqueConstraint('student_id', 'class_id', 'date', name='uq_attendance_student_class_date'),
        )

    # Листы комментариев изначально жили в lesson_reports (переименование — следующая ревизия)
    if not table_exists('lesson_reports') and not table_exists('teacher_comment_sheets'):
        op.create_table(
            'lesson_reports',
            sa.Column('id', sa.Integer(), primary_key=True, index=True),
            sa.Column('class_id', sa.Integer(), sa.ForeignKey('classes.id', ondelete='CASCADE'), nullable=False, index=True),
            sa.Column('teacher_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
            sa.Column('date', sa.String(), nullable=False),
            sa.Column('target_topic', sa.Text(), server_default=''),
            sa.Column('vocabulary', sa.Text(), server_default=''),
            sa.Column('mistakes', sa.Text(), server_default=''),
            sa.Column('strengths', sa.Text(), server_default=''),
            sa.Column('comments', sa.Text(), server_default=''),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
            sa.UniqueConstraint('class_id', 'date', name='uq_lesson_report_class_date'),
        )

    if not table_exists('monthly_reports'):
        op.create_table(
            'monthly_reports',
            sa.Column('id', sa.Integer(), primary_key=True, index=True),
            sa.Column('class_id', sa.Integer(), sa.ForeignKey('classes.id', ondelete='CASCADE'), nullable=False, index=True),
            sa.Column('year', sa.Integer(), nullable=False),
            sa.Column('month', sa.Integer(), nullable=False),
            sa.Column('start_date', sa.String(), nullable=False),
            sa.Column('end_date', sa.String(), nullable=False),
            sa.Column('monthly_theme', sa.Text(), server_default=''),
            sa.Column('status', sa.Enum('draft', 'published', name='report_status'), nullable=False, server_default='draft'),
            sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
            sa.Column('pdf_url', sa.String(), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
            sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
            sa.UniqueConstraint('class_id', 'start_date', 'end_date', name='uq_monthly_report_class_range'),
        )

    if not table_exists('monthly_report_weeks'):
        op.create_table(
            'monthly_report_weeks',
            sa.Column('id', sa.Integer(), primary_key=True, index=True),
            sa.Column('monthly_report_id', sa.Integer(), sa.ForeignKey('monthly_reports.id', ondelete='CASCADE'), nullable=False),
            sa.Column('week_number', sa.Integer(), nullable=False),
            sa.Column('lesson_date', sa.String(), nullable=True),
            sa.Column('target', sa.Text(), server_default=''),
            sa.Column('vocabulary', sa.Text(), server_default=''),
            sa.Column('phrase', sa.Text(), server_default=''),
            sa.Column('others', sa.Text(), server_default=''),
            sa.Column('teacher_comment_sheet_id', sa.Integer(), nullable=True),
            sa.UniqueConstraint('monthly_report_id', 'week_number', name='uq_report_week_number'),
        )

    if not table_exists('pdf_history'):
        op.create_table(
            'pdf_history',
            sa.Column('id', sa.Integer(), primary_key=True, index=True),
            sa.Column('filename', sa.String(), nullable=False),
            sa.Column('type', sa.String(), nullable=False),
            sa.Column('class_id', sa.Integer(), sa.ForeignKey('classes.id', ondelete='SET NULL'), nullable=True),
            sa.Column('storage_key', sa.String(), nullable=False),
            sa.Column('file_size', sa.Integer(), nullable=True),
            sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        )


def downgrade() -> None:
    for table_name in (
        'pdf_history', 'monthly_report_weeks', 'monthly_reports', 'lesson_reports',
        'attendance', 'students', 'classes', 'users',
    ):
        if table_exists(table_name):
            op.drop_table(table_name)
