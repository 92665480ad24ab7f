"""rename lesson_reports to teacher_comment_sheets

Revision ID: c7d2f5a3e8b1
Revises: a1c4e2d9b7f0
Create Date: 2026-02-02 18:30:00.000000

"""
from typing import Sequence, Union

from alembic import op
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision: str = 'c7d2f5a3e8b1'
down_revision: Union[str, None] = 'a1c4e2d9b7f0'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def table_exists(table_name: str) -> bool:
    conn = op.get_bind()
    inspector = inspect(conn)
    return inspector.has_table(table_name)


def upgrade() -> None:
    # Переименовываем, только если новой таблицы ещё нет
    if table_exists('lesson_reports') and not table_exists('teacher_comment_sheets'):
        op.rename_table('lesson_reports', 'teacher_comment_sheets')


def downgrade() -> None:
    if table_exists('teacher_comment_sheets') and not table_exists('lesson_reports'):
        op.rename_table('teacher_comment_sheets', 'lesson_reports')
