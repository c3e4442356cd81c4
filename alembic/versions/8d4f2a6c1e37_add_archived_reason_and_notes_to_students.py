"""add archived_reason and notes to students

Revision ID: 8d4f2a6c1e37
Revises: 5b1c0e7d2a91
Create Date: 2025-04-02 19:47:03.520914

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision: str = '8d4f2a6c1e37'
down_revision: Union[str, None] = '5b1c0e7d2a91'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def column_exists(table_name: str, column_name: str) -> bool:
    conn = op.get_bind()
    inspector = inspect(conn)
    columns = [col["name"] for col in inspector.get_columns(table_name)]
    return column_name in columns


def upgrade() -> None:
    # Причина архивации ученика
    if not column_exists('students', 'archived_reason'):
        op.add_column('students', sa.Column('archived_reason', sa.Text(), nullable=True))

    # Заметки преподавателя об ученике
    if not column_exists('students', 'notes'):
        op.add_column('students', sa.Column('notes', sa.Text(), nullable=True))


def downgrade() -> None:
    with op.batch_alter_table('students') as batch_op:
        if column_exists('students', 'notes'):
            batch_op.drop_column('notes')
        if column_exists('students', 'archived_reason'):
            batch_op.drop_column('archived_reason')
