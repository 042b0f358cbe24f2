"""Add index on expire_time

Revision ID: 7f2e9a4c1d36
Revises: 3c81d0e5a7b2
Create Date: 2026-10-13 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = '7f2e9a4c1d36'
down_revision: Union[str, Sequence[str], None] = '3c81d0e5a7b2'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_index('ix_links_expire_time', 'links', ['expire_time'], unique=False)
    op.create_index('ix_uploads_expire_time', 'uploads', ['expire_time'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_uploads_expire_time', table_name='uploads')
    op.drop_index('ix_links_expire_time', table_name='links')
