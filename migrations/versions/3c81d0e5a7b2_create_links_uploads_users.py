"""Create links, uploads and users

Revision ID: 3c81d0e5a7b2
Revises:
Create Date: 2026-10-12 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c81d0e5a7b2'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _resource_columns():
    return [
        sa.Column('token', sa.String(length=64), primary_key=True),
        sa.Column('short_url', sa.Text(), nullable=False),
        sa.Column('clicks', sa.Integer(), nullable=False),
        sa.Column('clickers', sa.JSON(), nullable=False),
        sa.Column('create_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expire_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('expire_clicks', sa.Integer(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'links',
        *_resource_columns(),
        sa.Column('url', sa.Text(), nullable=False),
    )
    op.create_table(
        'uploads',
        *_resource_columns(),
        sa.Column('blob_name', sa.String(length=512), nullable=False),
        sa.Column('filename', sa.String(length=255), nullable=False),
        sa.Column('content_type', sa.String(length=255), nullable=False),
    )
    op.create_table(
        'users',
        sa.Column('key', sa.String(length=128), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.LargeBinary(), nullable=False),
        sa.Column('salt', sa.LargeBinary(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table('users')
    op.drop_table('uploads')
    op.drop_table('links')
