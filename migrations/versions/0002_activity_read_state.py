"""activity read state and admin changes

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-19 00:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    if op.get_bind().dialect.name == "postgresql":
        with op.get_context().autocommit_block():
            op.execute(
                "ALTER TYPE activity_type_enum ADD VALUE IF NOT EXISTS 'ADMIN_CHANGED'"
            )

    with op.batch_alter_table("activity_log") as batch_op:
        batch_op.add_column(sa.Column("read_at", sa.DateTime(), nullable=True))


def downgrade() -> None:
    with op.batch_alter_table("activity_log") as batch_op:
        batch_op.drop_column("read_at")
