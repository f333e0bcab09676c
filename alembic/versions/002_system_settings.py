"""system_settings

Revision ID: 002_system_settings
Revises: 001_initial_schema
Create Date: 2026-10-18 00:00:00.000000

Adds the single-row marketplace settings table. The row itself is created
with defaults on the first read.
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

revision: str = "002_system_settings"
down_revision: Union[str, None] = "001_initial_schema"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "system_settings",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("site_name", sa.String(255), nullable=False),
        sa.Column("maintenance_mode", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("email_notifications", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("backup_frequency", sa.String(20), nullable=False, server_default="daily"),
        sa.Column("analytics_enabled", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("theme", sa.String(10), nullable=False, server_default="light"),
        sa.Column("last_backup_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("custom_settings", sa.JSON, nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("system_settings")
