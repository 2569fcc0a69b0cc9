"""app_config_table

Revision ID: 8d4f2b6a1c37
Revises: 5c1e0a7d9f21
Create Date: 2026-02-09 10:12:41.204118

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "8d4f2b6a1c37"
down_revision: Union[str, Sequence[str], None] = "5c1e0a7d9f21"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "app_config",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("config_key", sa.String(), nullable=False),
        sa.Column("config_value", sa.Text(), nullable=False),
        sa.Column("config_type", sa.String(), nullable=False, server_default="string"),
        sa.Column("team", sa.String(), nullable=True),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("config_key", "team", name="uq_app_config_key_team"),
    )
    op.create_index("ix_app_config_config_key", "app_config", ["config_key"], unique=False)
    op.create_index("ix_app_config_team", "app_config", ["team"], unique=False)

    # Global capacity ceiling; resources fall back to 180 when this row is missing.
    op.execute(
        sa.text(
            "INSERT INTO app_config (config_key, config_value, config_type, team, description, is_active) "
            "VALUES ('max_resource_hours', '180', 'number', NULL, "
            "'Upper bound for a resource default monthly capacity', true)"
        )
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_app_config_team", table_name="app_config")
    op.drop_index("ix_app_config_config_key", table_name="app_config")
    op.drop_table("app_config")
