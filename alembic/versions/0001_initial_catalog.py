"""create tokens and system_config tables

Revision ID: 0001_initial_catalog
Revises:
Create Date: 2026-02-10 09:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_initial_catalog"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "tokens",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("cmc_id", sa.Integer(), nullable=False, comment="CoinMarketCap identifier"),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("symbol", sa.String(50), nullable=False),
        sa.Column("slug", sa.String(200), nullable=False),
        sa.Column("chain", sa.String(100), nullable=True, comment="Host platform name, null for native coins"),
        sa.Column("launch_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("categories", postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("is_tracked", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_tokens_cmc_id", "tokens", ["cmc_id"], unique=True)
    op.create_index("ix_tokens_symbol", "tokens", ["symbol"])
    op.create_index("ix_tokens_slug", "tokens", ["slug"])

    op.create_table(
        "system_config",
        sa.Column("key", sa.String(100), nullable=False),
        sa.Column("value", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.PrimaryKeyConstraint("key"),
    )


def downgrade() -> None:
    op.drop_table("system_config")
    op.drop_index("ix_tokens_slug", "tokens")
    op.drop_index("ix_tokens_symbol", "tokens")
    op.drop_index("ix_tokens_cmc_id", "tokens")
    op.drop_table("tokens")
