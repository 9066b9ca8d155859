"""add daily_snapshots with one row per token per day

Revision ID: 0002_daily_snapshots
Revises: 0001_initial_catalog
Create Date: 2026-02-10 09:30:00.000000

The (token_id, date) unique constraint is what keeps overlapping ingestion
runs from writing two snapshots for the same token and day.
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0002_daily_snapshots"
down_revision = "0001_initial_catalog"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "daily_snapshots",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("token_id", sa.Uuid(), sa.ForeignKey("tokens.id", ondelete="CASCADE"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("rank", sa.Integer(), nullable=False),
        sa.Column("market_cap", sa.Numeric(), nullable=True),
        sa.Column("circulating_supply", sa.Numeric(), nullable=False, server_default="0"),
        sa.Column("price_usd", sa.Numeric(), nullable=True),
        sa.Column("volume_24h", sa.Numeric(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("token_id", "date", name="uq_daily_snapshots_token_date"),
    )
    op.create_index("ix_daily_snapshots_token_id", "daily_snapshots", ["token_id"])
    op.create_index("ix_daily_snapshots_date", "daily_snapshots", ["date"])


def downgrade() -> None:
    op.drop_index("ix_daily_snapshots_date", "daily_snapshots")
    op.drop_index("ix_daily_snapshots_token_id", "daily_snapshots")
    op.drop_table("daily_snapshots")
