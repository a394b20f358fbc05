"""route forecast cache

Revision ID: 20261018_01_route_forecast_cache
Revises:
Create Date: 2026-10-18

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261018_01_route_forecast_cache"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "route_forecast_cache",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("origin", sa.String(length=255), nullable=False),
        sa.Column("destination", sa.String(length=255), nullable=False),
        sa.Column("hour_bucket", sa.String(length=13), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    )
    op.create_index(
        "ix_route_forecast_cache_lookup",
        "route_forecast_cache",
        ["origin", "destination", "hour_bucket", "created_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_route_forecast_cache_lookup", table_name="route_forecast_cache")
    op.drop_table("route_forecast_cache")
