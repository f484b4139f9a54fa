"""create air_quality table

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "air_quality",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("datetime", sa.DateTime(timezone=True), nullable=False),
        sa.Column("from_node", sa.Text(), nullable=True, comment="Sensor or mesh node id"),
        sa.Column("pm25standard", sa.Float(), nullable=True),
        sa.Column("pm10standard", sa.Float(), nullable=True),
        sa.Column("temperature", sa.Float(), nullable=True),
        sa.Column("relativehumidity", sa.Float(), nullable=True),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("elevation", sa.Text(), nullable=True),
        sa.Column(
            "datetime_is_fallback",
            sa.Boolean(),
            server_default=sa.false(),
            nullable=False,
            comment="True when datetime was stamped at ingestion time",
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_air_quality_datetime", "air_quality", ["datetime"], unique=False)
    op.create_index("idx_air_quality_location", "air_quality", ["latitude", "longitude"], unique=False)
    op.create_index("idx_air_quality_node", "air_quality", ["from_node"], unique=False)


def downgrade() -> None:
    op.drop_index("idx_air_quality_node", table_name="air_quality")
    op.drop_index("idx_air_quality_location", table_name="air_quality")
    op.drop_index("idx_air_quality_datetime", table_name="air_quality")
    op.drop_table("air_quality")
