"""create artworks table

Revision ID: 001
Revises:
Create Date: 2025-11-02 00:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Databases provisioned before migrations were tracked already have the table
    if sa.inspect(op.get_bind()).has_table("artworks"):
        return

    op.create_table(
        "artworks",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("title", sa.Text, nullable=False, server_default=""),
        sa.Column("painted_location", sa.Text, nullable=False, server_default=""),
        sa.Column("start_date", sa.Date, nullable=True),
        sa.Column("end_date", sa.Date, nullable=True),
        sa.Column(
            "in_progress", sa.Boolean, nullable=False, server_default=sa.text("false")
        ),
        sa.Column("detalle", sa.Text, nullable=False, server_default=""),
        sa.Column("bitacora", sa.Text, nullable=False, server_default=""),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )


def downgrade() -> None:
    op.drop_table("artworks")
