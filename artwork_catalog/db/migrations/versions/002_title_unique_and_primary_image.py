"""unique titles and primary image

Revision ID: 002
Revises: 001
Create Date: 2025-12-14 00:00:00

- primary_image: filename chosen as the artwork's cover
- artworks_title_unique: titles are unique once set (empty titles may repeat)
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "002"
down_revision = "001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    inspector = sa.inspect(op.get_bind())

    columns = {column["name"] for column in inspector.get_columns("artworks")}
    if "primary_image" not in columns:
        op.add_column(
            "artworks",
            sa.Column("primary_image", sa.Text, nullable=False, server_default=""),
        )

    indexes = {index["name"] for index in inspector.get_indexes("artworks")}
    if "artworks_title_unique" not in indexes:
        op.create_index(
            "artworks_title_unique",
            "artworks",
            ["title"],
            unique=True,
            postgresql_where=sa.text("title <> ''"),
            sqlite_where=sa.text("title <> ''"),
        )


def downgrade() -> None:
    op.drop_index("artworks_title_unique", table_name="artworks")
    op.drop_column("artworks", "primary_image")
