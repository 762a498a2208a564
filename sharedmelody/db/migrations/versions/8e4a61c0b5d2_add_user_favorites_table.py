"""add user favorites table

Revision ID: 8e4a61c0b5d2
Revises: 3b1f9c2d7a10
Create Date: 2026-09-28 18:15:40.000000
"""

from __future__ import annotations

from typing import Sequence

from alembic import op
import sqlalchemy as sa

revision: str = "8e4a61c0b5d2"
down_revision: str | None = "3b1f9c2d7a10"
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "user_favorites",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("song_id", sa.Integer(), nullable=False),
        sa.Column(
            "favorited_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.user_id"],
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["song_id"],
            ["songs.song_id"],
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("user_id", "song_id"),
    )

    op.create_index(
        "ix_user_favorites_user_favorited_at",
        "user_favorites",
        ["user_id", "favorited_at"],
    )
    op.create_index(
        "ix_user_favorites_song_id",
        "user_favorites",
        ["song_id"],
    )


def downgrade() -> None:
    op.drop_index("ix_user_favorites_song_id", table_name="user_favorites")
    op.drop_index("ix_user_favorites_user_favorited_at", table_name="user_favorites")
    op.drop_table("user_favorites")
