"""Initial schema

Revision ID: 3b1f9c2d7a10
Revises:
Create Date: 2026-09-28 17:42:05.118203

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3b1f9c2d7a10"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("user_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="user"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint("user_id"),
        sa.UniqueConstraint("username"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "artists",
        sa.Column("artist_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint("artist_id"),
    )
    op.create_index("ix_artists_name", "artists", ["name"])

    op.create_table(
        "genres",
        sa.Column("genre_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.PrimaryKeyConstraint("genre_id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "songs",
        sa.Column("song_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("artist_id", sa.Integer(), nullable=True),
        sa.Column("genre_id", sa.Integer(), nullable=True),
        sa.Column("like_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("plays_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "upload_date",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_approved", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(
            ["artist_id"], ["artists.artist_id"], ondelete="SET NULL"
        ),
        sa.ForeignKeyConstraint(["genre_id"], ["genres.genre_id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("song_id"),
    )
    op.create_index("ix_songs_artist_id", "songs", ["artist_id"])
    op.create_index("ix_songs_genre_id", "songs", ["genre_id"])
    op.create_index("ix_songs_public_approved", "songs", ["is_public", "is_approved"])


def downgrade() -> None:
    op.drop_index("ix_songs_public_approved", table_name="songs")
    op.drop_index("ix_songs_genre_id", table_name="songs")
    op.drop_index("ix_songs_artist_id", table_name="songs")
    op.drop_table("songs")
    op.drop_table("genres")
    op.drop_index("ix_artists_name", table_name="artists")
    op.drop_table("artists")
    op.drop_table("users")
