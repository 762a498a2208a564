"""SQLAlchemy ORM model for the user/song favorites edge table.

A row links one user to one song. The composite primary key is the only
uniqueness guarantee the service relies on: adds are written with
``ON CONFLICT DO NOTHING`` so a duplicate pair is reported as a no-op rather
than raised. Rows are created and deleted, never updated.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column

from . import Base, utcnow


class UserFavorite(Base):
    """Association row marking a song as favorited by a user."""

    __tablename__ = "user_favorites"
    __table_args__ = (
        Index("ix_user_favorites_user_favorited_at", "user_id", "favorited_at"),
        Index("ix_user_favorites_song_id", "song_id"),
    )

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.user_id", ondelete="CASCADE"),
        primary_key=True,
    )
    song_id: Mapped[int] = mapped_column(
        ForeignKey("songs.song_id", ondelete="CASCADE"),
        primary_key=True,
    )
    favorited_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
