from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)


# Largest value the 32-bit Integer key columns can hold.
INTEGER_KEY_MAX = 2**31 - 1


def utcnow() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    user_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="user", server_default="user"
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default="1",
        doc="Inactive accounts are rejected by the bearer-token dependency.",
    )


class Artist(Base):
    __tablename__ = "artists"

    artist_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)


class Genre(Base):
    __tablename__ = "genres"

    genre_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)


class Song(Base):
    __tablename__ = "songs"
    __table_args__ = (
        Index("ix_songs_public_approved", "is_public", "is_approved"),
    )

    song_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    artist_id: Mapped[int | None] = mapped_column(
        ForeignKey("artists.artist_id", ondelete="SET NULL"), nullable=True, index=True
    )
    genre_id: Mapped[int | None] = mapped_column(
        ForeignKey("genres.genre_id", ondelete="SET NULL"), nullable=True, index=True
    )
    like_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
        doc=(
            "Denormalized favorites counter, recomputed from user_favorites in"
            " the same transaction as each add/remove."
        ),
    )
    plays_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    upload_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    is_public: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default="1"
    )
    is_approved: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default="0",
        doc="Set by moderators; unapproved songs never appear in favorites listings.",
    )

    artist: Mapped[Artist | None] = relationship("Artist")
    genre: Mapped[Genre | None] = relationship("Genre")


# Imported late to avoid circular dependency with favorites module.
from .favorites import UserFavorite  # noqa: E402

__all__ = [
    "Artist",
    "Base",
    "Genre",
    "INTEGER_KEY_MAX",
    "Song",
    "User",
    "UserFavorite",
    "utcnow",
]
