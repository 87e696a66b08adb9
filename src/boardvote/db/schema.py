"""Database schema for boardvote.

Tables carry unique constraints that enforce the correctness
invariants of collections, games and votes.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    ForeignKeyConstraint,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Collection(Base):
    """A shared collection, identified by its short code.

    Immutable once created: never renamed or re-owned.
    """

    __tablename__ = "collections"

    collection_code: Mapped[str] = mapped_column(String(8), primary_key=True)
    owner: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )


class Game(Base):
    """A catalog game inside a collection.

    Invariant: UNIQUE(collection_code, objectid)
    One row per catalog object per collection.
    """

    __tablename__ = "games"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collection_code: Mapped[str] = mapped_column(
        String(8), ForeignKey("collections.collection_code"), nullable=False
    )
    objectid: Mapped[str] = mapped_column(String(32), nullable=False)
    objectname: Mapped[str] = mapped_column(String(256), nullable=False)
    originalname: Mapped[str | None] = mapped_column(String(256), nullable=True)
    itemtype: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    slug: Mapped[str] = mapped_column(String(256), nullable=False, default="")
    link: Mapped[str] = mapped_column(String(512), nullable=False)
    image_url: Mapped[str] = mapped_column(String(512), nullable=False)

    __table_args__ = (
        UniqueConstraint("collection_code", "objectid", name="uq_game_identity"),
    )


class Vote(Base):
    """A user's opinion and favorite flag for one game.

    Invariant: UNIQUE(collection_code, objectid, username)
    Upserted, last write wins. vote is NULL for "no opinion".
    """

    __tablename__ = "votes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    collection_code: Mapped[str] = mapped_column(String(8), nullable=False)
    objectid: Mapped[str] = mapped_column(String(32), nullable=False)
    username: Mapped[str] = mapped_column(String(128), nullable=False)
    vote: Mapped[int | None] = mapped_column(Integer, nullable=True)
    favorite: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        UniqueConstraint("collection_code", "objectid", "username", name="uq_vote_identity"),
        ForeignKeyConstraint(
            ["collection_code", "objectid"],
            ["games.collection_code", "games.objectid"],
            name="fk_vote_game",
        ),
    )
