"""Domain models for boardvote.

Pure Python dataclasses representing domain entities.
These models are independent of SQLAlchemy and used throughout
the engine (reconciler, aggregator, orchestrator) for clean
separation from the database layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal


# ============================================================================
# Catalog Import Domain
# ============================================================================


@dataclass(frozen=True)
class RawRow:
    """One parsed line of a catalog export."""

    objectid: str | None
    objectname: str | None
    itemtype: str = ""
    originalname: str | None = None
    comment: str | None = None


# ============================================================================
# Collection Domain
# ============================================================================


@dataclass
class CollectionEntity:
    """Domain model for a shared collection."""

    collection_code: str
    owner: str


@dataclass(frozen=True)
class GameEntity:
    """Domain model for a game inside a collection.

    Identity is (collection_code, objectid).
    """

    collection_code: str
    objectid: str
    objectname: str
    itemtype: str
    slug: str
    link: str
    image_url: str
    originalname: str | None = None
    comment: str | None = None

    @property
    def is_expansion(self) -> bool:
        return "expansion" in (self.itemtype or "")


# ============================================================================
# Vote Domain
# ============================================================================


class VoteValue(Enum):
    """Opinion a user holds about a game.

    NO_OPINION is stored as NULL, never as a number, so it cannot be
    confused with NEUTRAL.
    """

    LIKE = 1
    NEUTRAL = 0
    DISLIKE = -1
    NOT_PLAYED = -2
    NO_OPINION = None

    @classmethod
    def from_stored(cls, value: int | None) -> VoteValue:
        """Map a persisted integer (or NULL) to a VoteValue."""
        try:
            return cls(value)
        except ValueError:
            return cls.NO_OPINION

    def to_stored(self) -> int | None:
        return self.value


@dataclass
class VoteEntity:
    """Domain model for a user's vote on a game.

    Unique per (collection_code, objectid, username).
    """

    collection_code: str
    objectid: str
    username: str
    vote: VoteValue = VoteValue.NO_OPINION
    favorite: bool = False


# ============================================================================
# Aggregation Domain
# ============================================================================

TypeFilter = Literal["all", "base", "expansion"]
SortKey = Literal["name", "votes"]


@dataclass
class VoteDetail:
    """Usernames per vote category, in voter registry order."""

    likes: list[str] = field(default_factory=list)
    dislikes: list[str] = field(default_factory=list)
    neutrals: list[str] = field(default_factory=list)
    not_played: list[str] = field(default_factory=list)


@dataclass
class GameView:
    """A game annotated with its vote tallies, ready for rendering."""

    game: GameEntity
    likes: int = 0
    dislikes: int = 0
    neutrals: int = 0
    not_played: int = 0
    favorites_count: int = 0
    detail: VoteDetail = field(default_factory=VoteDetail)

    @property
    def total_opinions(self) -> int:
        return self.likes + self.dislikes + self.neutrals + self.not_played


@dataclass
class CollectionSnapshot:
    """In-memory state of one collection, owned by the orchestrator.

    The aggregator only reads it; it is rebuilt after completed store I/O.
    """

    collection: CollectionEntity
    games: list[GameEntity]
    votes: list[VoteEntity]
    voters: list[str]
