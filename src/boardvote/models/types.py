"""Pydantic models for the boardvote API.

Request bodies and response payloads. Domain dataclasses live in
models/domain.py and are converted at the route layer.
"""

from typing import Literal

from pydantic import BaseModel, Field

VoteChoice = Literal["like", "neutral", "dislike", "not_played"]


class ImportRequest(BaseModel):
    """Upload of a catalog collection export."""

    owner: str = Field(min_length=1, max_length=128)
    csv_text: str


class SkippedRowDetail(BaseModel):
    """Row left out of an import."""

    position: int
    objectid: str | None
    reason: str


class ImportResponse(BaseModel):
    """Outcome of an import."""

    collection_code: str
    owner: str
    created: bool
    noop: bool
    inserted: list[str]
    deleted: list[str]
    skipped: list[SkippedRowDetail]


class CollectionDetail(BaseModel):
    """Collection summary for API response."""

    collection_code: str
    owner: str
    game_count: int
    voters: list[str]


class VoteSubmission(BaseModel):
    """A user's opinion of a game. None clears the opinion."""

    vote: VoteChoice | None


class FavoriteSubmission(BaseModel):
    """Star or unstar a game."""

    favorite: bool


class VoteDetailOut(BaseModel):
    """Stored vote for API response."""

    collection_code: str
    objectid: str
    username: str
    vote: VoteChoice | None
    favorite: bool


class VoterBreakdown(BaseModel):
    """Usernames per vote category."""

    likes: list[str]
    dislikes: list[str]
    neutrals: list[str]
    not_played: list[str]


class GameViewOut(BaseModel):
    """A game with its tallies, flattened for rendering."""

    objectid: str
    objectname: str
    originalname: str | None
    itemtype: str
    is_expansion: bool
    comment: str | None
    image_url: str
    link: str
    likes: int
    dislikes: int
    neutrals: int
    not_played: int
    favorites_count: int
    detail: VoterBreakdown
    my_vote: VoteChoice | None = None
    my_favorite: bool = False


class CollectionView(BaseModel):
    """Aggregated view of a collection."""

    collection_code: str
    owner: str
    voters: list[str]
    filter_users: list[str]
    filter_type: Literal["all", "base", "expansion"]
    sort: Literal["name", "votes"]
    games: list[GameViewOut]
