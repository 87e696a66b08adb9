"""Vote aggregation for a collection.

Computes per-game vote tallies, favorite counts and per-user detail,
then applies the type filter and sort order requested by the viewer.
Domain logic is pure - the snapshot is supplied by the orchestrator.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from boardvote.core.identity import collation_key
from boardvote.models.domain import (
    GameEntity,
    GameView,
    SortKey,
    TypeFilter,
    VoteDetail,
    VoteEntity,
    VoteValue,
)

VotesByGame = Mapping[str, Mapping[str, VoteEntity]]

TYPE_FILTERS: tuple[str, ...] = ("all", "base", "expansion")
SORT_KEYS: tuple[str, ...] = ("name", "votes")


def index_votes(votes: Iterable[VoteEntity]) -> dict[str, dict[str, VoteEntity]]:
    """Group votes as objectid -> username -> vote."""
    by_game: dict[str, dict[str, VoteEntity]] = {}
    for vote in votes:
        by_game.setdefault(vote.objectid, {})[vote.username] = vote
    return by_game


def voter_registry(votes: Iterable[VoteEntity]) -> list[str]:
    """Distinct usernames in order of first vote."""
    return list(dict.fromkeys(vote.username for vote in votes))


def aggregate(
    games: Sequence[GameEntity],
    votes: VotesByGame,
    voters: Sequence[str],
    filter_users: Sequence[str] = (),
    filter_type: TypeFilter = "all",
    sort_key: SortKey = "name",
) -> list[GameView]:
    """Build the display-ready game list for a collection.

    Steps run in a fixed order: tally, type filter, sort.

    Args:
        games: Games of the collection, in insertion order.
        votes: Votes grouped by objectid then username.
        voters: Voter registry (every username that voted).
        filter_users: Voters to tally; empty means the whole registry.
        filter_type: "all", "base" or "expansion".
        sort_key: "name" (ascending) or "votes" (likes, descending).

    Returns:
        New list of GameView. Inputs are never mutated.

    Raises:
        ValueError: If filter_type or sort_key is not recognised.
    """
    if filter_type not in TYPE_FILTERS:
        raise ValueError(f"Unknown type filter: {filter_type}")
    if sort_key not in SORT_KEYS:
        raise ValueError(f"Unknown sort key: {sort_key}")

    relevant = _relevant_voters(voters, filter_users)
    views = [_tally_game(game, votes.get(game.objectid, {}), voters, relevant) for game in games]

    if filter_type == "base":
        views = [view for view in views if not view.game.is_expansion]
    elif filter_type == "expansion":
        views = [view for view in views if view.game.is_expansion]

    return _sort_views(views, sort_key)


def _relevant_voters(voters: Sequence[str], filter_users: Sequence[str]) -> list[str]:
    """Voters to tally, in registry order.

    Filtered users missing from the registry follow in filter order.
    """
    if not filter_users:
        return list(voters)

    wanted = set(filter_users)
    known = set(voters)
    ordered = [user for user in voters if user in wanted]
    ordered.extend(user for user in dict.fromkeys(filter_users) if user not in known)
    return ordered


def _tally_game(
    game: GameEntity,
    game_votes: Mapping[str, VoteEntity],
    voters: Sequence[str],
    relevant: Sequence[str],
) -> GameView:
    """Tally one game.

    Pure function - favorites always count the whole registry.
    """
    detail = VoteDetail()
    buckets = {
        VoteValue.LIKE: detail.likes,
        VoteValue.DISLIKE: detail.dislikes,
        VoteValue.NEUTRAL: detail.neutrals,
        VoteValue.NOT_PLAYED: detail.not_played,
    }

    for user in relevant:
        vote = game_votes.get(user)
        if vote is None:
            continue
        bucket = buckets.get(vote.vote)
        # NO_OPINION has no bucket
        if bucket is not None:
            bucket.append(user)

    favorites_count = 0
    for user in voters:
        vote = game_votes.get(user)
        if vote is not None and vote.favorite:
            favorites_count += 1

    return GameView(
        game=game,
        likes=len(detail.likes),
        dislikes=len(detail.dislikes),
        neutrals=len(detail.neutrals),
        not_played=len(detail.not_played),
        favorites_count=favorites_count,
        detail=detail,
    )


def _sort_views(views: list[GameView], sort_key: SortKey) -> list[GameView]:
    """Sort views; both orders are stable on insertion order."""
    by_name = sorted(views, key=lambda view: collation_key(view.game.objectname))
    if sort_key == "votes":
        return sorted(by_name, key=lambda view: -view.likes)
    return by_name
