"""Games API endpoint.

GET /api/collections/{code}/games - Aggregated game list with tallies
"""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query

from boardvote.aggregation.tally import aggregate, index_votes
from boardvote.api.app import get_db_session
from boardvote.api.routes.votes import value_to_choice
from boardvote.db.repo import DbSession
from boardvote.models.domain import GameView, VoteEntity
from boardvote.models.types import CollectionView, GameViewOut, VoterBreakdown
from boardvote.sync.orchestrator import NotFoundError, load_snapshot

router = APIRouter()


def _view_to_out(view: GameView, my_vote: VoteEntity | None) -> GameViewOut:
    game = view.game
    return GameViewOut(
        objectid=game.objectid,
        objectname=game.objectname,
        originalname=game.originalname,
        itemtype=game.itemtype,
        is_expansion=game.is_expansion,
        comment=game.comment,
        image_url=game.image_url,
        link=game.link,
        likes=view.likes,
        dislikes=view.dislikes,
        neutrals=view.neutrals,
        not_played=view.not_played,
        favorites_count=view.favorites_count,
        detail=VoterBreakdown(
            likes=view.detail.likes,
            dislikes=view.detail.dislikes,
            neutrals=view.detail.neutrals,
            not_played=view.detail.not_played,
        ),
        my_vote=value_to_choice(my_vote.vote) if my_vote else None,
        my_favorite=my_vote.favorite if my_vote else False,
    )


@router.get("/collections/{code}/games", response_model=CollectionView)
def list_games(
    code: str,
    users: list[str] = Query(default=[]),
    item_type: Literal["all", "base", "expansion"] = Query("all", alias="type"),
    sort: Literal["name", "votes"] = "name",
    me: str | None = None,
    session: DbSession = Depends(get_db_session),
) -> CollectionView:
    """Get the aggregated game list of a collection.

    Args:
        code: Collection code.
        users: Voters to tally (repeatable); empty means everybody.
        item_type: "all", "base" or "expansion" (query parameter "type").
        sort: "name" or "votes".
        me: Optional username whose own vote is echoed per game.
        session: Database session (injected).

    Raises:
        HTTPException: 404 if collection not found.
    """
    try:
        snapshot = load_snapshot(session, code)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    votes_by_game = index_votes(snapshot.votes)
    filter_users = [u.strip() for u in users if u.strip()]
    views = aggregate(
        snapshot.games,
        votes_by_game,
        snapshot.voters,
        filter_users=filter_users,
        filter_type=item_type,
        sort_key=sort,
    )

    me = me.strip() if me else None
    return CollectionView(
        collection_code=snapshot.collection.collection_code,
        owner=snapshot.collection.owner,
        voters=snapshot.voters,
        filter_users=filter_users,
        filter_type=item_type,
        sort=sort,
        games=[
            _view_to_out(view, votes_by_game.get(view.game.objectid, {}).get(me) if me else None)
            for view in views
        ],
    )
