"""Votes API endpoint.

PUT /api/collections/{code}/games/{objectid}/votes/{username} - Cast vote
PUT /api/collections/{code}/games/{objectid}/votes/{username}/favorite - Star game
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from boardvote.api.app import get_db_session
from boardvote.db.repo import DbSession
from boardvote.models.domain import VoteEntity, VoteValue
from boardvote.models.types import (
    FavoriteSubmission,
    VoteChoice,
    VoteDetailOut,
    VoteSubmission,
)
from boardvote.sync.orchestrator import NotFoundError, cast_vote, set_favorite

router = APIRouter()

_CHOICE_TO_VALUE: dict[str, VoteValue] = {
    "like": VoteValue.LIKE,
    "neutral": VoteValue.NEUTRAL,
    "dislike": VoteValue.DISLIKE,
    "not_played": VoteValue.NOT_PLAYED,
}
_VALUE_TO_CHOICE = {value: choice for choice, value in _CHOICE_TO_VALUE.items()}


def choice_to_value(choice: VoteChoice | None) -> VoteValue:
    """Map an API vote choice to a VoteValue (None -> NO_OPINION)."""
    if choice is None:
        return VoteValue.NO_OPINION
    return _CHOICE_TO_VALUE[choice]


def value_to_choice(value: VoteValue) -> VoteChoice | None:
    """Map a VoteValue to its API choice (NO_OPINION -> None)."""
    return _VALUE_TO_CHOICE.get(value)


def _vote_to_detail(vote: VoteEntity) -> VoteDetailOut:
    return VoteDetailOut(
        collection_code=vote.collection_code,
        objectid=vote.objectid,
        username=vote.username,
        vote=value_to_choice(vote.vote),
        favorite=vote.favorite,
    )


@router.put(
    "/collections/{code}/games/{objectid}/votes/{username}",
    response_model=VoteDetailOut,
)
def put_vote(
    code: str,
    objectid: str,
    username: str,
    submission: VoteSubmission,
    session: DbSession = Depends(get_db_session),
) -> VoteDetailOut:
    """Cast or change a user's vote. The favorite flag is kept.

    Raises:
        HTTPException: 404 if collection or game not found,
            422 if username is blank.
    """
    try:
        vote = cast_vote(session, code, objectid, username, choice_to_value(submission.vote))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    return _vote_to_detail(vote)


@router.put(
    "/collections/{code}/games/{objectid}/votes/{username}/favorite",
    response_model=VoteDetailOut,
)
def put_favorite(
    code: str,
    objectid: str,
    username: str,
    submission: FavoriteSubmission,
    session: DbSession = Depends(get_db_session),
) -> VoteDetailOut:
    """Star or unstar a game for a user. The vote is kept.

    Raises:
        HTTPException: 404 if collection or game not found,
            422 if username is blank.
    """
    try:
        vote = set_favorite(session, code, objectid, username, submission.favorite)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    return _vote_to_detail(vote)
