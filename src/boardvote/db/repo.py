"""Repository pattern for database operations.

Encapsulates all SQLAlchemy queries, keeping the engine pure.
Returns domain models (not SQLAlchemy entities) to external callers.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from boardvote.db.schema import Collection, Game, Vote
from boardvote.models.domain import (
    CollectionEntity,
    GameEntity,
    VoteEntity,
    VoteValue,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session as DbSession
else:
    DbSession = Session

__all__ = ["DbSession"]


# ============================================================================
# Converters: SQLAlchemy -> Domain
# ============================================================================


def _collection_to_entity(collection: Collection) -> CollectionEntity:
    return CollectionEntity(
        collection_code=collection.collection_code,
        owner=collection.owner,
    )


def _game_to_entity(game: Game) -> GameEntity:
    return GameEntity(
        collection_code=game.collection_code,
        objectid=game.objectid,
        objectname=game.objectname,
        originalname=game.originalname,
        itemtype=game.itemtype,
        comment=game.comment,
        slug=game.slug,
        link=game.link,
        image_url=game.image_url,
    )


def _vote_to_entity(vote: Vote) -> VoteEntity:
    return VoteEntity(
        collection_code=vote.collection_code,
        objectid=vote.objectid,
        username=vote.username,
        vote=VoteValue.from_stored(vote.vote),
        favorite=bool(vote.favorite),
    )


# ============================================================================
# Collection Repository
# ============================================================================


def get_collection(session: DbSession, collection_code: str) -> CollectionEntity | None:
    """Get collection by code."""
    collection = (
        session.query(Collection).filter(Collection.collection_code == collection_code).first()
    )
    return _collection_to_entity(collection) if collection else None


def get_collection_for_owner(session: DbSession, owner: str) -> CollectionEntity | None:
    """Get the collection an owner created, if any."""
    collection = (
        session.query(Collection)
        .filter(Collection.owner == owner)
        .order_by(Collection.created_at)
        .first()
    )
    return _collection_to_entity(collection) if collection else None


def collection_code_exists(session: DbSession, collection_code: str) -> bool:
    """Check whether a code is already taken."""
    return (
        session.query(Collection.collection_code)
        .filter(Collection.collection_code == collection_code)
        .first()
        is not None
    )


def create_collection(session: DbSession, entity: CollectionEntity) -> CollectionEntity:
    """Create a new collection."""
    session.add(Collection(collection_code=entity.collection_code, owner=entity.owner))
    return entity


# ============================================================================
# Game Repository
# ============================================================================


def get_games(session: DbSession, collection_code: str) -> list[GameEntity]:
    """Get all games of a collection, in insertion order."""
    games = (
        session.query(Game)
        .filter(Game.collection_code == collection_code)
        .order_by(Game.id)
        .all()
    )
    return [_game_to_entity(g) for g in games]


def get_game(session: DbSession, collection_code: str, objectid: str) -> GameEntity | None:
    """Get one game by identity."""
    game = (
        session.query(Game)
        .filter(Game.collection_code == collection_code, Game.objectid == objectid)
        .first()
    )
    return _game_to_entity(game) if game else None


def get_game_ids(session: DbSession, collection_code: str) -> set[str]:
    """Get the object ids stored for a collection."""
    rows = session.query(Game.objectid).filter(Game.collection_code == collection_code).all()
    return {r[0] for r in rows}


def create_games(session: DbSession, entities: Iterable[GameEntity]) -> int:
    """Insert games. Returns number of rows added."""
    count = 0
    for entity in entities:
        session.add(
            Game(
                collection_code=entity.collection_code,
                objectid=entity.objectid,
                objectname=entity.objectname,
                originalname=entity.originalname,
                itemtype=entity.itemtype,
                comment=entity.comment,
                slug=entity.slug,
                link=entity.link,
                image_url=entity.image_url,
            )
        )
        count += 1
    # Games must exist before votes can reference them
    session.flush()
    return count


def delete_games(session: DbSession, collection_code: str, objectids: Iterable[str]) -> int:
    """Delete games by object id. Votes must be deleted first."""
    ids = list(objectids)
    if not ids:
        return 0
    return (
        session.query(Game)
        .filter(Game.collection_code == collection_code, Game.objectid.in_(ids))
        .delete(synchronize_session=False)
    )


# ============================================================================
# Vote Repository
# ============================================================================


def get_votes(session: DbSession, collection_code: str) -> list[VoteEntity]:
    """Get all votes of a collection, in order of first vote."""
    votes = (
        session.query(Vote)
        .filter(Vote.collection_code == collection_code)
        .order_by(Vote.id)
        .all()
    )
    return [_vote_to_entity(v) for v in votes]


def get_vote(
    session: DbSession, collection_code: str, objectid: str, username: str
) -> VoteEntity | None:
    """Get one vote by identity."""
    vote = _find_vote(session, collection_code, objectid, username)
    return _vote_to_entity(vote) if vote else None


def get_voters(session: DbSession, collection_code: str) -> list[str]:
    """Distinct usernames that voted, in order of first vote."""
    rows = (
        session.query(Vote.username)
        .filter(Vote.collection_code == collection_code)
        .order_by(Vote.id)
        .all()
    )
    return list(dict.fromkeys(r[0] for r in rows))


def upsert_vote(session: DbSession, entity: VoteEntity) -> VoteEntity:
    """Insert or overwrite the vote for (collection, game, user)."""
    vote = _find_vote(session, entity.collection_code, entity.objectid, entity.username)
    if vote is None:
        vote = Vote(
            collection_code=entity.collection_code,
            objectid=entity.objectid,
            username=entity.username,
        )
        session.add(vote)
    vote.vote = entity.vote.to_stored()
    vote.favorite = entity.favorite
    return entity


def delete_votes_for_games(
    session: DbSession, collection_code: str, objectids: Iterable[str]
) -> int:
    """Delete every vote referencing the given games."""
    ids = list(objectids)
    if not ids:
        return 0
    return (
        session.query(Vote)
        .filter(Vote.collection_code == collection_code, Vote.objectid.in_(ids))
        .delete(synchronize_session=False)
    )


def _find_vote(
    session: DbSession, collection_code: str, objectid: str, username: str
) -> Vote | None:
    return (
        session.query(Vote)
        .filter(
            Vote.collection_code == collection_code,
            Vote.objectid == objectid,
            Vote.username == username,
        )
        .first()
    )


# ============================================================================
# Batch Operations
# ============================================================================


def commit(session: DbSession) -> None:
    """Commit current transaction."""
    session.commit()


def rollback(session: DbSession) -> None:
    """Roll back current transaction."""
    session.rollback()
