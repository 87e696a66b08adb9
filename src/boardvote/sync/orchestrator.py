"""Orchestration of imports and votes for a collection.

- Owns store side effects: applying reconciliation plans, vote upserts
- Builds the snapshot the aggregator reads
- Forbidden: tally logic, reconciliation logic, HTTP concerns

Ordering contract: for removed games, votes are deleted before the
games themselves, within one transaction. Image lookups finish before
that transaction starts writing.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from boardvote.aggregation.tally import voter_registry
from boardvote.catalog.images import ImageResolver
from boardvote.core.identity import (
    DEFAULT_CATALOG_HOST,
    generate_collection_code,
    normalize_code,
)
from boardvote.db import repo
from boardvote.db.repo import DbSession
from boardvote.models.domain import (
    CollectionEntity,
    CollectionSnapshot,
    RawRow,
    VoteEntity,
    VoteValue,
)
from boardvote.sync.reconcile import SkippedRow, pending_ids, reconcile

logger = logging.getLogger(__name__)

MAX_CODE_ATTEMPTS = 10


class NotFoundError(ValueError):
    """Raised when a collection or game does not exist."""

    pass


@dataclass
class ImportResult:
    """Result of applying one import to a collection."""

    collection_code: str
    owner: str
    created: bool
    inserted: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    skipped: list[SkippedRow] = field(default_factory=list)

    @property
    def noop(self) -> bool:
        """True when the collection was already up to date."""
        return not self.created and not self.inserted and not self.deleted


async def import_collection(
    session: DbSession,
    owner: str,
    rows: Sequence[RawRow],
    resolver: ImageResolver,
    *,
    catalog_host: str = DEFAULT_CATALOG_HOST,
) -> ImportResult:
    """Import a parsed catalog export into the owner's collection.

    The owner's existing collection is reused; a first import creates
    one with a fresh code. Only new games are inserted (with resolved
    images); games missing from the export are removed together with
    their votes.

    Image lookups run before any write, so no transaction is held open
    across network I/O.

    Args:
        session: Database session.
        owner: Free-text username of the uploader.
        rows: Parsed export rows.
        resolver: Image lookup used for newly inserted games.
        catalog_host: Host used to build canonical catalog links.

    Returns:
        ImportResult describing what changed.

    Raises:
        ValueError: If owner is blank.
    """
    rows = list(rows)
    objectids = pending_import_ids(session, owner, rows)
    image_urls = await resolve_images(resolver, objectids)
    return apply_import(session, owner, rows, image_urls, catalog_host=catalog_host)


def pending_import_ids(session: DbSession, owner: str, rows: Sequence[RawRow]) -> list[str]:
    """Object ids an import would insert for this owner. Read only.

    Raises:
        ValueError: If owner is blank.
    """
    owner = _clean_owner(owner)
    collection = repo.get_collection_for_owner(session, owner)
    existing_ids = repo.get_game_ids(session, collection.collection_code) if collection else set()
    return pending_ids(existing_ids, rows)


async def resolve_images(resolver: ImageResolver, objectids: Sequence[str]) -> dict[str, str]:
    """Resolve image URLs, degrading to placeholders if the resolver fails.

    Returns:
        Mapping objectid -> image URL. Empty when the resolver raised;
        the reconciler then uses DEFAULT_IMAGE_URL for every game.
    """
    if not objectids:
        return {}
    try:
        return await resolver.resolve_many(objectids)
    except Exception as e:
        logger.warning(f"Image lookup failed for {len(objectids)} games, using placeholders: {e}")
        return {}


def apply_import(
    session: DbSession,
    owner: str,
    rows: Sequence[RawRow],
    image_urls: Mapping[str, str] | None = None,
    *,
    catalog_host: str = DEFAULT_CATALOG_HOST,
) -> ImportResult:
    """Reconcile and write an import in one transaction.

    Synchronous: nothing awaits between the first write and the commit.
    A failure rolls the whole import back.

    Raises:
        ValueError: If owner is blank.
    """
    owner = _clean_owner(owner)

    try:
        collection, created = _get_or_create_collection(session, owner)
        code = collection.collection_code
        existing_ids = repo.get_game_ids(session, code)
        plan = reconcile(code, existing_ids, rows, image_urls, catalog_host=catalog_host)

        if plan.to_delete:
            repo.delete_votes_for_games(session, code, plan.to_delete)
            repo.delete_games(session, code, plan.to_delete)
        if plan.to_insert:
            repo.create_games(session, plan.to_insert)

        repo.commit(session)
    except Exception:
        repo.rollback(session)
        raise

    result = ImportResult(
        collection_code=code,
        owner=owner,
        created=created,
        inserted=plan.insert_ids,
        deleted=sorted(plan.to_delete),
        skipped=plan.skipped,
    )

    if result.noop:
        logger.info(f"Collection {code} already up to date")
    else:
        logger.info(
            f"Imported collection {code}: {len(result.inserted)} inserted, "
            f"{len(result.deleted)} deleted, {len(result.skipped)} skipped"
        )
    return result


def cast_vote(
    session: DbSession,
    collection_code: str,
    objectid: str,
    username: str,
    value: VoteValue,
) -> VoteEntity:
    """Record a user's opinion of a game, keeping their favorite flag.

    Raises:
        NotFoundError: If the collection or game is unknown.
        ValueError: If username is blank.
    """
    current = _current_vote(session, collection_code, objectid, username)
    current.vote = value
    repo.upsert_vote(session, current)
    repo.commit(session)
    return current


def set_favorite(
    session: DbSession,
    collection_code: str,
    objectid: str,
    username: str,
    favorite: bool,
) -> VoteEntity:
    """Star or unstar a game for a user, keeping their opinion.

    Raises:
        NotFoundError: If the collection or game is unknown.
        ValueError: If username is blank.
    """
    current = _current_vote(session, collection_code, objectid, username)
    current.favorite = favorite
    repo.upsert_vote(session, current)
    repo.commit(session)
    return current


def load_snapshot(session: DbSession, collection_code: str) -> CollectionSnapshot:
    """Load the in-memory state of a collection.

    Raises:
        NotFoundError: If the collection is unknown.
    """
    code = normalize_code(collection_code)
    collection = repo.get_collection(session, code)
    if collection is None:
        raise NotFoundError(f"Collection not found: {code}")

    votes = repo.get_votes(session, code)
    return CollectionSnapshot(
        collection=collection,
        games=repo.get_games(session, code),
        votes=votes,
        voters=voter_registry(votes),
    )


def _get_or_create_collection(
    session: DbSession, owner: str
) -> tuple[CollectionEntity, bool]:
    existing = repo.get_collection_for_owner(session, owner)
    if existing is not None:
        return existing, False

    for _ in range(MAX_CODE_ATTEMPTS):
        code = generate_collection_code()
        if not repo.collection_code_exists(session, code):
            break
    else:
        raise RuntimeError("Could not allocate a unique collection code")

    collection = repo.create_collection(
        session, CollectionEntity(collection_code=code, owner=owner)
    )
    logger.info(f"Created collection {code} for {owner}")
    return collection, True


def _current_vote(
    session: DbSession,
    collection_code: str,
    objectid: str,
    username: str,
) -> VoteEntity:
    code = normalize_code(collection_code)
    username = username.strip()
    if not username:
        raise ValueError("Username is required")
    if repo.get_collection(session, code) is None:
        raise NotFoundError(f"Collection not found: {code}")
    if repo.get_game(session, code, objectid) is None:
        raise NotFoundError(f"Game not found: {objectid}")

    existing = repo.get_vote(session, code, objectid, username)
    if existing is not None:
        return existing
    return VoteEntity(collection_code=code, objectid=objectid, username=username)


def _clean_owner(owner: str) -> str:
    owner = owner.strip()
    if not owner:
        raise ValueError("Owner name is required")
    return owner
