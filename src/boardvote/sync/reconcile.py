"""Reconciliation of an imported catalog batch against a stored collection.

Computes which games to insert and which to delete so the stored
collection matches the latest import. Survivors (games present both
in the store and in the import) are left untouched, together with
their votes.

Domain logic is pure - applying the plan is the orchestrator's job.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from boardvote.core.identity import (
    DEFAULT_CATALOG_HOST,
    DEFAULT_IMAGE_URL,
    build_catalog_link,
    classify_item_type,
    slugify,
)
from boardvote.models.domain import GameEntity, RawRow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SkippedRow:
    """A row left out of the plan, with the reason why."""

    position: int
    objectid: str | None
    reason: str


@dataclass
class ReconcilePlan:
    """Operations needed to bring a stored collection up to date."""

    to_insert: list[GameEntity] = field(default_factory=list)
    to_delete: set[str] = field(default_factory=set)
    skipped: list[SkippedRow] = field(default_factory=list)

    @property
    def is_noop(self) -> bool:
        """True when the collection is already up to date."""
        return not self.to_insert and not self.to_delete

    @property
    def insert_ids(self) -> list[str]:
        return [game.objectid for game in self.to_insert]


def reconcile(
    collection_code: str,
    existing_ids: Iterable[str],
    rows: Iterable[RawRow],
    image_urls: Mapping[str, str] | None = None,
    *,
    catalog_host: str = DEFAULT_CATALOG_HOST,
) -> ReconcilePlan:
    """Diff an imported batch against the stored game ids.

    Args:
        collection_code: Collection the games belong to.
        existing_ids: Object ids currently stored for the collection.
        rows: Parsed catalog rows, in export order.
        image_urls: Resolved image URLs by object id. Missing entries
            fall back to DEFAULT_IMAGE_URL.
        catalog_host: Host used to build canonical catalog links.

    Returns:
        ReconcilePlan with games to insert (import order), ids to delete
        and rows skipped as malformed or duplicated.
    """
    stored = {str(objectid).strip() for objectid in existing_ids}
    images = image_urls or {}

    valid_rows, skipped = _validate_rows(rows)
    # A skipped row that names its game blocks both insertion and deletion of it
    imported_ids = {objectid for objectid, _ in valid_rows}
    imported_ids.update(s.objectid for s in skipped if s.objectid)

    to_insert = [
        _build_game(collection_code, objectid, row, images, catalog_host)
        for objectid, row in valid_rows
        if objectid not in stored
    ]

    return ReconcilePlan(
        to_insert=to_insert,
        to_delete=stored - imported_ids,
        skipped=skipped,
    )


def pending_ids(existing_ids: Iterable[str], rows: Iterable[RawRow]) -> list[str]:
    """Object ids a reconciliation would insert, in import order.

    Lets the orchestrator resolve images before building the plan.
    """
    stored = {str(objectid).strip() for objectid in existing_ids}
    valid_rows, _ = _validate_rows(rows, log=False)
    return [objectid for objectid, _ in valid_rows if objectid not in stored]


def _validate_rows(
    rows: Iterable[RawRow],
    *,
    log: bool = True,
) -> tuple[list[tuple[str, RawRow]], list[SkippedRow]]:
    """Split rows into usable (objectid, row) pairs and skipped rows.

    A row needs a non-blank objectid and objectname. The first
    occurrence of an objectid wins; later ones are duplicates.
    """
    valid: list[tuple[str, RawRow]] = []
    skipped: list[SkippedRow] = []
    seen: set[str] = set()

    for position, row in enumerate(rows):
        objectid = (row.objectid or "").strip()
        objectname = (row.objectname or "").strip()

        reason = None
        if not objectid:
            reason = "missing objectid"
        elif not objectname:
            reason = "missing objectname"
        elif objectid in seen:
            reason = "duplicate objectid"

        if reason is not None:
            if log:
                logger.warning(f"Skipping import row {position} ({objectid or '?'}): {reason}")
            skipped.append(SkippedRow(position=position, objectid=objectid or None, reason=reason))
            continue

        seen.add(objectid)
        valid.append((objectid, row))

    return valid, skipped


def _build_game(
    collection_code: str,
    objectid: str,
    row: RawRow,
    images: Mapping[str, str],
    catalog_host: str,
) -> GameEntity:
    """Build a game entity from a validated row.

    Pure function - no network access.
    """
    objectname = (row.objectname or "").strip()
    originalname = (row.originalname or "").strip() or None
    item_type = classify_item_type(row.itemtype)
    slug = slugify(originalname or objectname)

    return GameEntity(
        collection_code=collection_code,
        objectid=objectid,
        objectname=objectname,
        originalname=originalname,
        itemtype=row.itemtype or "",
        comment=row.comment,
        slug=slug,
        link=build_catalog_link(objectid, slug, item_type, host=catalog_host),
        image_url=images.get(objectid) or DEFAULT_IMAGE_URL,
    )
