"""Collections API endpoint.

POST /api/collections/import - Import a catalog export for an owner
GET /api/collections/{code} - Get collection detail
GET /api/owners/{owner}/collection - Get the collection an owner created
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.concurrency import run_in_threadpool

from boardvote.api.app import get_catalog_host, get_db_session, get_image_resolver
from boardvote.catalog.export import parse_collection_csv
from boardvote.catalog.images import ImageResolver
from boardvote.core.identity import normalize_code
from boardvote.db import repo
from boardvote.db.repo import DbSession
from boardvote.models.domain import CollectionEntity
from boardvote.models.types import (
    CollectionDetail,
    ImportRequest,
    ImportResponse,
    SkippedRowDetail,
)
from boardvote.sync.orchestrator import apply_import, pending_import_ids, resolve_images

router = APIRouter()


def _collection_to_detail(session: DbSession, collection: CollectionEntity) -> CollectionDetail:
    code = collection.collection_code
    return CollectionDetail(
        collection_code=code,
        owner=collection.owner,
        game_count=len(repo.get_game_ids(session, code)),
        voters=repo.get_voters(session, code),
    )


@router.post("/collections/import", response_model=ImportResponse)
async def post_import(
    request: ImportRequest,
    response: Response,
    session: DbSession = Depends(get_db_session),
    resolver: ImageResolver = Depends(get_image_resolver),
) -> ImportResponse:
    """Import a catalog export into the owner's collection.

    Returns 201 when the import created the collection, 200 otherwise.
    Store calls run in the threadpool; only image lookups are awaited
    on the event loop.

    Raises:
        HTTPException: 422 if the export lacks required columns or the
            owner is blank.
    """
    try:
        rows = parse_collection_csv(request.csv_text)
        objectids = await run_in_threadpool(pending_import_ids, session, request.owner, rows)
        image_urls = await resolve_images(resolver, objectids)
        result = await run_in_threadpool(
            apply_import,
            session,
            request.owner,
            rows,
            image_urls,
            catalog_host=get_catalog_host(),
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    response.status_code = 201 if result.created else 200

    return ImportResponse(
        collection_code=result.collection_code,
        owner=result.owner,
        created=result.created,
        noop=result.noop,
        inserted=result.inserted,
        deleted=result.deleted,
        skipped=[
            SkippedRowDetail(position=s.position, objectid=s.objectid, reason=s.reason)
            for s in result.skipped
        ],
    )


@router.get("/collections/{code}", response_model=CollectionDetail)
def get_collection(
    code: str,
    session: DbSession = Depends(get_db_session),
) -> CollectionDetail:
    """Get collection detail.

    Raises:
        HTTPException: 404 if collection not found.
    """
    collection = repo.get_collection(session, normalize_code(code))

    if collection is None:
        raise HTTPException(status_code=404, detail="Collection not found")

    return _collection_to_detail(session, collection)


@router.get("/owners/{owner}/collection", response_model=CollectionDetail)
def get_owner_collection(
    owner: str,
    session: DbSession = Depends(get_db_session),
) -> CollectionDetail:
    """Get the collection an owner created.

    Raises:
        HTTPException: 404 if the owner has no collection.
    """
    collection = repo.get_collection_for_owner(session, owner.strip())

    if collection is None:
        raise HTTPException(status_code=404, detail="No collection for this owner")

    return _collection_to_detail(session, collection)
