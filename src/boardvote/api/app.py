"""FastAPI application factory.

API layer:
- Validates inputs, reads/writes DB through orchestrator and repo
- Returns display-ready payloads
- Forbidden: tally logic, reconciliation logic
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import AsyncIterator, Generator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from boardvote.catalog.images import CatalogImageResolver, ImageResolver, StaticImageResolver
from boardvote.core.identity import DEFAULT_CATALOG_HOST
from boardvote.db.repo import DbSession
from boardvote.db.session import get_session, init_db

DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://127.0.0.1:5173"


def get_catalog_host() -> str:
    """Catalog host from BOARDVOTE_CATALOG_HOST."""
    return os.environ.get("BOARDVOTE_CATALOG_HOST", "").strip() or DEFAULT_CATALOG_HOST


def get_db_session() -> Generator[DbSession, None, None]:
    """Dependency to get database session.

    Yields:
        Database session that is automatically closed after request.
    """
    session = get_session()
    try:
        yield session
    finally:
        session.close()


def get_image_resolver() -> ImageResolver:
    """Dependency to get the image resolver.

    BOARDVOTE_IMAGE_LOOKUP=static disables network lookups.
    """
    if os.environ.get("BOARDVOTE_IMAGE_LOOKUP", "catalog").strip().lower() == "static":
        return StaticImageResolver()
    return CatalogImageResolver(host=get_catalog_host())


def create_app(*, create_tables: bool = True) -> FastAPI:
    """Create FastAPI application.

    The database path comes from BOARDVOTE_DB_PATH.

    Args:
        create_tables: Create missing tables at startup.

    Returns:
        Configured FastAPI application.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if create_tables:
            init_db()
        yield

    app = FastAPI(
        title="boardvote API",
        description="Shared board game collections with group voting",
        version="0.1.0",
        lifespan=lifespan,
    )

    origins = os.environ.get("BOARDVOTE_CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from boardvote.api.routes import collections, games, votes

    app.include_router(collections.router, prefix="/api")
    app.include_router(games.router, prefix="/api")
    app.include_router(votes.router, prefix="/api")

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "ok"}

    return app


# Default app instance
app = create_app()
