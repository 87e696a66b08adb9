"""Database session management.

SQLite engines are cached per resolved path. Foreign keys are switched
on for every connection so a vote can never outlive its game.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from boardvote.db.schema import Base

DEFAULT_DB_PATH = Path("data/boardvote.db")
DB_PATH_ENV = "BOARDVOTE_DB_PATH"

_engine_cache: dict[str, Engine] = {}
_session_factory_cache: dict[str, sessionmaker] = {}


def resolve_db_path(db_path: Path | None = None) -> Path:
    """Pick the database path: argument, then BOARDVOTE_DB_PATH, then default."""
    if db_path is not None:
        return Path(db_path)
    env_value = os.environ.get(DB_PATH_ENV, "").strip()
    return Path(env_value) if env_value else DEFAULT_DB_PATH


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """Turn on FK enforcement for each new SQLite connection."""

    @event.listens_for(engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def get_engine(db_path: Path | None = None) -> Engine:
    """Get (cached) SQLAlchemy engine for the database.

    Uses StaticPool and check_same_thread=False so FastAPI's threadpool
    can share the single SQLite connection.

    Args:
        db_path: Path to SQLite database file.

    Returns:
        SQLAlchemy engine instance.
    """
    path = resolve_db_path(db_path)
    cache_key = str(path.resolve())

    if cache_key in _engine_cache:
        return _engine_cache[cache_key]

    path.parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(
        f"sqlite:///{path}",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    _engine_cache[cache_key] = engine
    return engine


def get_session(db_path: Path | None = None) -> Session:
    """Get a database session. Caller closes it."""
    path = resolve_db_path(db_path)
    cache_key = str(path.resolve())

    factory = _session_factory_cache.get(cache_key)
    if factory is None:
        factory = sessionmaker(bind=get_engine(path))
        _session_factory_cache[cache_key] = factory

    return factory()


@contextmanager
def get_db_session(db_path: Path | None = None) -> Generator[Session, None, None]:
    """Session context manager: commit on success, rollback on error.

    Example:
        with get_db_session() as session:
            repo.upsert_vote(session, vote)
    """
    session = get_session(db_path)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(db_path: Path | None = None) -> None:
    """Create tables. Call once during application startup."""
    Base.metadata.create_all(get_engine(db_path))
