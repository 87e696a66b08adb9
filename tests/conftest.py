"""Shared pytest fixtures for boardvote tests."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from boardvote.catalog.images import StaticImageResolver
from boardvote.db.schema import Base
from boardvote.db.session import enable_sqlite_foreign_keys


@pytest.fixture
def engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def session(engine):
    """Create a database session for testing."""
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def client(engine):
    """API client bound to the test database, with offline image lookup."""
    from boardvote.api.app import create_app, get_db_session, get_image_resolver

    app = create_app(create_tables=False)

    def override_get_db():
        with Session(engine) as db_session:
            yield db_session

    app.dependency_overrides[get_db_session] = override_get_db
    app.dependency_overrides[get_image_resolver] = lambda: StaticImageResolver(
        "https://img.test/default.png"
    )
    return TestClient(app)
