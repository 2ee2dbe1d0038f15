import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.db.session import build_session_factory
from app.identity.locking import IdentifyLock
from app.identity.service import ContactService


@pytest.fixture()
def engine():
    """In-memory SQLite engine shared across sessions and threads."""
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine) -> sessionmaker:
    return build_session_factory(engine)


@pytest.fixture()
def db_session(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture()
def service(session_factory) -> ContactService:
    return ContactService(session_factory, lock=IdentifyLock())


@pytest.fixture()
def client(session_factory, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    """TestClient with the session factory overridden to the in-memory engine."""
    monkeypatch.setenv("DATABASE_URL", "sqlite+pysqlite:///:memory:")

    from app.core.settings import get_settings

    get_settings.cache_clear()

    from app.api.deps import get_db_session_factory
    from app.main import app

    app.dependency_overrides[get_db_session_factory] = lambda: session_factory
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    get_settings.cache_clear()
    os.environ.pop("DATABASE_URL", None)
