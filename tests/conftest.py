import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("PASSWORD_HASH_ITERATIONS", "1000")
os.environ.setdefault("SESSION_SECRET", "test-session-secret")
os.environ.setdefault("CELERY_BROKER_URL", "memory://")
os.environ.setdefault("CELERY_RESULT_BACKEND", "cache+memory://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fleeting.database import Base, get_db
from fleeting.main import app
from fleeting.models import resource, user  # noqa: F401  registers tables
from fleeting.services.blob_store import LocalBlobStore, get_blob_store


@pytest.fixture()
def engine():
    test_engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    try:
        yield test_engine
    finally:
        Base.metadata.drop_all(bind=test_engine)
        test_engine.dispose()


@pytest.fixture()
def session_factory(engine):
    # same commit semantics as fleeting.database.SessionLocal
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def blob_store(tmp_path):
    return LocalBlobStore(str(tmp_path / "blobs"))


@pytest.fixture(autouse=True)
def _no_share_domain(monkeypatch):
    for name in ("SECRET_DOMAIN", "SHARE_HOSTNAME", "ADMIN_PASS", "NON_INTERACTIVE_AGENTS"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def client(db_session, blob_store):
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def admin_client(client):
    # first anonymous request bootstraps the administrator and sets the session
    resp = client.get("/links")
    assert resp.status_code == 200
    return client
