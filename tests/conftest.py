"""Shared test fixtures for the Folio test suite.

Everything runs in-process: an in-memory SQLite metadata store (one shared
connection via StaticPool) and an InMemoryRelationshipStore that evaluates
the same relation graph OpenFGA is configured with. Each test gets a fresh
schema and an empty relationship store.
"""

import os

# Configure before any folio import reads settings.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RELATIONSHIP_STORE"] = "memory"
os.environ["LOG_FORMAT"] = "text"
os.environ["ENVIRONMENT"] = "development"
os.environ["SHARE_POLICY"] = "open"
os.environ["WRITE_INTENTS_ENABLED"] = "false"
os.environ["VALIDATE_DOCUMENT_PARENT"] = "false"
os.environ["REQUEST_TIMEOUT_SECONDS"] = "0"

import pytest
from fastapi.testclient import TestClient

from folio import models  # noqa: F401
from folio.core.auth import Caller
from folio.core.config import settings
from folio.core.token_factory import create_token
from folio.database import Base, SessionLocal, engine, get_db
from folio.main import app
from folio.relationships import InMemoryRelationshipStore, get_relationship_store
from folio.services import AuthorizationCoordinator, OpenSharePolicy

ALICE = Caller(subject="alice")
BOB = Caller(subject="bob")
CAROL = Caller(subject="carol")


@pytest.fixture(autouse=True)
def _fresh_schema():
    """Drop and recreate every table so each test starts empty."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture()
def db():
    """Per-test database session."""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def store() -> InMemoryRelationshipStore:
    return InMemoryRelationshipStore()


@pytest.fixture()
def coordinator(db, store) -> AuthorizationCoordinator:
    """Coordinator with the historical defaults pinned, independent of env."""
    return AuthorizationCoordinator(
        db,
        store,
        share_policy=OpenSharePolicy(),
        validate_document_parent=False,
        write_intents_enabled=False,
    )


@pytest.fixture()
def client(db, store):
    """TestClient with the session and relationship store overridden."""

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_relationship_store] = lambda: store
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers():
    """Factory: bearer headers for a subject."""

    def _headers(subject: str) -> dict:
        token = create_token(subject=subject, secret=settings.jwt_secret_key)
        return {"Authorization": f"Bearer {token}"}

    return _headers
