"""Shared test fixtures for the CollabDocs test suite.

Tests run against an in-memory SQLite database by default (override with
TEST_DATABASE_URL). Importing the app runs the migrator, which creates the
tables; each test then starts from empty tables plus the seeded community
and default custom form.

Authentication is enabled: requests carry signed bearer tokens for distinct
users, built with ``token_headers``.
"""

import os

# Configure the app before any collabdocs import reads settings.
os.environ["DATABASE_URL"] = os.environ.get("TEST_DATABASE_URL", "sqlite://")
os.environ["AUTH_ENABLED"] = "true"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["NOTIFIER_URL"] = ""
os.environ["RATE_LIMIT_PER_MINUTE"] = "0"
os.environ["LOG_FORMAT"] = "text"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import text

from collabdocs.core.config import settings
from collabdocs.core.seeder import seed_initial_data
from collabdocs.core.token_factory import create_token
from collabdocs.database import SessionLocal, get_db
from collabdocs.main import app
from collabdocs.middleware.request_context import _buckets
from collabdocs.models import User

AUTHOR = "author-a"
READER = "reader-b"
OTHER = "reader-c"
ADMIN = "admin-1"

# Children before parents; documents lose their version pointer first.
_CLEANUP_STATEMENTS = [
    "DELETE FROM likes",
    "DELETE FROM version_contributions",
    "DELETE FROM notification_events",
    "DELETE FROM comments",
    "UPDATE documents SET current_version_id = NULL",
    "DELETE FROM document_versions",
    "DELETE FROM documents",
    "DELETE FROM custom_forms",
    "DELETE FROM community",
    "DELETE FROM users",
]


@pytest.fixture(autouse=True)
def _clean_tables():
    """Empty every table and re-seed before each test."""
    db = SessionLocal()
    try:
        for statement in _CLEANUP_STATEMENTS:
            db.execute(text(statement))
        db.commit()
        seed_initial_data(db)
    finally:
        db.close()
    _buckets.clear()
    yield


@pytest.fixture()
def db():
    """Per-test database session."""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def client(db):
    """TestClient whose requests share the test's session."""

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def token_headers(user_id: str, role: str = "user", **claims) -> dict:
    """Authorization header for *user_id* with *role*."""
    token = create_token(
        subject=user_id,
        role=role,
        secret=settings.jwt_secret_key,
        **claims,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def author_headers() -> dict:
    return token_headers(AUTHOR, "accountable", name="Author A")


@pytest.fixture()
def reader_headers() -> dict:
    return token_headers(READER, "user", name="Reader B")


@pytest.fixture()
def other_headers() -> dict:
    return token_headers(OTHER, "user", name="Reader C")


@pytest.fixture()
def admin_headers() -> dict:
    return token_headers(ADMIN, "admin", name="Admin")


@pytest.fixture()
def users(db):
    """Persist the standard test users for service-level tests."""
    for user_id, role in ((AUTHOR, "accountable"), (READER, "user"), (OTHER, "user"), (ADMIN, "admin")):
        db.add(User(user_id=user_id, display_name=user_id, role=role, is_active=True))
    db.commit()
    return {"author": AUTHOR, "reader": READER, "other": OTHER, "admin": ADMIN}


def future_date(days: int = 30) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


def past_date(days: int = 1) -> str:
    return (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()


def make_document(published: bool = True, **content_overrides) -> dict:
    """Factory for document creation payloads on the seeded default form."""
    content = {
        "title": "Open procurement data",
        "brief": "Publish every public contract within thirty days.",
        "fundation": "Transparency lowers costs.",
        "articles": "Article 1. Contracts are public.",
        "closingDate": future_date(),
    }
    content.update(content_overrides)
    return {"custom_form": "default", "content": content, "published": published}


def create_document(client, headers, **kwargs) -> dict:
    """POST a document and return its JSON body, asserting success."""
    resp = client.post("/api/documents", json=make_document(**kwargs), headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_comment(client, doc_id, headers, field="brief", content="Needs a deadline.", **extra) -> dict:
    """POST a comment and return its JSON body, asserting success."""
    resp = client.post(
        f"/api/documents/{doc_id}/comments",
        json={"field": field, "content": content, **extra},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()
