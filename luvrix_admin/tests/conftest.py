import os

# Must be set before luvrix_admin.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["SESSION_COOKIE_SECURE"] = "false"
os.environ["PLATFORM_API_URL"] = "http://platform.test/api"

from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from luvrix_admin.config import settings
from luvrix_admin.db import get_db
from luvrix_admin.main import app
from luvrix_admin.models import Base, ConsoleSession
from luvrix_admin.security.auth import hash_session_id, utcnow

ADMIN_USER = {"id": "admin-1", "email": "admin@luvrix.com", "name": "Site Admin", "role": "ADMIN"}


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def api():
    """The PlatformClient every request gets; configure return values per test."""
    mock = MagicMock()
    with patch("luvrix_admin.services.platform_client.client_for", return_value=mock):
        yield mock


@pytest.fixture
def client(session_factory, api):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app, follow_redirects=False)
    app.dependency_overrides.clear()


def make_session(db, raw: str, user_data: dict, expires_in: timedelta = timedelta(hours=1), verified_ago: timedelta = timedelta(0)):
    now = utcnow()
    row = ConsoleSession(
        session_hash=hash_session_id(raw),
        auth_token="platform-token",
        user_data=user_data,
        last_verified_at=now - verified_ago,
        expires_at=now + expires_in,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@pytest.fixture
def admin_client(client, db):
    make_session(db, "admin-session", ADMIN_USER)
    client.cookies.set(settings.session_cookie_name, "admin-session")
    return client
