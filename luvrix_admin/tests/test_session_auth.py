from datetime import timedelta
from unittest.mock import MagicMock

import jwt
import pytest
from fastapi import Response

from conftest import ADMIN_USER, make_session
from luvrix_admin.config import settings
from luvrix_admin.errors import ApiError, ValidationError
from luvrix_admin.models import ConsoleSession
from luvrix_admin.security import auth
from luvrix_admin.services.scheduler import purge_expired_sessions


def _request(raw=None):
    request = MagicMock()
    request.cookies = {settings.session_cookie_name: raw} if raw else {}
    return request


def test_login_stores_hashed_session(db, api):
    exp = auth.utcnow() + timedelta(hours=2)
    token = jwt.encode({"sub": "admin-1", "exp": int(exp.timestamp())}, "platform-secret", algorithm="HS256")
    api.login.return_value = {"success": True, "token": token, "user": ADMIN_USER}

    raw, row = auth.login(db, " admin@luvrix.com ", "pw")

    api.login.assert_called_once_with("admin@luvrix.com", "pw")
    assert row.session_hash == auth.hash_session_id(raw)
    assert row.session_hash != raw
    assert row.auth_token == token
    # capped by the token's own exp rather than the console TTL
    assert abs((auth.as_utc(row.expires_at) - exp).total_seconds()) < 2


def test_login_failure_is_validation_error(db, api):
    api.login.side_effect = ApiError("Invalid credentials", 401)
    with pytest.raises(ValidationError, match="Invalid credentials"):
        auth.login(db, "admin@luvrix.com", "wrong")
    assert db.query(ConsoleSession).count() == 0

    with pytest.raises(ValidationError, match="Email and password are required"):
        auth.login(db, "", "pw")


def test_token_expiry_ignores_garbage():
    assert auth.token_expiry("not-a-jwt") is None
    now = auth.utcnow()
    assert auth.session_expiry("not-a-jwt", now) == now + timedelta(hours=settings.session_ttl_hours)


def test_expired_session_is_dropped(db, api):
    make_session(db, "old", ADMIN_USER, expires_in=timedelta(seconds=-5))
    assert auth.current_session(_request("old"), db) is None
    assert db.query(ConsoleSession).count() == 0
    api.me.assert_not_called()


def test_fresh_session_skips_revalidation(db, api):
    make_session(db, "fresh", ADMIN_USER)
    row = auth.current_session(_request("fresh"), db)
    assert auth.is_admin(row)
    api.me.assert_not_called()


def test_stale_session_rejected_token_logs_out(db, api):
    make_session(db, "stale", ADMIN_USER, verified_ago=timedelta(hours=1))
    api.me.side_effect = ApiError("Unauthorized", 401)
    assert auth.current_session(_request("stale"), db) is None
    assert db.query(ConsoleSession).count() == 0


def test_stale_session_survives_unreachable_platform(db, api):
    make_session(db, "stale", ADMIN_USER, verified_ago=timedelta(hours=1))
    api.me.side_effect = ApiError("Network error: refused", 0)
    row = auth.current_session(_request("stale"), db)
    assert row is not None
    assert row.user_data["role"] == "ADMIN"


def test_revalidation_picks_up_role_change(db, api):
    make_session(db, "stale", ADMIN_USER, verified_ago=timedelta(hours=1))
    api.me.return_value = {"user": {**ADMIN_USER, "role": "USER"}}
    row = auth.current_session(_request("stale"), db)
    assert not auth.is_admin(row)


def test_logout_deletes_row_and_clears_cookie(db):
    make_session(db, "bye", ADMIN_USER)
    response = Response()
    auth.logout(_request("bye"), response, db)
    assert db.query(ConsoleSession).count() == 0
    assert settings.session_cookie_name in response.headers["set-cookie"]


def test_purge_removes_only_expired(session_factory, db):
    make_session(db, "live", ADMIN_USER)
    make_session(db, "dead", ADMIN_USER, expires_in=timedelta(minutes=-1))
    assert purge_expired_sessions(session_factory) == 1
    remaining = db.query(ConsoleSession).all()
    assert [r.session_hash for r in remaining] == [auth.hash_session_id("live")]
