import hashlib
import secrets
from datetime import datetime, timedelta, timezone as dt_timezone

import jwt
from fastapi import Request, Response
from sqlalchemy.orm import Session

from luvrix_admin.config import settings
from luvrix_admin.errors import ApiError, ValidationError
from luvrix_admin.logging_setup import log_event
from luvrix_admin.models import ConsoleSession
from luvrix_admin.schemas import SessionUser
from luvrix_admin.services import platform_client


def hash_session_id(raw: str) -> str:
    return hashlib.sha256(raw.encode()).hexdigest()


def utcnow() -> datetime:
    return datetime.now(dt_timezone.utc)


def as_utc(dt: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes
    if dt is None:
        return None
    return dt if dt.tzinfo else dt.replace(tzinfo=dt_timezone.utc)


def token_expiry(token: str) -> datetime | None:
    """The platform signs its JWTs; we only need exp, so the signature is not checked here."""
    try:
        payload = jwt.decode(token, options={"verify_signature": False})
    except jwt.PyJWTError:
        return None
    exp = payload.get("exp")
    if isinstance(exp, (int, float)):
        return datetime.fromtimestamp(exp, tz=dt_timezone.utc)
    return None


def session_expiry(token: str, now: datetime | None = None) -> datetime:
    now = now or utcnow()
    expires = now + timedelta(hours=settings.session_ttl_hours)
    exp = token_expiry(token)
    if exp and exp < expires:
        return exp
    return expires


def login(db: Session, email: str | None, password: str | None) -> tuple[str, ConsoleSession]:
    email = (email or "").strip()
    if not email or not password:
        raise ValidationError("Email and password are required")

    client = platform_client.client_for()
    try:
        data = client.login(email, password)
    except ApiError as e:
        log_event("admin_login_failed", level="warning", email=email, status_code=e.status_code, error=e.message)
        raise ValidationError(e.message) from e

    if not data.get("success") or not data.get("token"):
        raise ValidationError(data.get("error") or "Login failed")

    token = data["token"]
    now = utcnow()
    raw = secrets.token_urlsafe(32)
    row = ConsoleSession(
        session_hash=hash_session_id(raw),
        auth_token=token,
        user_data=data.get("user") or {},
        last_verified_at=now,
        expires_at=session_expiry(token, now),
    )
    db.add(row)
    db.commit()
    db.refresh(row)

    user = SessionUser.from_user_data(row.user_data)
    log_event("admin_login", user_id=user.id, role=user.role)
    return raw, row


def _drop(db: Session, row: ConsoleSession, reason: str):
    log_event("session_dropped", reason=reason, session_id=row.id)
    db.delete(row)
    db.commit()


def refresh_user_data(db: Session, row: ConsoleSession) -> ConsoleSession | None:
    """
    Re-check the stored token with /auth/me.
    A rejected token ends the session; an unreachable platform keeps the cached user.
    """
    client = platform_client.client_for(row.auth_token)
    try:
        data = client.me()
    except ApiError as e:
        if e.status_code in (401, 403):
            _drop(db, row, "token_rejected")
            return None
        log_event("session_revalidate_failed", level="warning", status_code=e.status_code, error=e.message)
        return row

    if data.get("user"):
        row.user_data = data["user"]
    row.last_verified_at = utcnow()
    db.commit()
    return row


def current_session(request: Request, db: Session) -> ConsoleSession | None:
    raw = request.cookies.get(settings.session_cookie_name)
    if not raw:
        return None

    row = db.query(ConsoleSession).filter(ConsoleSession.session_hash == hash_session_id(raw)).first()
    if not row:
        return None

    now = utcnow()
    if as_utc(row.expires_at) <= now:
        _drop(db, row, "expired")
        return None

    verified = as_utc(row.last_verified_at)
    if verified is None or (now - verified).total_seconds() > settings.session_revalidate_seconds:
        return refresh_user_data(db, row)
    return row


def logout(request: Request, response: Response, db: Session):
    raw = request.cookies.get(settings.session_cookie_name)
    if raw:
        row = db.query(ConsoleSession).filter(ConsoleSession.session_hash == hash_session_id(raw)).first()
        if row:
            log_event("admin_logout", session_id=row.id)
            db.delete(row)
            db.commit()
    clear_session_cookie(response)


def set_session_cookie(response: Response, raw: str, row: ConsoleSession):
    max_age = int((as_utc(row.expires_at) - utcnow()).total_seconds())
    response.set_cookie(
        key=settings.session_cookie_name,
        value=raw,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
        max_age=max(max_age, 0),
    )


def clear_session_cookie(response: Response):
    response.delete_cookie(settings.session_cookie_name)


def get_token(row: ConsoleSession | None) -> str | None:
    return row.auth_token if row else None


def is_logged_in(row: ConsoleSession | None) -> bool:
    return row is not None


def is_admin(row: ConsoleSession | None) -> bool:
    return bool(row) and (row.user_data or {}).get("role") == "ADMIN"
