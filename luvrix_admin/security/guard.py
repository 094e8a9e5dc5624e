from dataclasses import dataclass
from urllib.parse import quote

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from luvrix_admin.config import settings
from luvrix_admin.db import get_db
from luvrix_admin.errors import AdminRedirect
from luvrix_admin.models import ConsoleSession
from luvrix_admin.schemas import SessionUser
from luvrix_admin.security.auth import current_session, is_admin
from luvrix_admin.services import platform_client
from luvrix_admin.services.platform_client import PlatformClient


@dataclass
class AdminContext:
    session: ConsoleSession
    user: SessionUser
    token: str
    client: PlatformClient
    path: str


def login_redirect_url(request: Request) -> str:
    target = request.url.path
    if request.url.query:
        target = f"{target}?{request.url.query}"
    return f"/admin/login?next={quote(target, safe='')}"


def safe_next(next_url: str | None) -> str:
    """Only local console paths are followed after login."""
    if not next_url or not next_url.startswith("/admin") or next_url.startswith("//"):
        return "/admin/dashboard"
    if next_url.startswith("/admin/login"):
        return "/admin/dashboard"
    return next_url


def require_admin(request: Request, db: Session = Depends(get_db)) -> AdminContext:
    row = current_session(request, db)
    if row is None:
        raise AdminRedirect(login_redirect_url(request))
    if not is_admin(row):
        raise AdminRedirect(settings.public_site_url)

    return AdminContext(
        session=row,
        user=SessionUser.from_user_data(row.user_data),
        token=row.auth_token,
        client=platform_client.client_for(row.auth_token),
        path=request.url.path,
    )
