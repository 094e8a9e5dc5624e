from datetime import datetime, timezone
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy import delete
from sqlalchemy.orm import Session

from luvrix_admin.config import settings
from luvrix_admin.logging_setup import log_event
from luvrix_admin.models import ConsoleSession


def purge_expired_sessions(db_factory: Callable[[], Session], now: datetime | None = None) -> int:
    """Delete console sessions past their expiry. Returns the number removed."""
    db = db_factory()
    try:
        now = now or datetime.now(timezone.utc)
        result = db.execute(delete(ConsoleSession).where(ConsoleSession.expires_at <= now))
        db.commit()
        removed = result.rowcount or 0
        if removed:
            log_event("sessions_purged", count=removed)
        return removed
    finally:
        db.close()


def start_scheduler(db_factory: Callable[[], Session]) -> BackgroundScheduler:
    sched = BackgroundScheduler(timezone="UTC")
    sched.add_job(
        purge_expired_sessions,
        trigger="interval",
        minutes=settings.session_purge_minutes,
        args=[db_factory],
        id="purge_expired_sessions",
        replace_existing=True,
        max_instances=1,
    )
    sched.start()
    return sched
