import math
from typing import Any


def _has(value: Any, query: str) -> bool:
    return bool(value) and query in str(value).lower()


def filter_users(users: list[dict], query: str | None) -> list[dict]:
    q = (query or "").strip().lower()
    if not q:
        return list(users)
    return [u for u in users if _has(u.get("name"), q) or _has(u.get("email"), q)]


def filter_blogs(
    blogs: list[dict],
    status: str | None = None,
    author_id: str | None = None,
    query: str | None = None,
    authors: dict[str, dict] | None = None,
) -> list[dict]:
    authors = authors or {}
    q = (query or "").strip().lower()
    out = []
    for b in blogs:
        if status and status != "all" and b.get("status") != status:
            continue
        if author_id and author_id != "all" and str(b.get("authorId")) != str(author_id):
            continue
        if q:
            author = authors.get(str(b.get("authorId")), {})
            if not (
                _has(b.get("title"), q)
                or _has(b.get("category"), q)
                or _has(author.get("name"), q)
                or _has(author.get("email"), q)
            ):
                continue
        out.append(b)
    return out


def filter_drafts(drafts: list[dict], status: str | None = None, query: str | None = None) -> list[dict]:
    q = (query or "").strip().lower()
    out = []
    for d in drafts:
        if status and status != "all" and d.get("status") != status:
            continue
        if q and not (_has(d.get("title"), q) or _has(d.get("topic"), q)):
            continue
        out.append(d)
    return out


def filter_subscribers(subscribers: list[dict], query: str | None = None, status: str | None = "all") -> list[dict]:
    q = (query or "").strip().lower()
    return [
        s
        for s in subscribers
        if (not q or _has(s.get("email"), q)) and (not status or status == "all" or s.get("status") == status)
    ]


def filter_audit_logs(logs: list[dict], query: str | None) -> list[dict]:
    q = (query or "").strip().lower()
    if not q:
        return list(logs)
    return [
        log for log in logs
        if _has(log.get("action"), q) or _has(log.get("userEmail"), q) or _has(log.get("category"), q)
    ]


def filter_donations(donations: list[dict], query: str | None) -> list[dict]:
    q = (query or "").strip().lower()
    if not q:
        return list(donations)
    return [
        d for d in donations
        if _has(d.get("donorName"), q) or _has(d.get("donorEmail"), q) or _has(d.get("giveawayTitle"), q)
    ]


def sort_by_created(items: list[dict]) -> list[dict]:
    """Newest first; records without createdAt sink to the bottom."""
    dated = [i for i in items if i.get("createdAt")]
    undated = [i for i in items if not i.get("createdAt")]
    return sorted(dated, key=lambda i: str(i["createdAt"]), reverse=True) + undated


def paginate_total(total: Any, limit: int) -> int:
    try:
        total = int(total or 0)
    except (TypeError, ValueError):
        total = 0
    if limit <= 0:
        return 1
    return max(1, math.ceil(total / limit))
