from typing import Any

from luvrix_admin.config import settings


def _num(value: Any) -> float:
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0


def revenue(payments: list[dict]) -> float:
    return sum(_num(p.get("amount")) for p in payments if p.get("status") == "success")


def dashboard_stats(blogs: list[dict], users: list[dict], manga: list[dict], payments: list[dict]) -> dict:
    return {
        "blogs": {
            "total": len(blogs),
            "pending": sum(1 for b in blogs if b.get("status") == "pending"),
            "approved": sum(1 for b in blogs if b.get("status") == "approved"),
        },
        "users": {"total": len(users)},
        "manga": {"total": len(manga)},
        "payments": {"total": len(payments), "revenue": revenue(payments)},
    }


def payment_stats(payments: list[dict]) -> dict:
    return {
        "total": len(payments),
        "successful": sum(1 for p in payments if p.get("status") == "success"),
        "failed": sum(1 for p in payments if p.get("status") == "failed"),
        "revenue": revenue(payments),
    }


def _top_by_views(items: list[dict], n: int = 5) -> list[dict]:
    return sorted(items, key=lambda i: _num(i.get("views")), reverse=True)[:n]


def content_stats(blogs: list[dict], manga: list[dict]) -> dict:
    blog_views = sum(_num(b.get("views")) for b in blogs)
    manga_views = sum(_num(m.get("views")) for m in manga)
    return {
        "total_blogs": len(blogs),
        "total_manga": len(manga),
        "blog_views": blog_views,
        "manga_views": manga_views,
        "total_views": blog_views + manga_views,
        "total_favorites": sum(_num(m.get("favorites")) for m in manga),
        "top_blogs": _top_by_views(blogs),
        "top_manga": _top_by_views(manga),
    }


def subscriber_counts(subscribers: list[dict]) -> dict:
    return {
        "active": sum(1 for s in subscribers if s.get("status") == "active"),
        "unsubscribed": sum(1 for s in subscribers if s.get("status") == "unsubscribed"),
    }


def donation_total(donations: list[dict]) -> float:
    return sum(_num(d.get("amount")) for d in donations)


def recent(items: list[Any], n: int = 5) -> list[Any]:
    return list(items[:n])


def format_currency(amount: Any, symbol: str | None = None) -> str:
    symbol = settings.currency_symbol if symbol is None else symbol
    value = _num(amount)
    if float(value).is_integer():
        return f"{symbol}{int(value):,}"
    return f"{symbol}{value:,.2f}"
