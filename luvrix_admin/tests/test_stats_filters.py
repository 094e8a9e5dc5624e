from datetime import date

from luvrix_admin.services.exports import active_emails, export_filename, subscribers_csv
from luvrix_admin.services.filters import (
    filter_audit_logs,
    filter_blogs,
    filter_donations,
    filter_drafts,
    filter_subscribers,
    filter_users,
    paginate_total,
    sort_by_created,
)
from luvrix_admin.services.stats import (
    content_stats,
    dashboard_stats,
    format_currency,
    payment_stats,
    subscriber_counts,
)

BLOGS = [
    {"id": "b1", "title": "Anime Roundup", "category": "Anime", "status": "approved", "authorId": "u1", "views": 120},
    {"id": "b2", "title": "Budget Travel", "category": "Travel", "status": "pending", "authorId": "u2", "views": "40"},
    {"id": "b3", "title": "Tech News", "category": "Technology", "status": "rejected", "authorId": "u1"},
]
PAYMENTS = [
    {"amount": 49, "status": "success"},
    {"amount": "99.5", "status": "success"},
    {"amount": 49, "status": "failed"},
    {"amount": None, "status": "pending"},
]


def test_dashboard_stats_counts_and_revenue():
    stats = dashboard_stats(BLOGS, [{"id": "u1"}, {"id": "u2"}], [{"id": "m1"}], PAYMENTS)
    assert stats["blogs"] == {"total": 3, "pending": 1, "approved": 1}
    assert stats["users"]["total"] == 2
    assert stats["manga"]["total"] == 1
    assert stats["payments"]["revenue"] == 148.5


def test_payment_stats():
    stats = payment_stats(PAYMENTS)
    assert stats["total"] == 4
    assert stats["successful"] == 2
    assert stats["failed"] == 1


def test_content_stats_sums_views_and_ranks():
    manga = [{"id": "m1", "views": 500, "favorites": 12}, {"id": "m2", "views": 10, "favorites": "3"}]
    stats = content_stats(BLOGS, manga)
    assert stats["blog_views"] == 160
    assert stats["total_views"] == 670
    assert stats["total_favorites"] == 15
    assert [b["id"] for b in stats["top_blogs"]] == ["b1", "b2", "b3"]


def test_format_currency():
    assert format_currency(1500, "₹") == "₹1,500"
    assert format_currency("99.5", "₹") == "₹99.50"
    assert format_currency(None, "$") == "$0"


def test_filter_blogs_by_status_author_and_query():
    assert [b["id"] for b in filter_blogs(BLOGS, status="pending")] == ["b2"]
    assert [b["id"] for b in filter_blogs(BLOGS, author_id="u1")] == ["b1", "b3"]
    assert [b["id"] for b in filter_blogs(BLOGS, status="all", query="TRAVEL")] == ["b2"]

    authors = {"u1": {"name": "Priya", "email": "priya@luvrix.com"}}
    assert [b["id"] for b in filter_blogs(BLOGS, query="priya", authors=authors)] == ["b1", "b3"]


def test_filter_users_matches_name_or_email():
    users = [{"name": "Ravi", "email": "ravi@x.com"}, {"name": None, "email": "mira@y.com"}]
    assert filter_users(users, "MIRA") == [users[1]]
    assert filter_users(users, "") == users


def test_filter_drafts():
    drafts = [
        {"title": "Cricket fever", "topic": "IPL", "status": "draft"},
        {"title": "Monsoon", "topic": "weather", "status": "published"},
    ]
    assert filter_drafts(drafts, status="draft") == [drafts[0]]
    assert filter_drafts(drafts, status="all", query="ipl") == [drafts[0]]


def test_filter_subscribers_and_counts():
    subs = [
        {"email": "a@x.com", "status": "active"},
        {"email": "b@x.com", "status": "unsubscribed"},
        {"email": "c@y.com", "status": "active"},
    ]
    assert filter_subscribers(subs, "x.com", "active") == [subs[0]]
    assert subscriber_counts(subs) == {"active": 2, "unsubscribed": 1}


def test_filter_audit_logs_and_donations():
    logs = [{"action": "Deleted Blog", "userEmail": "admin@luvrix.com", "category": "content"}, {"action": "Login"}]
    assert filter_audit_logs(logs, "deleted") == [logs[0]]
    donations = [{"donorName": "Asha", "giveawayTitle": "PS5"}, {"donorEmail": "z@z.com"}]
    assert filter_donations(donations, "ps5") == [donations[0]]


def test_sort_by_created_puts_undated_last():
    items = [{"id": 1}, {"id": 2, "createdAt": "2026-01-01"}, {"id": 3, "createdAt": "2026-03-01"}]
    assert [i["id"] for i in sort_by_created(items)] == [3, 2, 1]


def test_paginate_total():
    assert paginate_total(41, 20) == 3
    assert paginate_total(0, 20) == 1
    assert paginate_total("bad", 20) == 1


def test_subscriber_export_only_includes_active():
    subs = [{"email": "a@x.com", "status": "active"}, {"email": "b@x.com", "status": "unsubscribed"}, {"status": "active"}]
    assert active_emails(subs) == ["a@x.com"]
    assert subscribers_csv(subs) == "Email\na@x.com"
    assert export_filename(date(2026, 2, 3)) == "subscribers-2026-02-03.csv"
