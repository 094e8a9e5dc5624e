from datetime import timedelta

from conftest import ADMIN_USER, make_session
from luvrix_admin.config import settings
from luvrix_admin.navigation import MAIN_MENU_SIZE, MENU_ITEMS, back_to_website, is_active, sidebar_groups
from luvrix_admin.security.guard import safe_next


def test_sidebar_groups_split_main_and_settings():
    groups = sidebar_groups("/admin/users")
    assert [g["title"] for g in groups] == ["Main Menu", "Settings"]
    assert len(groups[0]["items"]) == MAIN_MENU_SIZE
    assert len(groups[0]["items"]) + len(groups[1]["items"]) == len(MENU_ITEMS)
    active = [i["label"] for g in groups for i in g["items"] if i["active"]]
    assert active == ["Users"]


def test_is_active_matches_subpaths_only():
    assert is_active("/admin/giveaways", "/admin/giveaways/g1/edit")
    assert is_active("/admin/blogs", "/admin/blogs/")
    assert not is_active("/admin/blogs", "/admin/blogsx")


def test_back_to_website_points_at_public_site():
    assert back_to_website() == {"href": settings.public_site_url, "label": "Back to Website"}


def test_safe_next_only_follows_console_paths():
    assert safe_next("/admin/users?q=ravi") == "/admin/users?q=ravi"
    assert safe_next("https://evil.test/admin") == "/admin/dashboard"
    assert safe_next("//evil.test") == "/admin/dashboard"
    assert safe_next("/admin/login") == "/admin/dashboard"
    assert safe_next(None) == "/admin/dashboard"


def test_anonymous_visitor_is_sent_to_login_with_next(client):
    res = client.get("/admin/users?q=a")
    assert res.status_code == 303
    assert res.headers["location"] == "/admin/login?next=%2Fadmin%2Fusers%3Fq%3Da"


def test_non_admin_is_sent_to_public_site(client, db):
    make_session(db, "reader", {**ADMIN_USER, "role": "USER"})
    client.cookies.set(settings.session_cookie_name, "reader")
    res = client.get("/admin/dashboard")
    assert res.status_code == 303
    assert res.headers["location"] == settings.public_site_url


def test_expired_cookie_goes_back_to_login(client, db):
    make_session(db, "gone", ADMIN_USER, expires_in=timedelta(seconds=-1))
    client.cookies.set(settings.session_cookie_name, "gone")
    res = client.get("/admin/payments")
    assert res.status_code == 303
    assert res.headers["location"].startswith("/admin/login")


def test_admin_page_renders_sidebar_and_user(admin_client, api):
    api.get_all_payments.return_value = [{"id": "p1", "userId": "u1", "amount": 49, "status": "success"}]
    api.get_all_users.return_value = [{"id": "u1", "name": "Ravi", "email": "ravi@x.com"}]
    res = admin_client.get("/admin/payments")
    assert res.status_code == 200
    assert "Back to Website" in res.text
    assert "Site Admin" in res.text
    assert "Ravi" in res.text


def test_health_and_request_id(client):
    res = client.get("/health", headers={"X-Request-ID": "req-42"})
    assert res.json() == {"status": "ok"}
    assert res.headers["X-Request-ID"] == "req-42"
