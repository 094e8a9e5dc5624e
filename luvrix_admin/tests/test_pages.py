from unittest.mock import call
from urllib.parse import parse_qs, urlsplit

from luvrix_admin.config import settings
from luvrix_admin.errors import ApiError
from luvrix_admin.models import ConsoleSession


def _location(res):
    """Path and flattened query of a redirect."""
    parts = urlsplit(res.headers["location"])
    return parts.path, {k: v[0] for k, v in parse_qs(parts.query).items()}


# --- login / setup / password ---

def test_login_sets_cookie_and_follows_next(client, api, db):
    api.login.return_value = {"success": True, "token": "opaque", "user": {"id": "a1", "role": "ADMIN"}}
    res = client.post("/admin/login", data={"email": "admin@luvrix.com", "password": "pw", "next": "/admin/users"})
    assert res.status_code == 303
    assert res.headers["location"] == "/admin/users"
    assert settings.session_cookie_name in res.headers["set-cookie"]
    assert db.query(ConsoleSession).count() == 1


def test_login_failure_rerenders_form(client, api):
    api.login.side_effect = ApiError("Invalid credentials", 401)
    res = client.post("/admin/login", data={"email": "admin@luvrix.com", "password": "bad"})
    assert res.status_code == 400
    assert "Invalid credentials" in res.text
    assert 'value="admin@luvrix.com"' in res.text


def test_login_page_redirects_signed_in_admin(admin_client):
    res = admin_client.get("/admin/login?next=/admin/manga")
    assert res.status_code == 303
    assert res.headers["location"] == "/admin/manga"


def test_logout_removes_session(admin_client, db):
    res = admin_client.post("/admin/logout")
    assert _location(res) == ("/admin/login", {"msg": "Logged out"})
    assert db.query(ConsoleSession).count() == 0


def test_setup_hidden_once_admin_exists(client, api):
    api.get_all_users.return_value = [{"id": "a1", "role": "ADMIN"}]
    res = client.get("/admin/setup")
    assert "An admin account already exists." in res.text


def test_setup_validates_password_before_calling_platform(client, api):
    api.get_all_users.return_value = []
    res = client.post("/admin/setup", data={"email": "admin@luvrix.com", "password": "weak"})
    assert res.status_code == 400
    assert "Password must be at least 8 characters" in res.text
    api.setup_admin.assert_not_called()


def test_setup_reports_platform_refusal(client, api):
    api.get_all_users.return_value = []
    api.setup_admin.return_value = {"success": False, "error": "Setup disabled"}
    res = client.post("/admin/setup", data={"email": "admin@luvrix.com", "password": "Str0ng!Pass"})
    assert res.status_code == 400
    assert "Setup disabled" in res.text
    assert "location" not in res.headers


def test_change_password_audits(admin_client, api):
    api.change_password.return_value = {"success": True, "userId": "admin-1"}
    res = admin_client.post(
        "/admin/change-password",
        data={"currentPassword": "Old!Pass1", "newPassword": "New!Pass1", "confirmPassword": "New!Pass1"},
    )
    assert _location(res) == ("/admin/change-password", {"msg": "Password changed successfully!"})
    api.change_password.assert_called_once_with("Old!Pass1", "New!Pass1")
    api.create_log.assert_called_once_with({"adminId": "admin-1", "action": "Changed Password", "targetId": "admin-1"})


def test_change_password_refused_is_not_audited(admin_client, api):
    api.change_password.return_value = {"success": False, "error": "Current password is incorrect"}
    res = admin_client.post(
        "/admin/change-password",
        data={"currentPassword": "Wrong!Pass1", "newPassword": "New!Pass1", "confirmPassword": "New!Pass1"},
    )
    assert _location(res) == ("/admin/change-password", {"error": "Current password is incorrect"})
    api.create_log.assert_not_called()


def test_change_password_mismatch(admin_client, api):
    res = admin_client.post(
        "/admin/change-password",
        data={"currentPassword": "x", "newPassword": "New!Pass1", "confirmPassword": "Other!Pass1"},
    )
    assert _location(res)[1] == {"error": "New passwords do not match"}
    api.change_password.assert_not_called()


# --- dashboard ---

def test_dashboard_counts(admin_client, api):
    api.get_all_blogs.return_value = [{"id": "b1", "title": "Hello", "status": "pending"}]
    api.get_all_users.return_value = [{"id": "u1"}, {"id": "u2"}]
    api.get_all_manga.return_value = []
    api.get_all_payments.return_value = [{"amount": 49, "status": "success"}]
    api.get_donation_stats.side_effect = ApiError("nope", 500)
    res = admin_client.get("/admin/dashboard")
    assert res.status_code == 200
    assert "Pending Approval" in res.text
    assert "/admin/blogs?status=pending" in res.text
    assert "Hello" in res.text
    api.get_all_blogs.assert_called_once_with(include_all=True)


def test_dashboard_shows_platform_error(admin_client, api):
    api.get_all_blogs.side_effect = ApiError("Network error: refused", 0)
    res = admin_client.get("/admin/dashboard")
    assert res.status_code == 200
    assert "Network error: refused" in res.text


# --- users / subscribers ---

def test_block_user_hides_posts_and_audits(admin_client, api):
    api.hide_user_posts.return_value = {"count": 3}
    res = admin_client.post("/admin/users/u9/block", data={"blocked": "0"})
    assert _location(res) == ("/admin/users", {"msg": "Blocked User. Hidden 3 posts"})
    api.update_user.assert_called_once_with("u9", {"blocked": True})
    api.unhide_user_posts.assert_not_called()
    api.create_log.assert_called_once_with(
        {"adminId": "admin-1", "action": "Blocked User", "targetId": "u9", "details": "Hidden 3 posts"}
    )


def test_unblock_user_restores_posts(admin_client, api):
    api.unhide_user_posts.return_value = {"count": 2}
    res = admin_client.post("/admin/users/u9/block", data={"blocked": "1"})
    assert _location(res)[1] == {"msg": "Unblocked User. Restored 2 posts"}
    api.update_user.assert_called_once_with("u9", {"blocked": False})


def test_audit_failure_does_not_undo_action(admin_client, api):
    api.create_log.side_effect = ApiError("log store down", 503)
    res = admin_client.post("/admin/users/u9/role", data={"role": "USER"})
    assert _location(res)[1] == {"msg": "Made User Admin"}
    api.update_user.assert_called_once_with("u9", {"role": "ADMIN"})


def test_points_rejects_negative(admin_client, api):
    res = admin_client.post("/admin/users/u9/points", data={"points": "-4"})
    assert _location(res)[1]["error"].startswith("Please enter a valid number")
    api.update_user_points.assert_not_called()


def test_subscriber_export_is_csv_of_active(admin_client, api):
    api.get_all_subscribers.return_value = [
        {"id": "s1", "email": "a@x.com", "status": "active"},
        {"id": "s2", "email": "b@x.com", "status": "unsubscribed"},
    ]
    res = admin_client.get("/admin/subscribers/export")
    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/csv")
    assert 'filename="subscribers-' in res.headers["content-disposition"]
    assert res.text == "Email\na@x.com"


# --- giveaways ---

def test_locked_giveaway_cannot_be_edited(admin_client, api):
    api.get_giveaway.return_value = {"id": "g1", "title": "PS5", "status": "winner_selected"}
    res = admin_client.get("/admin/giveaways/g1/edit")
    path, query = _location(res)
    assert path == "/admin/giveaways/g1"
    assert "locked" in query["error"]

    res = admin_client.post("/admin/giveaways/g1/tasks", data={"type": "custom", "title": "Say hi"})
    assert "locked" in _location(res)[1]["error"]
    api.add_giveaway_task.assert_not_called()


def test_only_draft_giveaways_delete(admin_client, api):
    api.get_giveaway.return_value = {"id": "g1", "status": "active"}
    res = admin_client.post("/admin/giveaways/g1/delete")
    assert _location(res)[1] == {"error": "Only draft giveaways can be deleted"}
    api.delete_giveaway.assert_not_called()


def test_winner_selection_modes(admin_client, api):
    api.select_giveaway_winner.return_value = {"winnerId": "u5"}
    res = admin_client.post("/admin/giveaways/g1/winner", data={})
    assert _location(res) == ("/admin/giveaways/g1", {"tab": "winner", "msg": "Winner selected"})

    admin_client.post("/admin/giveaways/g1/winner", data={"winnerUserId": "u7"})
    assert api.select_giveaway_winner.call_args_list == [
        call("g1", "SYSTEM_RANDOM", None),
        call("g1", "ADMIN_RANDOM", "u7"),
    ]


# --- settings ---

def test_general_settings_keeps_secret_when_blank(admin_client, api):
    api.get_settings.return_value = {"openaiApiKey": "sk-live-9999", "blogPostPrice": 49, "adPlacements": [{"id": "1"}]}
    res = admin_client.post("/admin/settings", data={"blogPostPrice": "79", "autoApproval": "1", "openaiApiKey": ""})
    assert _location(res)[1] == {"msg": "Settings saved successfully!"}

    sent = api.update_settings.call_args.args[0]
    assert sent["blogPostPrice"] == 79
    assert sent["autoApproval"] is True
    assert sent["openaiApiKey"] == "sk-live-9999"
    assert "adPlacements" not in sent
    assert sent["mangaVisibility"] == {"web": False, "mobileWeb": False, "android": False, "ios": False}


def test_settings_page_masks_secret(admin_client, api):
    api.get_settings.return_value = {"openaiApiKey": "sk-live-9999"}
    api.get_cookie_settings.return_value = {"enabled": True}
    res = admin_client.get("/admin/settings")
    assert res.status_code == 200
    assert "sk-live-9999" not in res.text
    assert "********9999" in res.text


def test_clear_cache_rejects_unknown_action(admin_client, api):
    res = admin_client.post("/admin/settings/cache", data={"action": "everything"})
    assert _location(res)[1] == {"error": "Unknown cache action"}
    api.clear_cache.assert_not_called()

    api.clear_cache.return_value = {"results": ["Next cache cleared", "API cache cleared"]}
    res = admin_client.post("/admin/settings/cache", data={"action": "all"})
    assert _location(res)[1] == {"msg": "Next cache cleared, API cache cleared"}


def test_menu_changes_save_without_audit(admin_client, api):
    api.get_settings.return_value = {}
    res = admin_client.post("/admin/menus", data={"op": "add_menu", "name": "Hot Picks"})
    assert _location(res)[1] == {"msg": "Menus saved successfully!"}
    menus = api.update_settings.call_args.args[0]["navigationMenus"]
    assert menus[-1] == {"id": "hot-picks", "name": "Hot Picks", "submenus": []}
    api.create_log.assert_not_called()


def test_analytics_rejects_bad_ga_id(admin_client, api):
    res = admin_client.post("/admin/analytics", data={"analyticsId": "UA-1", "analyticsEnabled": "1"})
    assert "GA4 ID" in _location(res)[1]["error"]
    api.update_settings.assert_not_called()


# --- audit logs ---

def test_audit_pager_keeps_filters(admin_client, api):
    api.get_audit_logs.return_value = {"logs": [], "total": 45, "stats": {}}
    res = admin_client.get("/admin/audit-logs", params={"q": "deleted post", "category": "user_management"})
    assert res.status_code == 200
    assert 'href="/admin/audit-logs?page=2&amp;category=user_management&amp;q=deleted+post"' in res.text
    api.get_audit_logs.assert_called_once_with(page=1, limit=20, category="user_management", severity=None)
