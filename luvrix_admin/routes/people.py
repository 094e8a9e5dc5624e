from urllib.parse import urlencode

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, Response
from starlette.datastructures import FormData

from luvrix_admin import ui
from luvrix_admin.config import settings
from luvrix_admin.errors import ApiError, ValidationError
from luvrix_admin.logging_setup import log_event
from luvrix_admin.security.guard import AdminContext, require_admin
from luvrix_admin.services.audit import record_admin_action
from luvrix_admin.services.exports import active_emails, export_filename, subscribers_csv
from luvrix_admin.services.filters import filter_audit_logs, filter_subscribers, filter_users, paginate_total
from luvrix_admin.services.platform_client import fetch_parallel
from luvrix_admin.services.stats import format_currency, payment_stats, subscriber_counts
from luvrix_admin.services.validation import validate_points

router = APIRouter(prefix="/admin", tags=["admin-people"])

SUBSCRIBER_STATUSES = [("all", "All"), ("active", "Active"), ("unsubscribed", "Unsubscribed")]

AUDIT_CATEGORIES = [
    ("", "All Categories"),
    ("user_management", "User Management"),
    ("content_management", "Content Management"),
    ("system_config", "System Config"),
    ("security", "Security"),
    ("data_access", "Data Access"),
    ("authentication", "Authentication"),
]
AUDIT_SEVERITIES = [("", "All Severity"), ("info", "Info"), ("warning", "Warning"), ("error", "Error"), ("critical", "Critical")]
SEVERITY_COLORS = {
    "critical": "bg-red-100 text-red-700",
    "error": "bg-orange-100 text-orange-700",
    "warning": "bg-yellow-100 text-yellow-700",
}

POINTS_FORM_HTML = """
<form method="post" action="/admin/users/{user_id}/points" class="inline-flex gap-1">
  <input type="number" min="0" name="points" value="{points}" class="text-xs border border-slate-200 rounded-lg px-2 py-1 w-16">
  <button class="text-xs px-3 py-1.5 rounded-lg font-medium bg-blue-50 text-blue-700">Set posts</button>
</form>
"""

SUBSCRIBER_FILTER_HTML = """
<form method="get" action="/admin/subscribers" class="flex flex-wrap items-end gap-3">
  <input type="text" name="q" value="{q}" placeholder="Search email" class="{input_class} max-w-xs">
  <select name="status" class="{input_class} max-w-[12rem]">{statuses}</select>
  <button class="{button_class}">Filter</button>
  <a href="/admin/subscribers/export" class="{button_class} ml-auto">Export CSV</a>
</form>
"""

AUDIT_FILTER_HTML = """
<form method="get" action="/admin/audit-logs" class="flex flex-wrap items-end gap-3">
  <input type="text" name="q" value="{q}" placeholder="Search action, email or category" class="{input_class} max-w-xs">
  <select name="category" class="{input_class} max-w-[14rem]">{categories}</select>
  <select name="severity" class="{input_class} max-w-[10rem]">{severities}</select>
  <button class="{button_class}">Filter</button>
</form>
"""


# --- users ---

@router.get("/users", response_class=HTMLResponse)
def users_page(q: str = "", msg: str | None = None, error: str | None = None, ctx: AdminContext = Depends(require_admin)):
    try:
        users = ctx.client.get_all_users() or []
    except ApiError as e:
        log_event("users_load_failed", level="error", error=e.message)
        return ui.page(ctx, "Users", "", error=e.message)

    shown = filter_users(users, q)
    rows = []
    for u in shown:
        uid = str(u.get("id"))
        blocked = bool(u.get("blocked"))
        is_admin = u.get("role") == "ADMIN"
        actions = [
            ui.post_button(
                f"/admin/users/{uid}/block",
                "Unblock" if blocked else "Block",
                css="bg-green-50 text-green-700" if blocked else "bg-amber-50 text-amber-700",
                hidden={"blocked": "1" if blocked else "0"},
            ),
            ui.post_button(
                f"/admin/users/{uid}/role",
                "Remove Admin" if is_admin else "Make Admin",
                css="bg-purple-50 text-purple-700",
                hidden={"role": u.get("role") or "USER"},
            ),
            POINTS_FORM_HTML.format(user_id=ui.esc(uid), points=ui.esc(u.get("extraPosts") or 0)),
            ui.post_button(
                f"/admin/users/{uid}/reset-password",
                "Reset Password",
                confirm="Send this user a new password?",
            ),
            ui.post_button(
                f"/admin/users/{uid}/delete",
                "Delete",
                css="bg-red-600 text-white",
                confirm="Delete this user permanently?",
                hidden={"email": u.get("email") or ""},
            ),
        ]
        state = '<span class="text-xs text-red-600 font-semibold">Blocked</span>' if blocked else '<span class="text-xs text-green-600">Active</span>'
        rows.append(
            f'<tr><td class="px-4 py-3"><div class="font-medium">{ui.esc(u.get("name") or "No name")}</div>'
            f'<div class="text-xs text-slate-400">{ui.esc(u.get("email"))}</div></td>'
            f'<td class="px-4 py-3">{ui.esc(u.get("role") or "USER")}</td>'
            f'<td class="px-4 py-3">{ui.esc(u.get("freePostsUsed") or 0)} used / {ui.esc(u.get("extraPosts") or 0)} extra</td>'
            f'<td class="px-4 py-3">{state}</td>'
            f'<td class="px-4 py-3 text-slate-500">{ui.fmt_date(u.get("createdAt"))}</td>'
            f'<td class="px-4 py-3 space-x-1 whitespace-nowrap">{"".join(actions)}</td></tr>'
        )

    search = (
        '<form method="get" action="/admin/users" class="flex gap-2">'
        f'<input type="text" name="q" value="{ui.esc(q)}" placeholder="Search name or email" class="{ui.INPUT_CLASS} max-w-sm">'
        f'<button class="{ui.BUTTON_CLASS}">Search</button></form>'
    )
    content = ui.card(search) + f'<p class="text-sm text-slate-500">{len(shown)} of {len(users)} users</p>' + ui.table(
        ["User", "Role", "Posts", "Status", "Joined", ""], rows, empty="No users found"
    )
    return ui.page(ctx, "Users", content, msg=msg, error=error)


@router.post("/users/{user_id}/block")
def toggle_block(user_id: str, form: FormData = Depends(ui.form_data), ctx: AdminContext = Depends(require_admin)):
    currently_blocked = form.get("blocked") == "1"
    client = ctx.client
    try:
        client.update_user(user_id, {"blocked": not currently_blocked})
        if currently_blocked:
            result = client.unhide_user_posts(user_id)
            action, details = "Unblocked User", f"Restored {result.get('count') or 0} posts"
        else:
            result = client.hide_user_posts(user_id)
            action, details = "Blocked User", f"Hidden {result.get('count') or 0} posts"
    except ApiError as e:
        return ui.redirect("/admin/users", error=e.message)

    record_admin_action(client, ctx.user.id, action, user_id, details)
    return ui.redirect("/admin/users", msg=f"{action}. {details}")


@router.post("/users/{user_id}/role")
def toggle_role(user_id: str, form: FormData = Depends(ui.form_data), ctx: AdminContext = Depends(require_admin)):
    new_role = "USER" if form.get("role") == "ADMIN" else "ADMIN"
    try:
        ctx.client.update_user(user_id, {"role": new_role})
    except ApiError as e:
        return ui.redirect("/admin/users", error=e.message)
    action = "Made User Admin" if new_role == "ADMIN" else "Removed Admin Rights"
    record_admin_action(ctx.client, ctx.user.id, action, user_id)
    return ui.redirect("/admin/users", msg=action)


@router.post("/users/{user_id}/delete")
def delete_user(user_id: str, form: FormData = Depends(ui.form_data), ctx: AdminContext = Depends(require_admin)):
    try:
        ctx.client.delete_user(user_id)
    except ApiError as e:
        log_event("user_delete_failed", level="error", user_id=user_id, error=e.message)
        return ui.redirect("/admin/users", error="Failed to delete user")
    record_admin_action(ctx.client, ctx.user.id, "Deleted User", user_id, form.get("email") or "")
    return ui.redirect("/admin/users", msg="User deleted")


@router.post("/users/{user_id}/points")
def update_points(user_id: str, form: FormData = Depends(ui.form_data), ctx: AdminContext = Depends(require_admin)):
    try:
        points = validate_points(form.get("points"))
        ctx.client.update_user_points(user_id, points)
    except ValidationError as e:
        return ui.redirect("/admin/users", error=e.message)
    except ApiError as e:
        return ui.redirect("/admin/users", error=e.message or "Failed to update points")
    record_admin_action(ctx.client, ctx.user.id, "Added User Points", user_id, f"Added {points} extra posts")
    return ui.redirect("/admin/users", msg=f"Extra posts set to {points}")


@router.post("/users/{user_id}/reset-password")
def reset_password(user_id: str, ctx: AdminContext = Depends(require_admin)):
    try:
        data = ctx.client.reset_user_password(user_id)
    except ApiError as e:
        return ui.redirect("/admin/users", error=e.message or "Failed to reset password")
    return ui.redirect("/admin/users", msg=data.get("message") or "Password reset")


# --- subscribers ---

@router.get("/subscribers", response_class=HTMLResponse)
def subscribers_page(
    q: str = "",
    status: str = "all",
    msg: str | None = None,
    error: str | None = None,
    ctx: AdminContext = Depends(require_admin),
):
    try:
        subscribers = ctx.client.get_all_subscribers() or []
    except ApiError as e:
        log_event("subscribers_load_failed", level="error", error=e.message)
        return ui.page(ctx, "Subscribers", "", error=e.message)

    counts = subscriber_counts(subscribers)
    shown = filter_subscribers(subscribers, q, status)
    rows = []
    for s in shown:
        sid = str(s.get("id"))
        active = s.get("status") == "active"
        rows.append(
            f'<tr><td class="px-4 py-3 font-medium">{ui.esc(s.get("email"))}</td>'
            f'<td class="px-4 py-3">{ui.status_badge(s.get("status"))}</td>'
            f'<td class="px-4 py-3 text-slate-500">{ui.fmt_date(s.get("createdAt") or s.get("subscribedAt"))}</td>'
            f'<td class="px-4 py-3 space-x-1 whitespace-nowrap">'
            + ui.post_button(f"/admin/subscribers/{sid}/toggle", "Unsubscribe" if active else "Reactivate", hidden={"status": s.get("status") or ""})
            + ui.post_button(f"/admin/subscribers/{sid}/delete", "Delete", css="bg-red-50 text-red-600", confirm="Delete this subscriber?")
            + "</td></tr>"
        )

    filters = SUBSCRIBER_FILTER_HTML.format(
        q=ui.esc(q),
        statuses=ui.options(SUBSCRIBER_STATUSES, status),
        input_class=ui.INPUT_CLASS,
        button_class=ui.BUTTON_CLASS,
    )
    emails = ", ".join(active_emails(subscribers))
    content = (
        '<div class="grid grid-cols-3 gap-4">'
        + ui.stat_card("Total", len(subscribers))
        + ui.stat_card("Active", counts["active"])
        + ui.stat_card("Unsubscribed", counts["unsubscribed"])
        + "</div>"
        + ui.card(filters)
        + ui.table(["Email", "Status", "Subscribed", ""], rows, empty="No subscribers found")
        + ui.card(f'<textarea readonly rows="4" class="{ui.INPUT_CLASS} font-mono text-xs">{ui.esc(emails)}</textarea>', "Active Emails")
    )
    return ui.page(ctx, "Subscribers", content, msg=msg, error=error)


@router.get("/subscribers/export")
def export_subscribers(ctx: AdminContext = Depends(require_admin)):
    try:
        subscribers = ctx.client.get_all_subscribers() or []
    except ApiError as e:
        return ui.redirect("/admin/subscribers", error=e.message)
    return Response(
        content=subscribers_csv(subscribers),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )


@router.post("/subscribers/{subscriber_id}/toggle")
def toggle_subscriber(subscriber_id: str, form: FormData = Depends(ui.form_data), ctx: AdminContext = Depends(require_admin)):
    new_status = "unsubscribed" if form.get("status") == "active" else "active"
    try:
        ctx.client.update_subscriber_status(subscriber_id, new_status)
    except ApiError as e:
        return ui.redirect("/admin/subscribers", error=e.message)
    return ui.redirect("/admin/subscribers", msg=f"Subscriber marked {new_status}")


@router.post("/subscribers/{subscriber_id}/delete")
def delete_subscriber(subscriber_id: str, ctx: AdminContext = Depends(require_admin)):
    try:
        ctx.client.delete_subscriber(subscriber_id)
    except ApiError as e:
        return ui.redirect("/admin/subscribers", error=e.message)
    return ui.redirect("/admin/subscribers", msg="Subscriber deleted")


# --- payments ---

@router.get("/payments", response_class=HTMLResponse)
def payments_page(msg: str | None = None, error: str | None = None, ctx: AdminContext = Depends(require_admin)):
    try:
        payments, users = fetch_parallel(ctx.client.get_all_payments, ctx.client.get_all_users)
    except ApiError as e:
        log_event("payments_load_failed", level="error", error=e.message)
        return ui.page(ctx, "Payments", "", error=e.message)

    payments = payments or []
    users_by_id = {str(u.get("id")): u for u in users or []}
    stats = payment_stats(payments)
    rows = []
    for p in payments:
        user = users_by_id.get(str(p.get("userId")))
        who = (
            f'{ui.esc(user.get("name") or "No name")}<div class="text-xs text-slate-400">{ui.esc(user.get("email"))}</div>'
            if user else "Unknown"
        )
        rows.append(
            f'<tr><td class="px-4 py-3 font-mono text-xs">{ui.esc(p.get("txnId") or p.get("id"))}</td>'
            f'<td class="px-4 py-3">{who}</td>'
            f'<td class="px-4 py-3 font-semibold">{format_currency(p.get("amount"))}</td>'
            f'<td class="px-4 py-3">{ui.esc(p.get("postsAdded") or 0)}</td>'
            f'<td class="px-4 py-3">{ui.status_badge(p.get("status"))}</td>'
            f'<td class="px-4 py-3 text-slate-500">{ui.fmt_date(p.get("createdAt"), with_time=True)}</td></tr>'
        )

    content = (
        '<div class="grid grid-cols-2 lg:grid-cols-4 gap-4">'
        + ui.stat_card("Total Payments", stats["total"])
        + ui.stat_card("Successful", stats["successful"])
        + ui.stat_card("Failed", stats["failed"])
        + ui.stat_card("Revenue", format_currency(stats["revenue"]))
        + "</div>"
        + ui.table(["Transaction", "User", "Amount", "Posts", "Status", "Date"], rows, empty="No payments yet")
    )
    return ui.page(ctx, "Payments", content, msg=msg, error=error)


# --- audit logs ---

@router.get("/audit-logs", response_class=HTMLResponse)
def audit_logs_page(
    page: int = 1,
    category: str = "",
    severity: str = "",
    q: str = "",
    msg: str | None = None,
    error: str | None = None,
    ctx: AdminContext = Depends(require_admin),
):
    page = max(1, page)
    limit = settings.audit_page_size
    try:
        data = ctx.client.get_audit_logs(page=page, limit=limit, category=category or None, severity=severity or None)
    except ApiError as e:
        log_event("audit_logs_load_failed", level="error", error=e.message)
        return ui.page(ctx, "Audit Logs", "", error=e.message)

    logs = filter_audit_logs(data.get("logs") or [], q)
    total_pages = paginate_total(data.get("total"), limit)
    stats = data.get("stats") or {}

    cards = "".join(
        ui.stat_card(str(key).replace("_", " "), f"{value:,}" if isinstance(value, (int, float)) else value)
        for key, value in list(stats.items())[:4]
    )
    rows = []
    for log in logs:
        sev = log.get("severity") or "info"
        color = SEVERITY_COLORS.get(sev, "bg-blue-100 text-blue-700")
        rows.append(
            f'<tr><td class="px-4 py-3 font-medium">{ui.esc((log.get("action") or "unknown").replace("_", " "))}'
            f'<div class="text-xs text-slate-400">{ui.esc(log.get("details") or "")}</div></td>'
            f'<td class="px-4 py-3"><span class="text-xs px-2 py-0.5 rounded-full {color}">{ui.esc(sev)}</span></td>'
            f'<td class="px-4 py-3">{ui.esc(log.get("category") or "general")}</td>'
            f'<td class="px-4 py-3">{ui.esc(log.get("userEmail") or log.get("userId") or "")}</td>'
            f'<td class="px-4 py-3 text-xs">{ui.esc(log.get("ipAddress") or "")}</td>'
            f'<td class="px-4 py-3 text-slate-500">{ui.fmt_date(log.get("timestamp"), with_time=True)}</td></tr>'
        )

    filters = AUDIT_FILTER_HTML.format(
        q=ui.esc(q),
        categories=ui.options(AUDIT_CATEGORIES, category),
        severities=ui.options(AUDIT_SEVERITIES, severity),
        input_class=ui.INPUT_CLASS,
        button_class=ui.BUTTON_CLASS,
    )

    def page_link(n: int, label: str) -> str:
        query = urlencode({k: v for k, v in {"page": n, "category": category, "severity": severity, "q": q}.items() if v})
        return f'<a href="/admin/audit-logs?{ui.esc(query)}" class="px-3 py-1.5 rounded-lg bg-slate-100 text-sm">{label}</a>'

    pager = '<div class="flex items-center gap-2">'
    if page > 1:
        pager += page_link(page - 1, "Previous")
    pager += f'<span class="text-sm text-slate-500">Page {page} of {total_pages}</span>'
    if page < total_pages:
        pager += page_link(page + 1, "Next")
    pager += "</div>"

    content = (
        (f'<div class="grid grid-cols-2 lg:grid-cols-4 gap-4">{cards}</div>' if cards else "")
        + ui.card(filters)
        + ui.table(["Action", "Severity", "Category", "User", "IP", "Time"], rows, empty="No audit logs found")
        + pager
    )
    return ui.page(ctx, "Audit Logs", content, msg=msg, error=error)
