import html
import json
from datetime import datetime, timezone
from typing import Any, Iterable
from urllib.parse import urlencode

import pytz
from fastapi import Request
from fastapi.responses import HTMLResponse, RedirectResponse
from starlette.datastructures import FormData

from luvrix_admin.config import settings
from luvrix_admin.navigation import back_to_website, sidebar_groups

# --- HTML TEMPLATES ---

ADMIN_LAYOUT_HTML = """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>{title} | Luvrix Admin</title>
  <script src="https://cdn.tailwindcss.com"></script>
  <link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600;700;800&display=swap" rel="stylesheet">
  <style>
    :root {{ --primary: #ff0055; --secondary: #8b5cf6; }}
    body {{ font-family: 'Inter', sans-serif; background-color: #f8fafc; }}
    .nav-item.active {{ background: linear-gradient(to right, var(--primary), var(--secondary)); color: #fff; }}
  </style>
</head>
<body class="min-h-screen text-slate-800">
  <aside class="fixed inset-y-0 left-0 w-64 bg-slate-900 text-slate-300 overflow-y-auto">
    <a href="/admin/dashboard" class="block px-6 py-6 text-xl font-extrabold text-white">Luvrix <span class="text-pink-500">Admin</span></a>
    {sidebar}
    <div class="px-6 py-4 border-t border-white/10 text-xs">
      <div class="text-white font-semibold">{user_name}</div>
      <div class="text-slate-500">{user_email}</div>
      <form method="post" action="/admin/logout" class="mt-3">
        <button class="text-rose-400 hover:text-rose-300 font-semibold">Log out</button>
      </form>
    </div>
  </aside>
  <main class="ml-64 p-8 space-y-6">
    <h1 class="text-3xl font-bold text-slate-800">{title}</h1>
    {flash}
    {content}
  </main>
</body>
</html>
"""

BARE_LAYOUT_HTML = """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>{title} | Luvrix Admin</title>
  <script src="https://cdn.tailwindcss.com"></script>
  <style> body {{ font-family: 'Inter', sans-serif; }} </style>
</head>
<body class="bg-slate-100 min-h-screen flex items-center justify-center px-6">
  <div class="max-w-md w-full bg-white rounded-2xl shadow-xl p-10 space-y-6">
    <h1 class="text-2xl font-bold text-center">{title}</h1>
    {flash}
    {content}
  </div>
</body>
</html>
"""

INPUT_CLASS = "w-full px-4 py-2.5 border border-slate-200 rounded-xl"
BUTTON_CLASS = "px-5 py-2.5 bg-pink-600 text-white rounded-xl font-semibold hover:bg-pink-700"
SMALL_BUTTON_CLASS = "text-xs px-3 py-1.5 rounded-lg font-medium"

STATUS_COLORS = {
    "approved": "bg-green-100 text-green-700",
    "published": "bg-green-100 text-green-700",
    "active": "bg-green-100 text-green-700",
    "success": "bg-green-100 text-green-700",
    "pending": "bg-amber-100 text-amber-700",
    "upcoming": "bg-blue-100 text-blue-700",
    "draft": "bg-gray-100 text-gray-600",
    "rejected": "bg-red-100 text-red-700",
    "failed": "bg-red-100 text-red-700",
    "unsubscribed": "bg-gray-100 text-gray-600",
    "ended": "bg-gray-200 text-gray-700",
    "winner_selected": "bg-purple-100 text-purple-700",
}


def esc(value: Any) -> str:
    return html.escape("" if value is None else str(value), quote=True)


def checked(flag: Any) -> str:
    return " checked" if flag else ""


def selected(value: Any, current: Any) -> str:
    return " selected" if str(value) == str(current) else ""


def options(pairs: Iterable[tuple[Any, str]], current: Any) -> str:
    return "".join(f'<option value="{esc(v)}"{selected(v, current)}>{esc(label)}</option>' for v, label in pairs)


def render_sidebar(path: str) -> str:
    parts = []
    for group in sidebar_groups(path):
        links = "".join(
            f'<a href="{esc(i["href"])}" class="nav-item block px-4 py-2 rounded-lg text-sm {"active" if i["active"] else "hover:bg-white/5"}">{esc(i["label"])}</a>'
            for i in group["items"]
        )
        parts.append(
            f'<div class="px-4 mb-4"><div class="px-2 mb-2 text-[10px] font-bold uppercase tracking-widest text-slate-500">{esc(group["title"])}</div>{links}</div>'
        )
    back = back_to_website()
    parts.append(f'<div class="px-4 mb-4"><a href="{esc(back["href"])}" class="block px-4 py-2 text-sm text-slate-400 hover:text-white">{esc(back["label"])}</a></div>')
    return "<nav>" + "".join(parts) + "</nav>"


def flash_banner(msg: str | None = None, error: str | None = None) -> str:
    out = ""
    if msg:
        out += f'<div class="p-4 rounded-xl bg-green-50 border border-green-200 text-green-700 text-sm">{esc(msg)}</div>'
    if error:
        out += f'<div class="p-4 rounded-xl bg-red-50 border border-red-200 text-red-600 text-sm">{esc(error)}</div>'
    return out


def page(ctx, title: str, content: str, msg: str | None = None, error: str | None = None, status_code: int = 200) -> HTMLResponse:
    body = ADMIN_LAYOUT_HTML.format(
        title=esc(title),
        sidebar=render_sidebar(ctx.path),
        user_name=esc(ctx.user.display_name),
        user_email=esc(ctx.user.email),
        flash=flash_banner(msg, error),
        content=content,
    )
    return HTMLResponse(body, status_code=status_code)


def bare_page(title: str, content: str, msg: str | None = None, error: str | None = None, status_code: int = 200) -> HTMLResponse:
    body = BARE_LAYOUT_HTML.format(title=esc(title), flash=flash_banner(msg, error), content=content)
    return HTMLResponse(body, status_code=status_code)


def redirect(url: str, msg: str | None = None, error: str | None = None, **params) -> RedirectResponse:
    query = {k: v for k, v in {**params, "msg": msg, "error": error}.items() if v not in (None, "")}
    if query:
        url = f"{url}{'&' if '?' in url else '?'}{urlencode(query)}"
    return RedirectResponse(url, status_code=303)


def parse_timestamp(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, dict):
        seconds = value.get("_seconds", value.get("seconds"))
        if seconds is None:
            return None
        dt = datetime.fromtimestamp(seconds, tz=timezone.utc)
    elif isinstance(value, (int, float)):
        # millisecond epochs are what the platform usually sends
        dt = datetime.fromtimestamp(value / 1000 if value > 1e11 else value, tz=timezone.utc)
    else:
        try:
            dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def fmt_date(value: Any, with_time: bool = False, empty: str = "-") -> str:
    dt = parse_timestamp(value)
    if dt is None:
        return empty
    local = dt.astimezone(pytz.timezone(settings.display_timezone))
    return local.strftime("%b %d, %Y %H:%M" if with_time else "%b %d, %Y")


def status_badge(status: Any) -> str:
    status = str(status or "draft")
    color = STATUS_COLORS.get(status, STATUS_COLORS["draft"])
    return f'<span class="text-xs px-2 py-0.5 rounded-full font-medium {color}">{esc(status.replace("_", " "))}</span>'


def stat_card(title: str, value: Any, link: str | None = None, note: str | None = None) -> str:
    inner = f'<div class="text-xs font-semibold uppercase tracking-wider text-slate-500">{esc(title)}</div><div class="text-3xl font-bold mt-2">{esc(value)}</div>'
    if note:
        inner += f'<div class="text-xs text-slate-400 mt-1">{esc(note)}</div>'
    if link:
        return f'<a href="{esc(link)}" class="block bg-white rounded-2xl shadow-sm border border-slate-100 p-6 hover:shadow-md">{inner}</a>'
    return f'<div class="bg-white rounded-2xl shadow-sm border border-slate-100 p-6">{inner}</div>'


def table(headers: list[str], rows: list[str], empty: str = "Nothing to show yet") -> str:
    head = "".join(f'<th class="px-4 py-3 text-left text-xs font-semibold uppercase text-slate-500">{esc(h)}</th>' for h in headers)
    if not rows:
        body = f'<tr><td colspan="{len(headers)}" class="px-4 py-10 text-center text-slate-400">{esc(empty)}</td></tr>'
    else:
        body = "".join(rows)
    return f'<div class="bg-white rounded-2xl shadow-sm border border-slate-100 overflow-x-auto"><table class="w-full text-sm"><thead class="bg-slate-50"><tr>{head}</tr></thead><tbody class="divide-y divide-slate-100">{body}</tbody></table></div>'


def post_button(action: str, label: str, css: str = "bg-slate-100 text-slate-700", confirm: str | None = None, hidden: dict[str, Any] | None = None) -> str:
    onsubmit = f' onsubmit="return confirm({esc(json.dumps(confirm))})"' if confirm else ""
    fields = "".join(f'<input type="hidden" name="{esc(k)}" value="{esc(v)}">' for k, v in (hidden or {}).items())
    return f'<form method="post" action="{esc(action)}" class="inline"{onsubmit}>{fields}<button class="{SMALL_BUTTON_CLASS} {css}">{esc(label)}</button></form>'


def card(content: str, title: str | None = None) -> str:
    heading = f'<h2 class="text-lg font-bold mb-4">{esc(title)}</h2>' if title else ""
    return f'<section class="bg-white rounded-2xl shadow-sm border border-slate-100 p-6">{heading}{content}</section>'


def field(label: str, name: str, value: Any = "", type_: str = "text", placeholder: str = "") -> str:
    return (
        f'<label class="block"><span class="text-sm font-semibold text-slate-700">{esc(label)}</span>'
        f'<input type="{type_}" name="{esc(name)}" value="{esc(value)}" placeholder="{esc(placeholder)}" class="{INPUT_CLASS} mt-1"></label>'
    )


def textarea(label: str, name: str, value: Any = "", rows: int = 4) -> str:
    return (
        f'<label class="block"><span class="text-sm font-semibold text-slate-700">{esc(label)}</span>'
        f'<textarea name="{esc(name)}" rows="{rows}" class="{INPUT_CLASS} mt-1 font-mono text-xs">{esc(value)}</textarea></label>'
    )


def checkbox(label: str, name: str, flag: Any) -> str:
    return f'<label class="flex items-center gap-2 text-sm"><input type="checkbox" name="{esc(name)}" value="1"{checked(flag)}> {esc(label)}</label>'


async def form_data(request: Request) -> FormData:
    """Form bodies for the sync handlers."""
    return await request.form()
