from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse
from starlette.datastructures import FormData

from luvrix_admin import ui
from luvrix_admin.config import settings
from luvrix_admin.errors import ApiError, ValidationError
from luvrix_admin.logging_setup import log_event
from luvrix_admin.security.guard import AdminContext, require_admin
from luvrix_admin.services.platform_client import fetch_parallel
from luvrix_admin.services.settings_sections import AnalyticsSettings
from luvrix_admin.services.stats import content_stats, dashboard_stats, format_currency, recent
from luvrix_admin.services.validation import validate_ga_id

router = APIRouter(prefix="/admin", tags=["admin-overview"])

RANGES = {"1d": "Today", "7d": "Last 7 Days", "30d": "Last 30 Days"}
DEFAULT_RANGE = "7d"

COUNTRIES = [
    ("IN", "India"),
    ("US", "United States"),
    ("GB", "United Kingdom"),
    ("AU", "Australia"),
    ("CA", "Canada"),
    ("DE", "Germany"),
    ("FR", "France"),
    ("JP", "Japan"),
    ("BR", "Brazil"),
    ("ID", "Indonesia"),
]
CATEGORIES = [
    "Technology", "Entertainment", "Sports", "Business", "Health",
    "Science", "Politics", "Lifestyle", "Gaming", "General",
]
TONES = [
    "informative and engaging",
    "conversational and friendly",
    "professional and authoritative",
    "fun and entertaining",
    "educational and detailed",
]

SITEMAPS = [
    ("/sitemap.xml", "Sitemap index"),
    ("/sitemap-pages.xml", "Static pages"),
    ("/sitemap-manga.xml", "Manga"),
    ("/sitemap-chapters.xml", "Manga chapters"),
    ("/sitemap-posts.xml", "Blog posts"),
    ("/sitemap-categories.xml", "Categories"),
]

ANALYTICS_FORM_HTML = """
<form method="post" action="/admin/analytics" class="space-y-4 max-w-xl">
  {enabled}
  {ga_id}
  <p class="text-xs text-slate-400">Format: G-XXXXXXXXXX</p>
  <button class="{button_class}">Save Analytics Settings</button>
</form>
"""

TRENDING_FORM_HTML = """
<form method="get" action="/admin/trending" class="flex flex-wrap items-end gap-3">
  <label class="block"><span class="text-sm font-semibold text-slate-700">Country</span>
    <select name="country" class="{input_class} mt-1">{countries}</select></label>
  <button class="{button_class}">Refresh</button>
</form>
"""

GENERATE_FORM_HTML = """
<form method="post" action="/admin/trending/generate" class="flex items-center gap-2">
  <input type="hidden" name="topic" value="{topic}">
  <input type="hidden" name="country" value="{country}">
  <select name="category" class="text-xs border border-slate-200 rounded-lg px-2 py-1">{categories}</select>
  <select name="tone" class="text-xs border border-slate-200 rounded-lg px-2 py-1">{tones}</select>
  <button class="text-xs px-3 py-1.5 rounded-lg font-medium bg-pink-600 text-white">Generate Draft</button>
</form>
"""


@router.get("", include_in_schema=False)
def admin_root():
    return ui.redirect("/admin/dashboard")


@router.get("/dashboard", response_class=HTMLResponse)
def dashboard(msg: str | None = None, error: str | None = None, ctx: AdminContext = Depends(require_admin)):
    client = ctx.client
    try:
        blogs, users, manga, payments = fetch_parallel(
            lambda: client.get_all_blogs(include_all=True),
            client.get_all_users,
            client.get_all_manga,
            client.get_all_payments,
        )
    except ApiError as e:
        log_event("dashboard_load_failed", level="error", error=e.message, status_code=e.status_code)
        return ui.page(ctx, "Dashboard", "", error=e.message)

    try:
        donations = client.get_donation_stats()
    except ApiError as e:
        log_event("donation_stats_failed", level="warning", error=e.message)
        donations = None

    stats = dashboard_stats(blogs or [], users or [], manga or [], payments or [])
    cards = "".join([
        ui.stat_card("Total Blogs", stats["blogs"]["total"], "/admin/blogs", note=f'{stats["blogs"]["approved"]} approved'),
        ui.stat_card("Pending Approval", stats["blogs"]["pending"], "/admin/blogs?status=pending"),
        ui.stat_card("Users", stats["users"]["total"], "/admin/users"),
        ui.stat_card("Manga", stats["manga"]["total"], "/admin/manga"),
        ui.stat_card("Revenue", format_currency(stats["payments"]["revenue"]), "/admin/payments", note=f'{stats["payments"]["total"]} payments'),
    ])
    if donations:
        cards += ui.stat_card(
            "Donations",
            format_currency(donations.get("grandTotal", 0)),
            "/admin/donations",
            note=f'{donations.get("grandCount", 0)} supporters',
        )

    rows = [
        f'<tr><td class="px-4 py-3 font-medium"><a href="/admin/preview-blog?id={ui.esc(b.get("id"))}" class="hover:text-pink-600">{ui.esc(b.get("title"))}</a></td>'
        f'<td class="px-4 py-3">{ui.esc(b.get("category"))}</td>'
        f'<td class="px-4 py-3">{ui.status_badge(b.get("status"))}</td>'
        f'<td class="px-4 py-3 text-slate-500">{ui.fmt_date(b.get("createdAt"))}</td></tr>'
        for b in recent(blogs or [])
    ]
    content = (
        f'<div class="grid grid-cols-2 lg:grid-cols-3 gap-4">{cards}</div>'
        + ui.card(ui.table(["Title", "Category", "Status", "Created"], rows, empty="No blogs yet"), "Recent Blogs")
    )
    return ui.page(ctx, "Dashboard", content, msg=msg, error=error)


def _pageviews_html(data: dict | None, range_: str) -> str:
    if data is None:
        return '<p class="text-sm text-slate-400">Pageview data is unavailable right now.</p>'
    tabs = "".join(
        f'<a href="/admin/analytics?range={key}" class="px-3 py-1.5 rounded-lg text-xs font-semibold '
        f'{"bg-pink-600 text-white" if key == range_ else "bg-slate-100 text-slate-600"}">{label}</a>'
        for key, label in RANGES.items()
    )
    totals = (
        '<div class="grid grid-cols-2 gap-4 my-4">'
        + ui.stat_card("Total Views", f'{int(data.get("totalViews") or 0):,}')
        + ui.stat_card("Unique Visitors", f'{int(data.get("uniqueVisitors") or 0):,}')
        + "</div>"
    )
    daily = data.get("dailyViews") or []
    if daily:
        peak = max([d.get("views") or 0 for d in daily] + [1])
        bars = "".join(
            f'<div class="flex-1 flex flex-col items-center justify-end gap-1" title="{ui.esc(d.get("views"))} views / {ui.esc(d.get("uniqueVisitors"))} unique">'
            f'<div class="w-full bg-blue-500 rounded-t-md" style="height: {max((d.get("views") or 0) / peak * 100, 2):.0f}%"></div>'
            f'<span class="text-[10px] text-slate-400">{ui.esc(d.get("date"))}</span></div>'
            for d in daily
        )
        chart = f'<div class="flex items-end gap-1 h-48">{bars}</div>'
    else:
        chart = '<p class="text-center py-8 text-slate-400">No pageview data yet. Views will appear as visitors browse the site.</p>'
    top_rows = [
        f'<tr><td class="px-4 py-2">{i}</td><td class="px-4 py-2">{ui.esc(p.get("path"))}</td><td class="px-4 py-2 text-right">{int(p.get("views") or 0):,}</td></tr>'
        for i, p in enumerate(data.get("topPages") or [], start=1)
    ]
    top = ui.table(["#", "Page", "Views"], top_rows, empty="No pages viewed in this range") if top_rows else ""
    return f'<div class="flex gap-2">{tabs}</div>{totals}{chart}<h3 class="font-bold mt-6 mb-2">Most Viewed Pages ({RANGES[range_]})</h3>{top}'


def _top_list(items: list[dict], link: str) -> str:
    rows = [
        f'<tr><td class="px-4 py-2"><a href="{link}{ui.esc(i.get("slug") or i.get("id"))}" class="hover:text-pink-600">{ui.esc(i.get("title"))}</a></td>'
        f'<td class="px-4 py-2 text-right">{int(i.get("views") or 0):,}</td></tr>'
        for i in items
    ]
    return ui.table(["Title", "Views"], rows, empty="No views yet")


@router.get("/analytics", response_class=HTMLResponse)
def analytics(range_: str = Query(DEFAULT_RANGE, alias="range"), msg: str | None = None, error: str | None = None, ctx: AdminContext = Depends(require_admin)):
    range_ = range_ if range_ in RANGES else DEFAULT_RANGE
    client = ctx.client
    try:
        blogs, manga, blob = fetch_parallel(client.get_all_blogs, client.get_all_manga, client.get_settings)
    except ApiError as e:
        log_event("analytics_load_failed", level="error", error=e.message)
        return ui.page(ctx, "Analytics", "", error=e.message)

    try:
        pageviews = client.get_pageviews(range_)
    except ApiError as e:
        log_event("pageviews_load_failed", level="warning", error=e.message, range=range_)
        pageviews = None

    stats = content_stats(blogs or [], manga or [])
    section = AnalyticsSettings.from_blob(blob)
    cards = "".join([
        ui.stat_card("Total Views", f'{int(stats["total_views"]):,}'),
        ui.stat_card("Blog Views", f'{int(stats["blog_views"]):,}', note=f'{stats["total_blogs"]} blogs'),
        ui.stat_card("Manga Views", f'{int(stats["manga_views"]):,}', note=f'{stats["total_manga"]} manga'),
        ui.stat_card("Favorites", f'{int(stats["total_favorites"]):,}'),
    ])
    form = ANALYTICS_FORM_HTML.format(
        enabled=ui.checkbox("Enable Google Analytics", "analyticsEnabled", section.analytics_enabled),
        ga_id=ui.field("GA4 Measurement ID", "analyticsId", section.analytics_id, placeholder="G-XXXXXXXXXX"),
        button_class=ui.BUTTON_CLASS,
    )
    content = (
        f'<div class="grid grid-cols-2 lg:grid-cols-4 gap-4">{cards}</div>'
        + ui.card(_pageviews_html(pageviews, range_), "Site Traffic")
        + '<div class="grid lg:grid-cols-2 gap-6">'
        + ui.card(_top_list(stats["top_blogs"], "/blog/"), "Top Blogs")
        + ui.card(_top_list(stats["top_manga"], "/manga/"), "Top Manga")
        + "</div>"
        + ui.card(form, "Google Analytics")
    )
    return ui.page(ctx, "Analytics", content, msg=msg, error=error)


@router.post("/analytics")
def save_analytics(form: FormData = Depends(ui.form_data), ctx: AdminContext = Depends(require_admin)):
    try:
        ga_id = validate_ga_id(form.get("analyticsId"))
        AnalyticsSettings(analytics_enabled=bool(form.get("analyticsEnabled")), analytics_id=ga_id).save(ctx.client, ctx.user.id)
    except (ValidationError, ApiError) as e:
        return ui.redirect("/admin/analytics", error=e.message)
    return ui.redirect("/admin/analytics", msg="Analytics settings saved!")


@router.get("/trending", response_class=HTMLResponse)
def trending(country: str = "IN", msg: str | None = None, error: str | None = None, ctx: AdminContext = Depends(require_admin)):
    if country not in dict(COUNTRIES):
        country = "IN"
    try:
        topics = ctx.client.get_trending_topics(country) or []
    except ApiError as e:
        log_event("trending_load_failed", level="warning", error=e.message, country=country)
        topics = []
        error = error or e.message

    def generate_form(topic: str) -> str:
        return GENERATE_FORM_HTML.format(
            topic=ui.esc(topic),
            country=ui.esc(country),
            categories=ui.options([(c, c) for c in CATEGORIES], "Technology"),
            tones=ui.options([(t, t.capitalize()) for t in TONES], TONES[0]),
        )

    rows = [
        f'<tr><td class="px-4 py-3"><div class="font-semibold">{ui.esc(t.get("title"))}</div>'
        f'<div class="text-xs text-slate-400">{ui.esc(t.get("traffic") or "")} searches</div>'
        f'<div class="text-xs text-slate-400">{ui.esc(", ".join(t.get("relatedQueries") or []))}</div></td>'
        f'<td class="px-4 py-3">{generate_form(t.get("title") or "")}</td></tr>'
        for t in topics
    ]
    selector = TRENDING_FORM_HTML.format(
        input_class=ui.INPUT_CLASS,
        button_class=ui.BUTTON_CLASS,
        countries=ui.options(COUNTRIES, country),
    )
    manual = (
        '<form method="post" action="/admin/trending/generate" class="space-y-3">'
        f'<input type="hidden" name="country" value="{ui.esc(country)}">'
        + ui.field("Topic", "topic", placeholder="Write about anything")
        + f'<div class="flex gap-2"><select name="category" class="{ui.INPUT_CLASS}">{ui.options([(c, c) for c in CATEGORIES], "Technology")}</select>'
        f'<select name="tone" class="{ui.INPUT_CLASS}">{ui.options([(t, t.capitalize()) for t in TONES], TONES[0])}</select></div>'
        f'<button class="{ui.BUTTON_CLASS}">Generate Draft</button></form>'
    )
    content = (
        ui.card(selector)
        + ui.card(manual, "Custom Topic")
        + ui.card(ui.table(["Topic", ""], rows, empty="No trending topics found"), "Trending Now")
    )
    return ui.page(ctx, "Trending Topics", content, msg=msg, error=error)


@router.post("/trending/generate")
def generate_draft(form: FormData = Depends(ui.form_data), ctx: AdminContext = Depends(require_admin)):
    topic = (form.get("topic") or "").strip()
    country = form.get("country") or "IN"
    if not topic:
        return ui.redirect("/admin/trending", error="Please enter a topic", country=country)
    category = form.get("category") if form.get("category") in CATEGORIES else "Technology"
    tone = form.get("tone") if form.get("tone") in TONES else TONES[0]
    try:
        result = ctx.client.generate_blog_draft(topic, ctx.user.id, category, tone)
    except ApiError as e:
        log_event("draft_generation_failed", level="error", error=e.message, status_code=e.status_code)
        return ui.redirect("/admin/trending", error=f"Failed to generate draft: {e.message}", country=country)

    log_event("draft_generated", draft_id=result.get("draftId"), category=category)
    return ui.redirect("/admin/drafts", highlight=result.get("draftId"), msg="Draft generated")


@router.get("/sitemap", response_class=HTMLResponse)
def sitemap(msg: str | None = None, error: str | None = None, ctx: AdminContext = Depends(require_admin)):
    base = settings.public_site_url.rstrip("/")
    rows = [
        f'<tr><td class="px-4 py-3 font-medium">{ui.esc(label)}</td>'
        f'<td class="px-4 py-3"><a href="{ui.esc(base + path)}" target="_blank" class="text-pink-600 hover:underline">{ui.esc(base + path)}</a></td></tr>'
        for path, label in SITEMAPS
    ]
    ping = ui.post_button("/admin/sitemap/ping", "Ping Google", css="bg-pink-600 text-white")
    content = ui.card(ui.table(["Sitemap", "URL"], rows)) + ui.card(
        f'<p class="text-sm text-slate-500 mb-4">Tell Google the sitemap changed.</p>{ping}', "Search Engines"
    )
    return ui.page(ctx, "Sitemap", content, msg=msg, error=error)


@router.post("/sitemap/ping")
def ping_sitemap(ctx: AdminContext = Depends(require_admin)):
    try:
        data = ctx.client.ping_sitemap()
    except ApiError as e:
        return ui.redirect("/admin/sitemap", error=e.message)
    if not data.get("success"):
        return ui.redirect("/admin/sitemap", error=data.get("error") or "Ping failed")
    return ui.redirect("/admin/sitemap", msg="Google has been notified of the sitemap update")
