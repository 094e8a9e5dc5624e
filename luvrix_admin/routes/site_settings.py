from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from starlette.datastructures import FormData

from luvrix_admin import ui
from luvrix_admin.errors import ApiError, ValidationError
from luvrix_admin.logging_setup import log_event
from luvrix_admin.security.guard import AdminContext, require_admin
from luvrix_admin.services.settings_sections import (
    CACHE_ACTIONS,
    AdsSettings,
    CookieSettings,
    GeneralSettings,
    MenuSettings,
    PayUSettings,
    SeoSettings,
    SettingsSection,
    ThemeSettings,
)
from luvrix_admin.services.text import mask_secret, split_tags
from luvrix_admin.services.validation import AD_POSITIONS, AD_TYPES, parse_int, validate_ad_placement

router = APIRouter(prefix="/admin", tags=["admin-settings"])

CACHE_LABELS = {"all": "Clear All", "next": "Page Cache", "api": "API Cache", "sessions": "Sessions"}
AD_DEVICES = [("all", "All devices"), ("desktop", "Desktop only"), ("mobile", "Mobile only")]
AD_PAGES = [("all", "All pages"), ("home", "Home"), ("blog", "Blog posts"), ("manga", "Manga"), ("categories", "Categories")]
MANGA_VISIBILITY = [("web", "Web"), ("mobileWeb", "Mobile Web"), ("android", "Android"), ("ios", "iOS")]
LAYOUT_VIEW_TYPES = [("grid", "Grid View"), ("list", "List View"), ("table", "Table View")]
LAYOUT_COLUMNS = [(c, str(c)) for c in (3, 4, 5, 6)]
LAYOUT_CARD_SIZES = [("small", "Small"), ("medium", "Medium"), ("large", "Large")]

SAVE_BUTTON_HTML = '<button class="{button_class}">{label}</button>'


def _label(name: str) -> str:
    return name.replace("_", " ").capitalize()


def _load(ctx: AdminContext, cls: type[SettingsSection]) -> SettingsSection:
    return cls.from_blob(ctx.client.get_settings())


def _save(ctx: AdminContext, section: SettingsSection, back: str, ok: str, failed: str = "Failed to save settings"):
    try:
        section.save(ctx.client, ctx.user.id)
    except ApiError as e:
        log_event("settings_save_failed", level="error", section=type(section).__name__, error=e.message)
        return ui.redirect(back, error=f"{failed}: {e.message}")
    return ui.redirect(back, msg=ok)


def _updated(section: SettingsSection, **changes: Any) -> SettingsSection:
    return type(section).model_validate({**section.model_dump(), **changes})


def _secret(form: FormData, key: str, current: str) -> str:
    # blank secret inputs keep the stored value
    value = (form.get(key) or "").strip()
    return value or current


def _save_button(label: str = "Save Settings") -> str:
    return SAVE_BUTTON_HTML.format(button_class=ui.BUTTON_CLASS, label=label)


# --- general ---

@router.get("/settings", response_class=HTMLResponse)
def settings_page(msg: str | None = None, error: str | None = None, ctx: AdminContext = Depends(require_admin)):
    try:
        section = _load(ctx, GeneralSettings)
        cookies = CookieSettings.from_blob(ctx.client.get_cookie_settings())
    except ApiError as e:
        log_event("settings_load_failed", level="error", error=e.message)
        return ui.page(ctx, "Settings", "", error=e.message)

    visibility = "".join(ui.checkbox(label, f"visibility_{key}", section.manga_visibility.get(key, True)) for key, label in MANGA_VISIBILITY)
    layout = section.manga_layout
    templates = "".join(ui.field(_label(key), f"seo_{key}", value) for key, value in section.manga_seo_defaults.items())
    general = (
        '<form method="post" action="/admin/settings" class="space-y-6">'
        '<div class="grid md:grid-cols-2 gap-4">'
        + ui.field("Blog post price (INR)", "blogPostPrice", section.blog_post_price, type_="number")
        + '<div class="flex items-end">' + ui.checkbox("Auto-approve posts that meet the scores", "autoApproval", section.auto_approval) + "</div>"
        + ui.field("Minimum SEO score for auto-approval", "minSeoScoreForAutoApproval", section.min_seo_score_for_auto_approval, type_="number")
        + ui.field("Minimum content score for auto-approval", "minContentScoreForAutoApproval", section.min_content_score_for_auto_approval, type_="number")
        + "</div>"
        + f'<div><h3 class="font-semibold text-sm mb-2">Manga visibility</h3><div class="flex gap-6">{visibility}</div></div>'
        + '<div><h3 class="font-semibold text-sm mb-2">Public manga layout</h3><div class="grid grid-cols-3 gap-4">'
        + f'<select name="layout_viewType" class="{ui.INPUT_CLASS}">{ui.options(LAYOUT_VIEW_TYPES, layout.get("viewType"))}</select>'
        + f'<select name="layout_columns" class="{ui.INPUT_CLASS}">{ui.options(LAYOUT_COLUMNS, layout.get("columns"))}</select>'
        + f'<select name="layout_cardSize" class="{ui.INPUT_CLASS}">{ui.options(LAYOUT_CARD_SIZES, layout.get("cardSize"))}</select>'
        + "</div></div>"
        + f'<div class="space-y-3"><h3 class="font-semibold text-sm">Manga SEO templates</h3>{templates}</div>'
        + ui.field("OpenAI API key", "openaiApiKey", "", type_="password", placeholder=mask_secret(section.openai_api_key) or "sk-...")
        + _save_button()
        + "</form>"
    )
    cookie_form = (
        '<form method="post" action="/admin/settings/cookies" class="space-y-4">'
        + ui.checkbox("Show cookie consent banner", "enabled", cookies.enabled)
        + ui.textarea("Banner message", "message", cookies.message, rows=2)
        + _save_button("Save Cookie Settings")
        + "</form>"
    )
    cache_buttons = "".join(
        ui.post_button("/admin/settings/cache", CACHE_LABELS[action], css="bg-red-50 text-red-600", hidden={"action": action})
        for action in CACHE_ACTIONS
    )
    content = (
        ui.card(general, "General")
        + ui.card(cookie_form, "Cookie Consent")
        + ui.card(f'<p class="text-sm text-slate-500 mb-4">Clear various caches to free up space or fix issues.</p><div class="flex gap-2">{cache_buttons}</div>', "Cache Management")
    )
    return ui.page(ctx, "Settings", content, msg=msg, error=error)


@router.post("/settings")
def save_settings(form: FormData = Depends(ui.form_data), ctx: AdminContext = Depends(require_admin)):
    try:
        section = _load(ctx, GeneralSettings)
    except ApiError as e:
        return ui.redirect("/admin/settings", error=e.message)

    section = _updated(
        section,
        blog_post_price=max(0, parse_int(form.get("blogPostPrice"), section.blog_post_price)),
        auto_approval=bool(form.get("autoApproval")),
        min_seo_score_for_auto_approval=parse_int(form.get("minSeoScoreForAutoApproval"), section.min_seo_score_for_auto_approval),
        min_content_score_for_auto_approval=parse_int(form.get("minContentScoreForAutoApproval"), section.min_content_score_for_auto_approval),
        manga_visibility={key: bool(form.get(f"visibility_{key}")) for key, _ in MANGA_VISIBILITY},
        manga_layout={
            **section.manga_layout,
            "viewType": form.get("layout_viewType") or section.manga_layout.get("viewType"),
            "columns": parse_int(form.get("layout_columns"), section.manga_layout.get("columns", 5)),
            "cardSize": form.get("layout_cardSize") or section.manga_layout.get("cardSize"),
        },
        manga_seo_defaults={
            key: form.get(f"seo_{key}") if form.get(f"seo_{key}") is not None else value
            for key, value in section.manga_seo_defaults.items()
        },
        openai_api_key=_secret(form, "openaiApiKey", section.openai_api_key),
    )
    return _save(ctx, section, "/admin/settings", "Settings saved successfully!")


@router.post("/settings/cookies")
def save_cookie_settings(form: FormData = Depends(ui.form_data), ctx: AdminContext = Depends(require_admin)):
    cookies = CookieSettings(enabled=bool(form.get("enabled")), message=(form.get("message") or "").strip() or CookieSettings().message)
    try:
        ctx.client.update_cookie_settings(cookies.model_dump())
    except ApiError as e:
        return ui.redirect("/admin/settings", error=e.message)
    return ui.redirect("/admin/settings", msg="Cookie settings saved")


@router.post("/settings/cache")
def clear_cache(form: FormData = Depends(ui.form_data), ctx: AdminContext = Depends(require_admin)):
    action = form.get("action")
    if action not in CACHE_ACTIONS:
        return ui.redirect("/admin/settings", error="Unknown cache action")
    try:
        data = ctx.client.clear_cache(action)
    except ApiError as e:
        log_event("cache_clear_failed", level="error", action=action, error=e.message)
        return ui.redirect("/admin/settings", error="Failed to clear cache")
    results = data.get("results") or []
    return ui.redirect("/admin/settings", msg=", ".join(results) or "Cache cleared")


# --- ads ---

def _placement_rows(placements: list[dict]) -> list[str]:
    positions, types = dict(AD_POSITIONS), dict(AD_TYPES)
    rows = []
    for p in placements:
        pid = str(p.get("id"))
        rows.append(
            f'<tr><td class="px-4 py-3"><div class="font-medium">{ui.esc(p.get("name") or positions.get(p.get("position"), p.get("position")))}</div>'
            f'<div class="text-xs text-slate-400">{ui.esc(positions.get(p.get("position"), p.get("position")))}</div></td>'
            f'<td class="px-4 py-3">{ui.esc(types.get(p.get("type"), p.get("type")))}</td>'
            f'<td class="px-4 py-3">{ui.esc(p.get("devices") or "all")}</td>'
            f'<td class="px-4 py-3">{"Enabled" if p.get("enabled") else "Disabled"}</td>'
            f'<td class="px-4 py-3 space-x-1 whitespace-nowrap">'
            + ui.post_button(f"/admin/ads/placements/{pid}/toggle", "Disable" if p.get("enabled") else "Enable")
            + ui.post_button(f"/admin/ads/placements/{pid}/delete", "Delete", css="bg-red-50 text-red-600", confirm="Delete this ad placement?")
            + "</td></tr>"
        )
    return rows


@router.get("/ads", response_class=HTMLResponse)
def ads_page(msg: str | None = None, error: str | None = None, ctx: AdminContext = Depends(require_admin)):
    try:
        section = _load(ctx, AdsSettings)
    except ApiError as e:
        log_event("settings_load_failed", level="error", error=e.message)
        return ui.page(ctx, "Ads", "", error=e.message)

    settings_form = (
        '<form method="post" action="/admin/ads" class="space-y-4">'
        + ui.checkbox("Enable ads", "adsEnabled", section.ads_enabled)
        + ui.checkbox("Enable AdSense auto ads", "enableAutoAds", section.enable_auto_ads)
        + ui.field("AdSense publisher ID", "adsensePublisherId", section.adsense_publisher_id, placeholder="ca-pub-XXXXXXXXXXXXXXXX")
        + ui.field("AdSense meta tag", "adsenseMeta", section.adsense_meta)
        + ui.textarea("Global ad code (head)", "adsCode", section.ads_code)
        + ui.field("Routes excluded from auto ads", "autoAdsExcludedRoutes", section.auto_ads_excluded_routes)
        + ui.field("Blog ad interval (paragraphs)", "blogAdInterval", section.blog_ad_interval, type_="number")
        + ui.textarea("ads.txt", "adsTxt", section.ads_txt)
        + _save_button()
        + "</form>"
    )
    add_form = (
        '<form method="post" action="/admin/ads/placements" class="grid md:grid-cols-2 gap-4">'
        + f'<select name="position" class="{ui.INPUT_CLASS}"><option value="">Select position</option>{ui.options(AD_POSITIONS, "")}</select>'
        + f'<select name="type" class="{ui.INPUT_CLASS}">{ui.options(AD_TYPES, "banner")}</select>'
        + ui.field("Name", "name")
        + ui.field("Size", "size", placeholder="728x90")
        + f'<select name="devices" class="{ui.INPUT_CLASS}">{ui.options(AD_DEVICES, "all")}</select>'
        + f'<select name="pages" multiple class="{ui.INPUT_CLASS}">{ui.options(AD_PAGES, "all")}</select>'
        + f'<div class="md:col-span-2">{ui.textarea("Ad code", "code")}</div>'
        + ui.checkbox("Enabled", "enabled", True)
        + f'<div>{_save_button("Add Placement")}</div>'
        + "</form>"
    )
    content = (
        ui.card(settings_form, "Ad Settings")
        + ui.card(ui.table(["Placement", "Type", "Devices", "State", ""], _placement_rows(section.ad_placements), empty="No ad placements yet"), "Placements")
        + ui.card(add_form, "Add Placement")
    )
    return ui.page(ctx, "Ads", content, msg=msg, error=error)


@router.post("/ads")
def save_ads(form: FormData = Depends(ui.form_data), ctx: AdminContext = Depends(require_admin)):
    try:
        section = _load(ctx, AdsSettings)
    except ApiError as e:
        return ui.redirect("/admin/ads", error=e.message)
    section = _updated(
        section,
        ads_enabled=bool(form.get("adsEnabled")),
        enable_auto_ads=bool(form.get("enableAutoAds")),
        adsense_publisher_id=(form.get("adsensePublisherId") or "").strip(),
        adsense_meta=form.get("adsenseMeta") or "",
        ads_code=form.get("adsCode") or "",
        auto_ads_excluded_routes=form.get("autoAdsExcludedRoutes") or "",
        blog_ad_interval=max(1, parse_int(form.get("blogAdInterval"), section.blog_ad_interval)),
        ads_txt=form.get("adsTxt") or "",
    )
    return _save(ctx, section, "/admin/ads", "Ads settings saved!")


@router.post("/ads/placements")
def add_placement(form: FormData = Depends(ui.form_data), ctx: AdminContext = Depends(require_admin)):
    values = dict(form)
    values["pages"] = form.getlist("pages")
    values["enabled"] = bool(form.get("enabled"))
    try:
        placement = validate_ad_placement(values)
        section = _load(ctx, AdsSettings)
    except (ValidationError, ApiError) as e:
        return ui.redirect("/admin/ads", error=e.message)
    section.add_placement(placement)
    return _save(ctx, section, "/admin/ads", "Ad placement added")


@router.post("/ads/placements/{placement_id}/toggle")
def toggle_placement(placement_id: str, ctx: AdminContext = Depends(require_admin)):
    try:
        section = _load(ctx, AdsSettings)
    except ApiError as e:
        return ui.redirect("/admin/ads", error=e.message)
    section.toggle_placement(placement_id)
    return _save(ctx, section, "/admin/ads", "Ad placement updated")


@router.post("/ads/placements/{placement_id}/delete")
def delete_placement(placement_id: str, ctx: AdminContext = Depends(require_admin)):
    try:
        section = _load(ctx, AdsSettings)
    except ApiError as e:
        return ui.redirect("/admin/ads", error=e.message)
    section.remove_placement(placement_id)
    return _save(ctx, section, "/admin/ads", "Ad placement deleted")


# --- payu ---

@router.get("/payu", response_class=HTMLResponse)
def payu_page(msg: str | None = None, error: str | None = None, ctx: AdminContext = Depends(require_admin)):
    try:
        section = _load(ctx, PayUSettings)
    except ApiError as e:
        log_event("settings_load_failed", level="error", error=e.message)
        return ui.page(ctx, "PayU Config", "", error=e.message)

    mode = "Test mode" if section.payu_test_mode else "Live mode"
    form = (
        '<form method="post" action="/admin/payu" class="space-y-4 max-w-xl">'
        + f'<p class="text-sm font-semibold {"text-amber-600" if section.payu_test_mode else "text-green-600"}">{mode}</p>'
        + ui.field("Merchant ID", "payuMerchantId", section.payu_merchant_id)
        + ui.field("Merchant key", "payuMerchantKey", "", type_="password", placeholder=mask_secret(section.payu_merchant_key) or "Not set")
        + ui.field("Merchant salt", "payuMerchantSalt", "", type_="password", placeholder=mask_secret(section.payu_merchant_salt) or "Not set")
        + '<p class="text-xs text-slate-400">Leave key and salt blank to keep the saved values.</p>'
        + ui.checkbox("Test mode (sandbox payments)", "payuTestMode", section.payu_test_mode)
        + _save_button()
        + "</form>"
    )
    return ui.page(ctx, "PayU Config", ui.card(form), msg=msg, error=error)


@router.post("/payu")
def save_payu(form: FormData = Depends(ui.form_data), ctx: AdminContext = Depends(require_admin)):
    try:
        section = _load(ctx, PayUSettings)
    except ApiError as e:
        return ui.redirect("/admin/payu", error=e.message)
    section = _updated(
        section,
        payu_merchant_id=(form.get("payuMerchantId") or "").strip(),
        payu_merchant_key=_secret(form, "payuMerchantKey", section.payu_merchant_key),
        payu_merchant_salt=_secret(form, "payuMerchantSalt", section.payu_merchant_salt),
        payu_test_mode=bool(form.get("payuTestMode")),
    )
    return _save(ctx, section, "/admin/payu", "PayU settings saved!")


# --- theme ---

def _theme_input(name: str, value: Any) -> str:
    alias = ThemeSettings.model_fields[name].alias or name
    if name == "header_menu":
        return ui.field("Header menu", alias, ", ".join(value), placeholder="comma separated")
    if isinstance(value, str) and value.startswith("#") and len(value) in (4, 7):
        return ui.field(_label(name), alias, value, type_="color")
    return ui.field(_label(name), alias, value)


@router.get("/theme", response_class=HTMLResponse)
def theme_page(msg: str | None = None, error: str | None = None, ctx: AdminContext = Depends(require_admin)):
    try:
        section = _load(ctx, ThemeSettings)
    except ApiError as e:
        log_event("settings_load_failed", level="error", error=e.message)
        return ui.page(ctx, "Theme", "", error=e.message)

    fields = "".join(_theme_input(name, getattr(section, name)) for name in ThemeSettings.model_fields)
    form = f'<form method="post" action="/admin/theme" class="space-y-4"><div class="grid md:grid-cols-2 gap-4">{fields}</div>{_save_button()}</form>'
    return ui.page(ctx, "Theme", ui.card(form), msg=msg, error=error)


@router.post("/theme")
def save_theme(form: FormData = Depends(ui.form_data), ctx: AdminContext = Depends(require_admin)):
    try:
        section = _load(ctx, ThemeSettings)
    except ApiError as e:
        return ui.redirect("/admin/theme", error=e.message)
    changes = {}
    for name, field in ThemeSettings.model_fields.items():
        raw = form.get(field.alias or name)
        if raw is None:
            continue
        changes[name] = split_tags(raw) if name == "header_menu" else raw
    return _save(ctx, _updated(section, **changes), "/admin/theme", "Theme settings saved!")


# --- seo files ---

@router.get("/seo-settings", response_class=HTMLResponse)
def seo_settings_page(msg: str | None = None, error: str | None = None, ctx: AdminContext = Depends(require_admin)):
    try:
        section = _load(ctx, SeoSettings)
    except ApiError as e:
        log_event("settings_load_failed", level="error", error=e.message)
        return ui.page(ctx, "SEO Files", "", error=e.message)

    templates = "".join(ui.field(key, f"seo_{key}", value) for key, value in section.global_seo.items())
    form = (
        '<form method="post" action="/admin/seo-settings" class="space-y-6">'
        + ui.textarea("robots.txt", "robotsTxt", section.robots_txt, rows=14)
        + ui.textarea("ads.txt", "adsTxt", section.ads_txt, rows=4)
        + f'<div class="space-y-3"><h3 class="font-semibold text-sm">Global SEO templates</h3>{templates}</div>'
        + _save_button()
        + "</form>"
    )
    return ui.page(ctx, "SEO Files", ui.card(form), msg=msg, error=error)


@router.post("/seo-settings")
def save_seo_settings(form: FormData = Depends(ui.form_data), ctx: AdminContext = Depends(require_admin)):
    try:
        section = _load(ctx, SeoSettings)
    except ApiError as e:
        return ui.redirect("/admin/seo-settings", error=e.message)
    section = _updated(
        section,
        robots_txt=form.get("robotsTxt") if form.get("robotsTxt") is not None else section.robots_txt,
        ads_txt=form.get("adsTxt") if form.get("adsTxt") is not None else section.ads_txt,
        global_seo={
            key: form.get(f"seo_{key}") if form.get(f"seo_{key}") is not None else value
            for key, value in section.global_seo.items()
        },
    )
    return _save(ctx, section, "/admin/seo-settings", "SEO settings saved!")


# --- menus ---

def _menu_block(index: int, menu: dict, count: int) -> str:
    mid = ui.esc(menu.get("id"))

    def op_button(op: str, label: str, css: str = "bg-slate-100 text-slate-700", confirm: str | None = None, **extra) -> str:
        return ui.post_button("/admin/menus", label, css=css, confirm=confirm, hidden={"op": op, "menu": menu.get("id"), "index": index, **extra})

    subs = "".join(
        '<li class="flex items-center gap-2">'
        '<form method="post" action="/admin/menus" class="flex gap-2 flex-1">'
        f'<input type="hidden" name="op" value="update_submenu"><input type="hidden" name="menu" value="{mid}">'
        f'<input type="hidden" name="submenu" value="{ui.esc(s.get("id"))}">'
        f'<input type="text" name="name" value="{ui.esc(s.get("name"))}" class="{ui.INPUT_CLASS}">'
        f'<input type="text" name="href" value="{ui.esc(s.get("href"))}" class="{ui.INPUT_CLASS}">'
        f'<button class="{ui.SMALL_BUTTON_CLASS} bg-slate-100">Save</button></form>'
        + op_button("delete_submenu", "Remove", css="bg-red-50 text-red-600", submenu=s.get("id"))
        + "</li>"
        for s in menu.get("submenus") or []
    )
    moves = ""
    if index > 0:
        moves += op_button("move", "Up", direction="up")
    if index < count - 1:
        moves += op_button("move", "Down", direction="down")
    return (
        '<section class="bg-white rounded-2xl shadow-sm border border-slate-100 p-6 space-y-4">'
        '<div class="flex items-center gap-2">'
        '<form method="post" action="/admin/menus" class="flex gap-2 flex-1">'
        f'<input type="hidden" name="op" value="rename"><input type="hidden" name="menu" value="{mid}">'
        f'<input type="text" name="name" value="{ui.esc(menu.get("name"))}" class="{ui.INPUT_CLASS} font-semibold">'
        f'<button class="{ui.SMALL_BUTTON_CLASS} bg-slate-100">Rename</button></form>'
        + moves
        + op_button("delete_menu", "Delete", css="bg-red-600 text-white", confirm="Delete this menu and its submenus?")
        + "</div>"
        + f'<ul class="space-y-2">{subs}</ul>'
        + '<form method="post" action="/admin/menus" class="flex gap-2">'
        f'<input type="hidden" name="op" value="add_submenu"><input type="hidden" name="menu" value="{mid}">'
        f'<input type="text" name="name" placeholder="New submenu" class="{ui.INPUT_CLASS}">'
        f'<button class="{ui.SMALL_BUTTON_CLASS} bg-pink-600 text-white">Add</button></form>'
        "</section>"
    )


@router.get("/menus", response_class=HTMLResponse)
def menus_page(msg: str | None = None, error: str | None = None, ctx: AdminContext = Depends(require_admin)):
    try:
        section = _load(ctx, MenuSettings)
    except ApiError as e:
        log_event("settings_load_failed", level="error", error=e.message)
        return ui.page(ctx, "Menus", "", error=e.message)

    menus = section.navigation_menus
    add_form = (
        '<form method="post" action="/admin/menus" class="flex gap-2">'
        '<input type="hidden" name="op" value="add_menu">'
        f'<input type="text" name="name" placeholder="New menu name" class="{ui.INPUT_CLASS} max-w-sm">'
        f'<button class="{ui.BUTTON_CLASS}">Add Menu</button></form>'
    )
    content = ui.card(add_form) + "".join(_menu_block(i, m, len(menus)) for i, m in enumerate(menus))
    return ui.page(ctx, "Menus", content, msg=msg, error=error)


@router.post("/menus")
def update_menus(form: FormData = Depends(ui.form_data), ctx: AdminContext = Depends(require_admin)):
    try:
        section = _load(ctx, MenuSettings)
    except ApiError as e:
        return ui.redirect("/admin/menus", error=e.message)

    op = form.get("op")
    menu = form.get("menu") or ""
    name = (form.get("name") or "").strip()
    if op == "add_menu":
        if not section.add_menu(name):
            return ui.redirect("/admin/menus")
    elif op == "rename":
        section.rename_menu(menu, name)
    elif op == "delete_menu":
        section.delete_menu(menu)
    elif op == "move":
        section.move_menu(parse_int(form.get("index"), -1), form.get("direction") or "")
    elif op == "add_submenu":
        if not section.add_submenu(menu, name):
            return ui.redirect("/admin/menus")
    elif op == "delete_submenu":
        section.delete_submenu(menu, form.get("submenu") or "")
    elif op == "update_submenu":
        section.update_submenu(menu, form.get("submenu") or "", "name", name)
        section.update_submenu(menu, form.get("submenu") or "", "href", (form.get("href") or "").strip())
    else:
        return ui.redirect("/admin/menus", error="Unknown menu action")
    return _save(ctx, section, "/admin/menus", "Menus saved successfully!", failed="Failed to save menus")
