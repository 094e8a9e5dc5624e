from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from starlette.datastructures import FormData

from luvrix_admin import ui
from luvrix_admin.errors import ApiError, ValidationError
from luvrix_admin.logging_setup import log_event
from luvrix_admin.security.guard import AdminContext, require_admin
from luvrix_admin.services.audit import record_admin_action
from luvrix_admin.services.filters import filter_donations
from luvrix_admin.services.platform_client import PlatformClient, fetch_parallel
from luvrix_admin.services.stats import donation_total, format_currency
from luvrix_admin.services.validation import (
    GIVEAWAY_MODES,
    GIVEAWAY_STATUSES,
    MAX_EXTENSION_PRESETS,
    TASK_TYPES,
    WINNER_SELECTION_MODES,
    validate_giveaway,
    validate_task,
)

router = APIRouter(prefix="/admin", tags=["admin-giveaways"])

LOCKED_STATUS = "winner_selected"
LOCKED_MESSAGE = "This giveaway is locked because a winner has been selected"
TABS = [("tasks", "Tasks"), ("participants", "Participants"), ("winner", "Winner"), ("shipping", "Shipping"), ("donations", "Donations")]
PARTICIPANT_STATUSES = [("all", "All"), ("eligible", "Eligible"), ("pending", "Pending"), ("winner", "Winner"), ("disqualified", "Disqualified")]
SPONSOR_SLOTS = 3

GIVEAWAY_FORM_HTML = """
<form method="post" action="{action}" class="grid md:grid-cols-2 gap-4">
  <div class="md:col-span-2">{title}</div>
  <div class="md:col-span-2">{description}</div>
  {image_url}
  {prize_details}
  <label class="block"><span class="text-sm font-semibold text-slate-700">Mode</span>
    <select name="mode" class="{input_class} mt-1">{modes}</select></label>
  <label class="block"><span class="text-sm font-semibold text-slate-700">Status</span>
    <select name="status" class="{input_class} mt-1">{statuses}</select></label>
  {required_points}
  {target_participants}
  {start_date}
  {end_date}
  <label class="block"><span class="text-sm font-semibold text-slate-700">Max extensions</span>
    <select name="maxExtensions" class="{input_class} mt-1">{extensions}</select></label>
  {extensions_custom}
  <label class="block"><span class="text-sm font-semibold text-slate-700">Winner selection</span>
    <select name="winnerSelectionMode" class="{input_class} mt-1">{winner_modes}</select></label>
  <div class="flex flex-col gap-2 justify-end">{support_enabled}{invite_enabled}</div>
  {invite_cap}
  {invite_per_referral}
  <div class="md:col-span-2 space-y-3">
    <h3 class="font-semibold text-sm">Sponsors</h3>
    {sponsors}
  </div>
  <div class="md:col-span-2 flex gap-3">
    <button class="{button_class}">{submit}</button>
    <a href="/admin/giveaways" class="px-5 py-2.5 bg-slate-100 rounded-xl font-semibold">Cancel</a>
  </div>
</form>
"""

SPONSOR_ROW_HTML = """
<div class="grid md:grid-cols-3 gap-2">
  <input type="text" name="sponsorBannerUrl" value="{banner}" placeholder="Banner URL" class="{input_class}">
  <input type="text" name="sponsorRedirectUrl" value="{redirect}" placeholder="Link" class="{input_class}">
  <input type="text" name="sponsorName" value="{name}" placeholder="Name" class="{input_class}">
</div>
"""

TASK_FORM_HTML = """
<form method="post" action="/admin/giveaways/{giveaway_id}/tasks" class="grid md:grid-cols-2 gap-3 mt-4">
  <label class="block"><span class="text-sm font-semibold text-slate-700">Type</span>
    <select name="type" class="{input_class} mt-1">{types}</select></label>
  {title}
  {url}
  {points}
  {timer}
  <div class="flex items-end">{required}</div>
  <div class="md:col-span-2">{description}</div>
  <div><button class="{button_class}">Add Task</button></div>
</form>
"""

WINNER_PICK_HTML = """
<div class="p-4 rounded-xl bg-amber-50 border border-amber-200 text-sm text-amber-800 mb-6">
  <strong>Important:</strong> Winners can only be selected from <strong>eligible</strong> participants.
  This action is permanent and will be logged in the audit trail.
</div>
<h3 class="text-sm font-semibold mb-2">Automatic Random Selection</h3>
<p class="text-xs text-slate-500 mb-3">System picks a random winner from all eligible participants</p>
{random_button}
<h3 class="text-sm font-semibold mt-6 mb-2">Manual Selection (Admin)</h3>
{eligible}
"""


def _is_locked(giveaway: dict) -> bool:
    return giveaway.get("status") == LOCKED_STATUS


def _datetime_local(value) -> str:
    dt = ui.parse_timestamp(value)
    return dt.strftime("%Y-%m-%dT%H:%M") if dt else ""


def _form_values(form: FormData) -> dict:
    values = {k: v for k, v in form.items() if not k.startswith("sponsor")}
    for flag in ("supportEnabled", "invitePointsEnabled"):
        values[flag] = bool(form.get(flag))
    values["sponsors"] = [
        {"bannerUrl": banner, "redirectUrl": redirect, "name": name}
        for banner, redirect, name in zip(
            form.getlist("sponsorBannerUrl"), form.getlist("sponsorRedirectUrl"), form.getlist("sponsorName")
        )
    ]
    return values


def _giveaway_form(g: dict, giveaway_id: str | None = None) -> str:
    extensions = g.get("maxExtensions", 0)
    preset = extensions if extensions in MAX_EXTENSION_PRESETS else 0
    custom = "" if extensions in MAX_EXTENSION_PRESETS else extensions
    sponsors = list(g.get("sponsors") or [])
    sponsors += [{}] * max(0, SPONSOR_SLOTS - len(sponsors))
    return GIVEAWAY_FORM_HTML.format(
        action=f"/admin/giveaways/{ui.esc(giveaway_id)}" if giveaway_id else "/admin/giveaways",
        title=ui.field("Title", "title", g.get("title", "")),
        description=ui.textarea("Description", "description", g.get("description", "")),
        image_url=ui.field("Image URL", "imageUrl", g.get("imageUrl", "")),
        prize_details=ui.field("Prize details", "prizeDetails", g.get("prizeDetails", "")),
        modes=ui.options([(m, m.replace("_", " ").title()) for m in GIVEAWAY_MODES], g.get("mode") or "random"),
        statuses=ui.options([(s, s.title()) for s in GIVEAWAY_STATUSES], g.get("status") or "draft"),
        required_points=ui.field("Required points", "requiredPoints", g.get("requiredPoints", 0), type_="number"),
        target_participants=ui.field("Target participants", "targetParticipants", g.get("targetParticipants", 100), type_="number"),
        start_date=ui.field("Start date", "startDate", _datetime_local(g.get("startDate")), type_="datetime-local"),
        end_date=ui.field("End date", "endDate", _datetime_local(g.get("endDate")), type_="datetime-local"),
        extensions=ui.options([(p, "Unlimited" if p == -1 else str(p)) for p in MAX_EXTENSION_PRESETS], preset),
        extensions_custom=ui.field("Custom max extensions", "maxExtensionsCustom", custom, type_="number"),
        winner_modes=ui.options([(m, m.replace("_", " ").title()) for m in WINNER_SELECTION_MODES], g.get("winnerSelectionMode") or "SYSTEM_RANDOM"),
        support_enabled=ui.checkbox("Accept donations", "supportEnabled", g.get("supportEnabled", True)),
        invite_enabled=ui.checkbox("Invite points", "invitePointsEnabled", g.get("invitePointsEnabled", False)),
        invite_cap=ui.field("Invite points cap", "invitePointsCap", g.get("invitePointsCap", 10), type_="number"),
        invite_per_referral=ui.field("Points per referral", "invitePointsPerReferral", g.get("invitePointsPerReferral", 1), type_="number"),
        sponsors="".join(
            SPONSOR_ROW_HTML.format(
                banner=ui.esc(s.get("bannerUrl", "")),
                redirect=ui.esc(s.get("redirectUrl", "")),
                name=ui.esc(s.get("name", "")),
                input_class=ui.INPUT_CLASS,
            )
            for s in sponsors
        ),
        submit="Update Giveaway" if giveaway_id else "Create Giveaway",
        input_class=ui.INPUT_CLASS,
        button_class=ui.BUTTON_CLASS,
    )


def _load(client: PlatformClient, giveaway_id: str) -> dict:
    giveaway = client.get_giveaway(giveaway_id)
    if not giveaway:
        raise ApiError("Giveaway not found", 404)
    return giveaway


# --- list / create / edit ---

@router.get("/giveaways", response_class=HTMLResponse)
def giveaways_page(status: str = "all", msg: str | None = None, error: str | None = None, ctx: AdminContext = Depends(require_admin)):
    try:
        giveaways = ctx.client.list_giveaways(None if status == "all" else status) or []
    except ApiError as e:
        log_event("giveaways_load_failed", level="error", error=e.message)
        return ui.page(ctx, "Giveaways", "", error=e.message)

    rows = []
    for g in giveaways:
        gid = str(g.get("id"))
        actions = f'<a href="/admin/giveaways/{ui.esc(gid)}" class="{ui.SMALL_BUTTON_CLASS} bg-slate-100">Manage</a>'
        if not _is_locked(g):
            actions += f'<a href="/admin/giveaways/{ui.esc(gid)}/edit" class="{ui.SMALL_BUTTON_CLASS} bg-blue-50 text-blue-700">Edit</a>'
        if g.get("status") == "draft":
            actions += ui.post_button(f"/admin/giveaways/{gid}/delete", "Delete", css="bg-red-50 text-red-600", confirm="Delete this giveaway?")
        rows.append(
            f'<tr><td class="px-4 py-3 font-medium">{ui.esc(g.get("title"))}</td>'
            f'<td class="px-4 py-3">{ui.status_badge(g.get("status"))}</td>'
            f'<td class="px-4 py-3">{ui.esc(g.get("mode"))}</td>'
            f'<td class="px-4 py-3">{ui.esc(g.get("participantCount") or 0)} / {ui.esc(g.get("targetParticipants") or 0)}</td>'
            f'<td class="px-4 py-3 text-slate-500">{ui.fmt_date(g.get("startDate"))} to {ui.fmt_date(g.get("endDate"))}</td>'
            f'<td class="px-4 py-3 space-x-1 whitespace-nowrap">{actions}</td></tr>'
        )

    statuses = [("all", "All")] + [(s, s.title()) for s in GIVEAWAY_STATUSES] + [(LOCKED_STATUS, "Winner Selected")]
    header = (
        '<form method="get" action="/admin/giveaways" class="flex gap-3 items-center">'
        f'<select name="status" class="{ui.INPUT_CLASS} max-w-[12rem]" onchange="this.form.submit()">{ui.options(statuses, status)}</select>'
        f'<a href="/admin/giveaways/new" class="{ui.BUTTON_CLASS} ml-auto">New Giveaway</a></form>'
    )
    content = ui.card(header) + ui.table(["Title", "Status", "Mode", "Participants", "Runs", ""], rows, empty="No giveaways yet")
    return ui.page(ctx, "Giveaways", content, msg=msg, error=error)


@router.get("/giveaways/new", response_class=HTMLResponse)
def new_giveaway_page(msg: str | None = None, error: str | None = None, ctx: AdminContext = Depends(require_admin)):
    return ui.page(ctx, "New Giveaway", ui.card(_giveaway_form({})), msg=msg, error=error)


@router.post("/giveaways")
def create_giveaway(form: FormData = Depends(ui.form_data), ctx: AdminContext = Depends(require_admin)):
    values = _form_values(form)
    try:
        giveaway = validate_giveaway(values)
        created = ctx.client.create_giveaway(giveaway.to_wire())
    except (ValidationError, ApiError) as e:
        return ui.page(ctx, "New Giveaway", ui.card(_giveaway_form(values)), error=e.message, status_code=400)

    record_admin_action(ctx.client, ctx.user.id, "Created Giveaway", (created or {}).get("id") or "new", giveaway.title)
    return ui.redirect("/admin/giveaways", msg="Giveaway created")


@router.get("/giveaways/{giveaway_id}/edit", response_class=HTMLResponse)
def edit_giveaway_page(giveaway_id: str, msg: str | None = None, error: str | None = None, ctx: AdminContext = Depends(require_admin)):
    try:
        giveaway = _load(ctx.client, giveaway_id)
    except ApiError as e:
        return ui.redirect("/admin/giveaways", error=e.message)
    if _is_locked(giveaway):
        return ui.redirect(f"/admin/giveaways/{giveaway_id}", error=LOCKED_MESSAGE)
    return ui.page(ctx, "Edit Giveaway", ui.card(_giveaway_form(giveaway, giveaway_id)), msg=msg, error=error)


@router.post("/giveaways/{giveaway_id}")
def update_giveaway(giveaway_id: str, form: FormData = Depends(ui.form_data), ctx: AdminContext = Depends(require_admin)):
    try:
        current = _load(ctx.client, giveaway_id)
    except ApiError as e:
        return ui.redirect("/admin/giveaways", error=e.message)
    if _is_locked(current):
        return ui.redirect(f"/admin/giveaways/{giveaway_id}", error=LOCKED_MESSAGE)

    values = _form_values(form)
    try:
        giveaway = validate_giveaway(values)
        ctx.client.update_giveaway(giveaway_id, giveaway.to_wire())
    except (ValidationError, ApiError) as e:
        return ui.page(ctx, "Edit Giveaway", ui.card(_giveaway_form(values, giveaway_id)), error=e.message, status_code=400)

    record_admin_action(ctx.client, ctx.user.id, "Updated Giveaway", giveaway_id, giveaway.title)
    return ui.redirect(f"/admin/giveaways/{giveaway_id}", msg="Giveaway updated")


@router.post("/giveaways/{giveaway_id}/delete")
def delete_giveaway(giveaway_id: str, ctx: AdminContext = Depends(require_admin)):
    try:
        giveaway = _load(ctx.client, giveaway_id)
        if giveaway.get("status") != "draft":
            return ui.redirect("/admin/giveaways", error="Only draft giveaways can be deleted")
        ctx.client.delete_giveaway(giveaway_id)
    except ApiError as e:
        return ui.redirect("/admin/giveaways", error=e.message or "Failed to delete")
    log_event("giveaway_deleted", giveaway_id=giveaway_id)
    return ui.redirect("/admin/giveaways", msg="Giveaway deleted")


# --- detail tabs ---

def _tasks_tab(ctx: AdminContext, giveaway_id: str, locked: bool) -> str:
    tasks = ctx.client.get_giveaway_tasks(giveaway_id) or []
    rows = []
    for t in tasks:
        remove = "" if locked else ui.post_button(
            f"/admin/giveaways/{giveaway_id}/tasks/{t.get('id')}/delete", "Remove", css="bg-red-50 text-red-600", confirm="Remove this task?"
        )
        url = (t.get("metadata") or {}).get("url")
        rows.append(
            f'<tr><td class="px-4 py-3"><div class="font-medium">{ui.esc(t.get("title"))}</div>'
            f'<div class="text-xs text-slate-400">{ui.esc(t.get("description") or "")}</div>'
            + (f'<a href="{ui.esc(url)}" target="_blank" class="text-xs text-pink-600">{ui.esc(url)}</a>' if url else "")
            + f'</td><td class="px-4 py-3">{ui.esc(t.get("type"))}</td>'
            f'<td class="px-4 py-3">{ui.esc(t.get("points"))}</td>'
            f'<td class="px-4 py-3">{"Required" if t.get("required") else "Optional"}</td>'
            f'<td class="px-4 py-3">{remove}</td></tr>'
        )
    out = ui.table(["Task", "Type", "Points", "", ""], rows, empty="No tasks yet")
    if not locked:
        out += TASK_FORM_HTML.format(
            giveaway_id=ui.esc(giveaway_id),
            types=ui.options([(t["value"], t["label"]) for t in TASK_TYPES], "custom"),
            title=ui.field("Title", "title", placeholder="Defaults to the task type"),
            url=ui.field("URL", "url", placeholder="https://"),
            points=ui.field("Points", "points", 1, type_="number"),
            timer=ui.field("Timer (seconds)", "timerDuration", 0, type_="number"),
            required=ui.checkbox("Required", "required", False),
            description=ui.textarea("Description", "description", rows=2),
            input_class=ui.INPUT_CLASS,
            button_class=ui.BUTTON_CLASS,
        )
    return out


def _participants_tab(ctx: AdminContext, giveaway_id: str, status: str, search: str) -> str:
    data = ctx.client.get_giveaway_participants(giveaway_id, status=status, search=search or None) or {}
    participants = data.get("participants") or []
    rows = [
        f'<tr><td class="px-4 py-3"><div class="font-medium">{ui.esc((p.get("user") or {}).get("name") or p.get("userId"))}</div>'
        f'<div class="text-xs text-slate-400">{ui.esc((p.get("user") or {}).get("email") or "")}</div></td>'
        f'<td class="px-4 py-3">{ui.esc(p.get("points") or 0)}</td>'
        f'<td class="px-4 py-3">{ui.status_badge(p.get("status"))}</td>'
        f'<td class="px-4 py-3 text-slate-500">{ui.fmt_date(p.get("joinedAt") or p.get("createdAt"))}</td></tr>'
        for p in participants
    ]
    filters = (
        f'<form method="get" action="/admin/giveaways/{ui.esc(giveaway_id)}" class="flex gap-2 mb-4">'
        '<input type="hidden" name="tab" value="participants">'
        f'<select name="status" class="{ui.INPUT_CLASS} max-w-[10rem]">{ui.options(PARTICIPANT_STATUSES, status)}</select>'
        f'<input type="text" name="search" value="{ui.esc(search)}" placeholder="Search name or email" class="{ui.INPUT_CLASS} max-w-xs">'
        f'<button class="{ui.BUTTON_CLASS}">Filter</button></form>'
    )
    return filters + f'<p class="text-sm text-slate-500 mb-2">{ui.esc(data.get("total") or 0)} participants</p>' + ui.table(
        ["Participant", "Points", "Status", "Joined"], rows, empty="No participants yet"
    )


def _winner_tab(ctx: AdminContext, giveaway_id: str, giveaway: dict) -> str:
    if _is_locked(giveaway):
        try:
            info = ctx.client.get_giveaway_winner_info(giveaway_id) or {}
        except ApiError as e:
            log_event("winner_info_failed", level="warning", giveaway_id=giveaway_id, error=e.message)
            info = {}
        who = (
            f'<p class="text-lg font-bold">{ui.esc(info["name"])}</p>'
            + (f'<p class="text-sm text-slate-500">@{ui.esc(info["username"])}</p>' if info.get("username") else "")
            if info.get("name")
            else f'<p class="text-slate-500">Winner ID: <strong>{ui.esc(giveaway.get("winnerId"))}</strong></p>'
        )
        return f'<div class="text-center py-8 space-y-2"><h3 class="text-lg font-bold">Winner Selected!</h3>{who}<p class="text-xs text-purple-700">Selection logged in audit trail</p></div>'

    data = ctx.client.get_giveaway_participants(giveaway_id, status="eligible") or {}
    eligible = [p for p in data.get("participants") or [] if p.get("status") == "eligible"]
    action = f"/admin/giveaways/{giveaway_id}/winner"
    random_button = ui.post_button(
        action, "Pick Random Winner", css="bg-green-600 text-white",
        confirm="Select a random winner from all eligible participants?",
        hidden={"mode": "SYSTEM_RANDOM"},
    )
    rows = [
        f'<tr><td class="px-4 py-3">{ui.esc((p.get("user") or {}).get("name") or p.get("userId"))}'
        f'<div class="text-xs text-slate-400">{ui.esc((p.get("user") or {}).get("email") or "")} &middot; {ui.esc(p.get("points") or 0)} pts</div></td>'
        f'<td class="px-4 py-3">'
        + ui.post_button(
            action, "Select as Winner", css="bg-purple-600 text-white",
            confirm="Select this user as the winner? This action is permanent and will be logged.",
            hidden={"mode": "ADMIN_RANDOM", "winnerUserId": p.get("userId")},
        )
        + "</td></tr>"
        for p in eligible
    ]
    return WINNER_PICK_HTML.format(
        random_button=random_button,
        eligible=ui.table(["Participant", ""], rows, empty="No eligible participants yet"),
    )


def _shipping_tab(ctx: AdminContext, giveaway_id: str, giveaway: dict) -> str:
    if not _is_locked(giveaway):
        return '<p class="py-8 text-center text-slate-400">No winner selected yet</p>'
    shipping = (ctx.client.get_giveaway_shipping(giveaway_id) or {}).get("shipping")
    if not shipping:
        return '<p class="py-8 text-center text-slate-500">Winner has not submitted shipping details yet</p>'
    return (
        '<dl class="grid sm:grid-cols-2 gap-4 text-sm">'
        f'<div><dt class="text-xs uppercase text-slate-400">Full Name</dt><dd class="font-medium">{ui.esc(shipping.get("fullName"))}</dd></div>'
        f'<div><dt class="text-xs uppercase text-slate-400">Phone</dt><dd class="font-medium">{ui.esc(shipping.get("phone"))}</dd></div>'
        f'<div class="sm:col-span-2"><dt class="text-xs uppercase text-slate-400">Full Address</dt><dd>{ui.esc(shipping.get("address"))}<br>'
        f'{ui.esc(shipping.get("city"))}, {ui.esc(shipping.get("state"))} {ui.esc(shipping.get("pincode"))}, {ui.esc(shipping.get("country"))}</dd></div>'
        f'<div><dt class="text-xs uppercase text-slate-400">Submitted</dt><dd>{ui.fmt_date(shipping.get("createdAt"), with_time=True)}</dd></div>'
        "</dl>"
    )


def _donations_tab(ctx: AdminContext, giveaway_id: str) -> str:
    data = ctx.client.get_giveaway_support(giveaway_id) or {}
    supporters = data.get("supporters") or []
    rows = [
        f'<tr><td class="px-4 py-3">{ui.esc(s.get("donorName") or s.get("userName") or "Anonymous")}'
        + (' <span class="text-xs text-slate-400">(Anonymous publicly)</span>' if s.get("isAnonymous") else "")
        + f'<div class="text-xs text-slate-400">{ui.esc(s.get("donorEmail") or s.get("userEmail") or "No email")}</div></td>'
        f'<td class="px-4 py-3 font-semibold text-green-600">{format_currency(s.get("amount"))}</td>'
        f'<td class="px-4 py-3">{ui.esc(s.get("donationCount") or 1)}</td>'
        f'<td class="px-4 py-3 text-slate-500">{ui.fmt_date(s.get("createdAt"))}</td></tr>'
        for s in supporters
    ]
    summary = f'<p class="text-sm text-slate-500 mb-2">{len(supporters)} supporters &middot; {ui.esc(data.get("count") or 0)} donations &middot; {format_currency(data.get("total") or 0)}</p>'
    return summary + ui.table(["Supporter", "Amount", "Donations", "Date"], rows, empty="No donations yet")


@router.get("/giveaways/{giveaway_id}", response_class=HTMLResponse)
def giveaway_detail(
    giveaway_id: str,
    tab: str = "tasks",
    status: str = "all",
    search: str = "",
    msg: str | None = None,
    error: str | None = None,
    ctx: AdminContext = Depends(require_admin),
):
    if tab not in dict(TABS):
        tab = "tasks"
    try:
        giveaway = _load(ctx.client, giveaway_id)
    except ApiError as e:
        return ui.redirect("/admin/giveaways", error=e.message)

    locked = _is_locked(giveaway)
    try:
        if tab == "participants":
            body = _participants_tab(ctx, giveaway_id, status, search)
        elif tab == "winner":
            body = _winner_tab(ctx, giveaway_id, giveaway)
        elif tab == "shipping":
            body = _shipping_tab(ctx, giveaway_id, giveaway)
        elif tab == "donations":
            body = _donations_tab(ctx, giveaway_id)
        else:
            body = _tasks_tab(ctx, giveaway_id, locked)
    except ApiError as e:
        log_event("giveaway_tab_failed", level="warning", giveaway_id=giveaway_id, tab=tab, error=e.message)
        body = ""
        error = error or e.message

    tabs = "".join(
        f'<a href="/admin/giveaways/{ui.esc(giveaway_id)}?tab={key}" class="px-4 py-2 rounded-lg text-sm font-semibold '
        f'{"bg-pink-600 text-white" if key == tab else "bg-slate-100 text-slate-600"}">{label}</a>'
        for key, label in TABS
    )
    lock_note = ' <span class="text-xs text-amber-600">Locked: winner selected</span>' if locked else ""
    edit_link = "" if locked else f'<a href="/admin/giveaways/{ui.esc(giveaway_id)}/edit" class="{ui.SMALL_BUTTON_CLASS} bg-blue-50 text-blue-700">Edit</a>'
    image = f'<img src="{ui.esc(giveaway["imageUrl"])}" alt="" class="w-24 h-24 rounded-xl object-cover">' if giveaway.get("imageUrl") else ""
    header = (
        f'<div class="flex items-start gap-5">{image}<div class="flex-1">'
        f'<h2 class="text-xl font-bold">{ui.esc(giveaway.get("title"))}{lock_note}</h2>'
        f'<div class="text-sm text-slate-500">{ui.status_badge(giveaway.get("status"))} &middot; {ui.esc(giveaway.get("mode"))} &middot; '
        f'{ui.fmt_date(giveaway.get("startDate"))} to {ui.fmt_date(giveaway.get("endDate"))}</div>'
        f'<p class="text-sm mt-2">{ui.esc(giveaway.get("prizeDetails") or "")}</p></div>{edit_link}</div>'
    )
    content = ui.card(header) + f'<div class="flex gap-2">{tabs}</div>' + ui.card(body)
    return ui.page(ctx, "Giveaway", content, msg=msg, error=error)


@router.post("/giveaways/{giveaway_id}/tasks")
def add_task(giveaway_id: str, form: FormData = Depends(ui.form_data), ctx: AdminContext = Depends(require_admin)):
    back = f"/admin/giveaways/{giveaway_id}?tab=tasks"
    try:
        if _is_locked(_load(ctx.client, giveaway_id)):
            return ui.redirect(back, error=LOCKED_MESSAGE)
        task = validate_task(dict(form))
        ctx.client.add_giveaway_task(giveaway_id, task.to_wire())
    except (ValidationError, ApiError) as e:
        return ui.redirect(back, error=e.message)
    return ui.redirect(back, msg="Task added")


@router.post("/giveaways/{giveaway_id}/tasks/{task_id}/delete")
def remove_task(giveaway_id: str, task_id: str, ctx: AdminContext = Depends(require_admin)):
    back = f"/admin/giveaways/{giveaway_id}?tab=tasks"
    try:
        if _is_locked(_load(ctx.client, giveaway_id)):
            return ui.redirect(back, error=LOCKED_MESSAGE)
        ctx.client.remove_giveaway_task(giveaway_id, task_id)
    except ApiError as e:
        return ui.redirect(back, error=e.message)
    return ui.redirect(back, msg="Task removed")


@router.post("/giveaways/{giveaway_id}/winner")
def select_winner(giveaway_id: str, form: FormData = Depends(ui.form_data), ctx: AdminContext = Depends(require_admin)):
    back = f"/admin/giveaways/{giveaway_id}?tab=winner"
    winner_user_id = (form.get("winnerUserId") or "").strip() or None
    mode = "ADMIN_RANDOM" if winner_user_id else "SYSTEM_RANDOM"
    try:
        result = ctx.client.select_giveaway_winner(giveaway_id, mode, winner_user_id)
    except ApiError as e:
        return ui.redirect(back, error=e.message or "Failed to select winner")

    winner = (result or {}).get("winnerId") or winner_user_id
    record_admin_action(ctx.client, ctx.user.id, "Selected Giveaway Winner", giveaway_id, f"{mode}: {winner}" if winner else mode)
    return ui.redirect(back, msg="Winner selected")


# --- donations ---

@router.get("/donations", response_class=HTMLResponse)
def donations_page(q: str = "", msg: str | None = None, error: str | None = None, ctx: AdminContext = Depends(require_admin)):
    try:
        donors, stats = fetch_parallel(ctx.client.get_all_donors, ctx.client.get_donation_stats)
    except ApiError as e:
        log_event("donations_load_failed", level="error", error=e.message)
        return ui.page(ctx, "Donations", "", error=e.message)

    donors, stats = donors or {}, stats or {}
    donations = donors.get("donations") or []
    shown = filter_donations(donations, q)
    grand_total = stats.get("grandTotal") if stats.get("grandTotal") is not None else donation_total(donations)

    rows = [
        f'<tr><td class="px-4 py-3">{ui.esc(d.get("donorName") or "Anonymous")}<div class="text-xs text-slate-400">{ui.esc(d.get("donorEmail") or "")}</div></td>'
        f'<td class="px-4 py-3">{ui.esc(d.get("giveawayTitle") or "")}</td>'
        f'<td class="px-4 py-3 font-semibold text-green-600">{format_currency(d.get("amount"))}</td>'
        f'<td class="px-4 py-3 text-slate-500">{ui.fmt_date(d.get("createdAt"), with_time=True)}</td></tr>'
        for d in shown
    ]
    top = "".join(
        f'<li class="flex justify-between py-1"><span>{ui.esc(t.get("donorName") or t.get("name") or "Anonymous")}</span>'
        f'<span class="font-semibold">{format_currency(t.get("total") or t.get("amount"))}</span></li>'
        for t in donors.get("topDonors") or []
    )
    per_giveaway = "".join(
        f'<li class="flex justify-between py-1"><span>{ui.esc(g.get("title") or g.get("giveawayTitle") or g.get("giveawayId"))}</span>'
        f'<span class="font-semibold">{format_currency(g.get("total"))}</span></li>'
        for g in stats.get("perGiveaway") or []
    )
    search = (
        '<form method="get" action="/admin/donations" class="flex gap-2">'
        f'<input type="text" name="q" value="{ui.esc(q)}" placeholder="Search donor or giveaway" class="{ui.INPUT_CLASS} max-w-sm">'
        f'<button class="{ui.BUTTON_CLASS}">Search</button></form>'
    )
    content = (
        '<div class="grid grid-cols-2 gap-4">'
        + ui.stat_card("Total Raised", format_currency(grand_total))
        + ui.stat_card("Donations", stats.get("grandCount") or len(donations))
        + "</div>"
        + '<div class="grid lg:grid-cols-2 gap-6">'
        + ui.card(f'<ul class="text-sm divide-y divide-slate-100">{top or "<li>No donors yet</li>"}</ul>', "Top Donors")
        + ui.card(f'<ul class="text-sm divide-y divide-slate-100">{per_giveaway or "<li>No giveaways with donations</li>"}</ul>', "Per Giveaway")
        + "</div>"
        + ui.card(search)
        + ui.table(["Donor", "Giveaway", "Amount", "Date"], rows, empty="No donations found")
    )
    return ui.page(ctx, "Donations", content, msg=msg, error=error)
