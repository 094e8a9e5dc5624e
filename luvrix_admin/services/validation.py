"""
Form validation for the admin console.

Every check raises ValidationError carrying the exact text the admin sees.
Validators that build a write payload return the pydantic model for it.
"""
import re
import time
from datetime import datetime, timezone
from typing import Any

from luvrix_admin.errors import ValidationError
from luvrix_admin.schemas import DraftIn, GiveawayIn, GiveawayTaskIn, MangaIn, Sponsor
from luvrix_admin.services.text import slugify

PASSWORD_SPECIALS = re.compile(r"[!@#$%^&*]")
GA4_PATTERN = re.compile(r"^G-[A-Z0-9]{10}$")
GA4_ERROR = "Invalid format. GA4 ID should be like G-XXXXXXXXXX (10 alphanumeric characters after G-)"

TASK_TYPES = [
    {"value": "facebook_like", "label": "Like Facebook Page", "default_title": "Like our Facebook Page", "needs_url": True},
    {"value": "facebook_follow", "label": "Follow on Facebook", "default_title": "Follow us on Facebook", "needs_url": True},
    {"value": "instagram_follow", "label": "Follow on Instagram", "default_title": "Follow us on Instagram", "needs_url": True},
    {"value": "youtube_like", "label": "Like YouTube Video", "default_title": "Like our YouTube Video", "needs_url": True},
    {"value": "youtube_subscribe", "label": "Subscribe on YouTube", "default_title": "Subscribe to our YouTube Channel", "needs_url": True},
    {"value": "twitter_follow", "label": "Follow on X / Twitter", "default_title": "Follow us on X", "needs_url": True},
    {"value": "twitter_like", "label": "Like a Tweet / Post", "default_title": "Like our post on X", "needs_url": True},
    {"value": "visit_website", "label": "Visit a Website", "default_title": "Visit our Website", "needs_url": True},
    {"value": "join_telegram", "label": "Join Telegram Group", "default_title": "Join our Telegram Group", "needs_url": True},
    {"value": "join_discord", "label": "Join Discord Server", "default_title": "Join our Discord Server", "needs_url": True},
    {"value": "share_post", "label": "Share a Post", "default_title": "Share this giveaway", "needs_url": False},
    {"value": "invite", "label": "Invite Friends", "default_title": "Invite friends to join", "needs_url": False},
    {"value": "quiz", "label": "Answer a Quiz", "default_title": "Answer the quiz correctly", "needs_url": False},
    {"value": "custom", "label": "Custom Task", "default_title": "", "needs_url": False},
]
TASK_TYPES_BY_VALUE = {t["value"]: t for t in TASK_TYPES}

AD_POSITIONS = [
    ("header_top", "Header Top"),
    ("header_below", "Below Header"),
    ("sidebar_left", "Left Sidebar"),
    ("sidebar_right", "Right Sidebar"),
    ("content_top", "Content Top"),
    ("blog_top", "Blog Top"),
    ("content_middle", "In-Content"),
    ("content_bottom", "Content Bottom"),
    ("blog_bottom", "Blog Bottom"),
    ("footer_above", "Above Footer"),
    ("footer_inside", "Footer Inside"),
    ("popup", "Popup/Modal"),
    ("sticky_bottom", "Sticky Bottom"),
    ("between_posts", "Between Posts"),
]

AD_TYPES = [
    ("banner", "Banner Ad"),
    ("native", "Native Ad"),
    ("video", "Video Ad"),
    ("interstitial", "Interstitial"),
    ("sticky", "Sticky/Anchor"),
    ("custom", "Custom HTML"),
]

GIVEAWAY_MODES = ("random", "task_gated")
GIVEAWAY_STATUSES = ("draft", "upcoming", "active", "ended")
WINNER_SELECTION_MODES = ("SYSTEM_RANDOM", "ADMIN_RANDOM")
# -1 means unlimited extensions
MAX_EXTENSION_PRESETS = (0, 3, 7, 14, 30, -1)


def parse_int(value: Any, default: int = 0) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def validate_password(password: str | None):
    password = password or ""
    if len(password) < 8:
        raise ValidationError("Password must be at least 8 characters")
    if not re.search(r"[A-Z]", password):
        raise ValidationError("Password must contain an uppercase letter")
    if not re.search(r"[a-z]", password):
        raise ValidationError("Password must contain a lowercase letter")
    if not re.search(r"[0-9]", password):
        raise ValidationError("Password must contain a number")
    if not PASSWORD_SPECIALS.search(password):
        raise ValidationError("Password must contain a special character (!@#$%^&*)")


def validate_password_change(current: str, new: str, confirm: str):
    if new != confirm:
        raise ValidationError("New passwords do not match")
    validate_password(new)
    if not current:
        raise ValidationError("Current password is required")


def validate_setup(email: str | None, password: str | None) -> str:
    email = (email or "").strip()
    if not email or not password:
        raise ValidationError("Email and password are required")
    validate_password(password)
    return email


def validate_ga_id(ga_id: str | None) -> str:
    """Returns the upper-cased id; an empty id is allowed."""
    value = (ga_id or "").strip().upper()
    if value and not GA4_PATTERN.match(value):
        raise ValidationError(GA4_ERROR)
    return value


def validate_points(raw: Any) -> int:
    points = parse_int(raw, default=-1)
    if points < 0:
        raise ValidationError("Please enter a valid number of points (0 or higher)")
    return points


def validate_blog(title: str | None, content: str | None):
    if not (title or "").strip() or not (content or "").strip():
        raise ValidationError("Please fill in title and content")


def validate_draft(form: dict[str, Any]) -> DraftIn:
    title = (form.get("title") or "").strip()
    if not title:
        raise ValidationError("Title is required")
    keywords = form.get("keywords") or []
    if isinstance(keywords, str):
        keywords = [k.strip() for k in keywords.split(",") if k.strip()]
    return DraftIn(
        title=title,
        slug=form.get("slug") or slugify(title)[:100],
        content=form.get("content") or "",
        excerpt=form.get("excerpt") or "",
        category=form.get("category") or "General",
        thumbnail=form.get("thumbnail") or "",
        seoTitle=form.get("seoTitle") or "",
        seoDescription=form.get("seoDescription") or "",
        keywords=list(dict.fromkeys(keywords)),
    )


def validate_manga(form: dict[str, Any]) -> MangaIn:
    title = (form.get("title") or "").strip()
    if not title:
        raise ValidationError("Title is required")
    data = {k: v for k, v in form.items() if v is not None}
    data["title"] = title
    data["slug"] = (form.get("slug") or "").strip() or slugify(title)
    data["totalChapters"] = parse_int(form.get("totalChapters"), 0)
    data["chapterPadding"] = parse_int(form.get("chapterPadding"), 0)
    return MangaIn.model_validate(data)


def validate_ad_placement(form: dict[str, Any], now_ms: int | None = None) -> dict[str, Any]:
    position = form.get("position") or ""
    code = (form.get("code") or "").strip()
    if not position or not code or position not in dict(AD_POSITIONS):
        raise ValidationError("Please select a position and enter ad code")
    ad_type = form.get("type") or "banner"
    if ad_type not in dict(AD_TYPES):
        ad_type = "custom"
    ms = now_ms if now_ms is not None else int(time.time() * 1000)
    pages = form.get("pages") or ["all"]
    if isinstance(pages, str):
        pages = [pages]
    return {
        "id": str(ms),
        "position": position,
        "type": ad_type,
        "code": code,
        "enabled": bool(form.get("enabled", True)),
        "name": form.get("name") or "",
        "size": form.get("size") or "",
        "devices": form.get("devices") or "all",
        "pages": pages,
        "createdAt": datetime.fromtimestamp(ms / 1000, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
    }


def menu_id(name: str | None) -> str | None:
    if not name or not name.strip():
        return None
    return re.sub(r"\s+", "-", name.lower())


def _parse_dt(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _max_extensions(preset: Any, custom: Any) -> int:
    value = parse_int(preset, 0)
    if custom not in (None, ""):
        value = parse_int(custom, value)
    if value == -1:
        return -1
    return max(0, value)


def validate_giveaway(form: dict[str, Any]) -> GiveawayIn:
    title = (form.get("title") or "").strip()
    if not title:
        raise ValidationError("Title is required")
    image_url = (form.get("imageUrl") or "").strip()
    if not image_url:
        raise ValidationError("Image URL is required")

    start_raw, end_raw = form.get("startDate"), form.get("endDate")
    start, end = _parse_dt(start_raw), _parse_dt(end_raw)
    if not start or not end:
        raise ValidationError("Start and end dates are required")
    if end <= start:
        raise ValidationError("End date must be after start date")

    mode = form.get("mode") if form.get("mode") in GIVEAWAY_MODES else "random"
    status = form.get("status") if form.get("status") in GIVEAWAY_STATUSES else "draft"
    winner_mode = form.get("winnerSelectionMode")
    if winner_mode not in WINNER_SELECTION_MODES:
        winner_mode = "SYSTEM_RANDOM"

    sponsors = [
        Sponsor(
            bannerUrl=s.get("bannerUrl", "").strip(),
            redirectUrl=(s.get("redirectUrl") or "").strip(),
            name=(s.get("name") or "").strip(),
        )
        for s in form.get("sponsors") or []
        if (s.get("bannerUrl") or "").strip()
    ]

    return GiveawayIn(
        title=title,
        description=form.get("description") or "",
        imageUrl=image_url,
        prizeDetails=form.get("prizeDetails") or "",
        mode=mode,
        requiredPoints=max(0, parse_int(form.get("requiredPoints"), 0)),
        targetParticipants=max(1, parse_int(form.get("targetParticipants"), 100)),
        startDate=start.isoformat(),
        endDate=end.isoformat(),
        maxExtensions=_max_extensions(form.get("maxExtensions"), form.get("maxExtensionsCustom")),
        status=status,
        invitePointsEnabled=bool(form.get("invitePointsEnabled")),
        invitePointsCap=max(0, parse_int(form.get("invitePointsCap"), 10)),
        invitePointsPerReferral=max(0, parse_int(form.get("invitePointsPerReferral"), 1)),
        winnerSelectionMode=winner_mode,
        supportEnabled=bool(form.get("supportEnabled")),
        sponsors=sponsors,
    )


def validate_task(form: dict[str, Any]) -> GiveawayTaskIn:
    task_type = form.get("type") or "custom"
    task_type_info = TASK_TYPES_BY_VALUE.get(task_type)
    if task_type_info is None:
        raise ValidationError("Unknown task type")

    title = (form.get("title") or "").strip() or task_type_info["default_title"]
    if not title:
        raise ValidationError("Task title is required")

    points = parse_int(form.get("points"), 1)
    if points < 0:
        raise ValidationError("Points must be 0 or higher")

    metadata: dict[str, Any] = {}
    url = (form.get("url") or "").strip()
    if url:
        metadata["url"] = url
    timer = parse_int(form.get("timerDuration"), 0)
    if timer > 0:
        metadata["timerDuration"] = timer

    return GiveawayTaskIn(
        type=task_type,
        title=title,
        description=form.get("description") or "",
        points=points,
        required=bool(form.get("required")),
        metadata=metadata,
    )
