"""
The platform keeps one mutable settings document. The console edits it in
sections: each section model knows its own keys and defaults, is filled from
the fetched blob, and writes back only its own keys.
"""
import copy
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from luvrix_admin.errors import ApiError
from luvrix_admin.logging_setup import log_event
from luvrix_admin.services.audit import record_admin_action
from luvrix_admin.services.validation import menu_id

DEFAULT_ADS_TXT = "google.com, pub-9162211780712502, DIRECT, f08c47fec0942fa0\n"
DEFAULT_EXCLUDED_ROUTES = "/admin,/login,/register,/error,/create-blog,/edit-blog,/preview-blog,/dashboard"

DEFAULT_ROBOTS_TXT = """# Robots.txt for Luvrix
# https://luvrix.com

User-agent: *
Allow: /
Allow: /blog
Allow: /manga
Allow: /categories
Allow: /about
Allow: /contact

# Disallow admin and private pages
Disallow: /admin
Disallow: /dashboard
Disallow: /api
Disallow: /_next
Disallow: /login
Disallow: /register

# Crawl delay for polite crawling
Crawl-delay: 1

# Sitemap
Sitemap: https://luvrix.com/sitemap.xml
"""

DEFAULT_COOKIE_MESSAGE = "We use cookies to enhance your browsing experience."
CACHE_ACTIONS = ("all", "next", "api", "sessions")


def _category(name: str) -> str:
    return f"/categories?category={name}"


DEFAULT_MENUS = [
    {
        "id": "news",
        "name": "News",
        "submenus": [
            {"id": "politics", "name": "Politics", "href": _category("Politics")},
            {"id": "business", "name": "Business", "href": _category("Business")},
            {"id": "sports", "name": "Sports", "href": _category("Sports")},
            {"id": "science", "name": "Science", "href": _category("Science")},
        ],
    },
    {
        "id": "blog",
        "name": "Blog",
        "submenus": [
            {"id": "food", "name": "Food", "href": _category("Food")},
            {"id": "travel", "name": "Travel", "href": _category("Travel")},
            {"id": "lifestyle", "name": "Lifestyle", "href": _category("Lifestyle")},
            {"id": "health", "name": "Health", "href": _category("Health")},
        ],
    },
    {
        "id": "entertainment",
        "name": "Entertainment",
        "submenus": [
            {"id": "anime", "name": "Anime", "href": _category("Anime")},
            {"id": "gaming", "name": "Gaming", "href": _category("Gaming")},
            {"id": "movies", "name": "Movies", "href": _category("Entertainment")},
            {"id": "music", "name": "Music", "href": _category("Entertainment")},
        ],
    },
]


class SettingsSection(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    audit_action: ClassVar[str | None] = None
    audit_target: ClassVar[str] = "settings"

    @classmethod
    def from_blob(cls, blob: dict[str, Any] | None) -> "SettingsSection":
        """Fetched values win over defaults; blank values fall back. Dict fields merge one level deep."""
        blob = blob or {}
        defaults = cls()
        data: dict[str, Any] = {}
        for name, field in cls.model_fields.items():
            key = field.alias or name
            default = getattr(defaults, name)
            value = blob.get(key)
            if value is None or value == "":
                data[name] = default
            elif isinstance(default, dict) and isinstance(value, dict):
                data[name] = {**default, **value}
            else:
                data[name] = value
        return cls.model_validate(data)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)

    def after_save(self, client):
        pass

    def save(self, client, admin_id: str | None):
        client.update_settings(self.to_wire())
        self.after_save(client)
        if self.audit_action:
            record_admin_action(client, admin_id, self.audit_action, self.audit_target)


class GeneralSettings(SettingsSection):
    audit_action: ClassVar[str | None] = "Updated General Settings"

    blog_post_price: int = 49
    auto_approval: bool = False
    min_seo_score_for_auto_approval: int = 80
    min_content_score_for_auto_approval: int = 80
    manga_visibility: dict[str, bool] = Field(
        default_factory=lambda: {"web": True, "mobileWeb": True, "android": True, "ios": True}
    )
    manga_layout: dict[str, Any] = Field(
        default_factory=lambda: {"viewType": "grid", "columns": 5, "cardSize": "medium"}
    )
    manga_seo_defaults: dict[str, str] = Field(
        default_factory=lambda: {
            "titleTemplate": "Read {title} Online - All Chapters Free",
            "descriptionTemplate": "Read {title} manga online for free. {chapters} chapters available. Updated {status}.",
            "chapterTitleTemplate": "{title} Chapter {chapter} - Read Online Free",
            "chapterDescriptionTemplate": "Read {title} Chapter {chapter} online for free. High quality images, fast loading.",
            "focusKeywordTemplate": "{title} manga, read {title} online, {title} chapters",
        }
    )
    openai_api_key: str = ""

    @classmethod
    def from_blob(cls, blob: dict[str, Any] | None) -> "GeneralSettings":
        section = super().from_blob(blob)
        # A stored price of 0 falls back to the default
        if not (blob or {}).get("blogPostPrice"):
            section.blog_post_price = cls().blog_post_price
        return section


class AnalyticsSettings(SettingsSection):
    audit_action: ClassVar[str | None] = "Updated Analytics Settings"

    analytics_enabled: bool = False
    analytics_id: str = ""


class AdsSettings(SettingsSection):
    audit_action: ClassVar[str | None] = "Updated Ads Settings"

    ads_enabled: bool = False
    ads_code: str = ""
    ad_placements: list[dict[str, Any]] = Field(default_factory=list)
    adsense_publisher_id: str = ""
    adsense_meta: str = ""
    ads_txt: str = DEFAULT_ADS_TXT
    enable_auto_ads: bool = False
    auto_ads_excluded_routes: str = DEFAULT_EXCLUDED_ROUTES
    blog_ad_interval: int = 4

    def after_save(self, client):
        # ads.txt lives on the platform's disk; a failed rewrite does not undo the save
        try:
            client.write_system_files(self.ads_txt)
        except ApiError as e:
            log_event("ads_txt_write_failed", level="error", error=e.message, status_code=e.status_code)

    def add_placement(self, placement: dict[str, Any]):
        self.ad_placements = [*self.ad_placements, placement]

    def remove_placement(self, placement_id: str):
        self.ad_placements = [p for p in self.ad_placements if p.get("id") != placement_id]

    def toggle_placement(self, placement_id: str):
        self.ad_placements = [
            {**p, "enabled": not p.get("enabled")} if p.get("id") == placement_id else p
            for p in self.ad_placements
        ]


class PayUSettings(SettingsSection):
    audit_action: ClassVar[str | None] = "Updated PayU Settings"

    payu_merchant_id: str = ""
    payu_merchant_key: str = ""
    payu_merchant_salt: str = ""
    payu_test_mode: bool = True

    @classmethod
    def from_blob(cls, blob: dict[str, Any] | None) -> "PayUSettings":
        section = super().from_blob(blob)
        # Test mode stays on unless the platform explicitly says otherwise
        section.payu_test_mode = (blob or {}).get("payuTestMode") is not False
        return section


class ThemeSettings(SettingsSection):
    audit_action: ClassVar[str | None] = "Updated Theme Settings"

    site_name: str = "Luvrix"
    site_tagline: str = "Stories & Knowledge"
    logo_url: str = ""
    favicon_url: str = ""
    logo_icon: str = "Zap"
    theme_color: str = "#ff0055"
    secondary_color: str = "#8b5cf6"
    accent_color: str = "#06b6d4"
    gradient_from: str = "#ff0055"
    gradient_to: str = "#8b5cf6"
    header_bg: str = "#ffffff"
    footer_bg: str = "#1e293b"
    body_bg: str = "#f8fafc"
    card_bg: str = "#ffffff"
    heading_color: str = "#1e293b"
    text_color: str = "#475569"
    muted_color: str = "#94a3b8"
    link_color: str = "#ff0055"
    footer_text: str = "© 2026 Luvrix.com - All Rights Reserved"
    footer_description: str = "Your trusted source for blogs, manga, and entertainment."
    header_menu: list[str] = Field(default_factory=lambda: ["News", "Anime", "Manga", "Technology"])
    hero_title: str = "Discover Amazing Stories"
    hero_subtitle: str = "Explore blogs, manga, and more from our community"
    hero_button_text: str = "Get Started"
    hero_button_link: str = "/register"
    featured_title: str = "Featured Posts"
    latest_title: str = "Latest Articles"
    manga_title: str = "Popular Manga"
    leaderboard_title: str = "Top Creators"
    about_title: str = "About Luvrix"
    about_description: str = "We are a community-driven platform for creators."
    contact_title: str = "Get in Touch"
    contact_description: str = "Have questions? We'd love to hear from you."
    contact_email: str = "contact@luvrix.com"
    social_facebook: str = ""
    social_twitter: str = ""
    social_instagram: str = ""
    social_youtube: str = ""
    social_discord: str = ""
    button_radius: str = "xl"
    card_radius: str = "2xl"
    card_shadow: str = "lg"


class SeoSettings(SettingsSection):
    audit_action: ClassVar[str | None] = "Updated SEO Settings"
    audit_target: ClassVar[str] = "seo-settings"

    robots_txt: str = DEFAULT_ROBOTS_TXT
    ads_txt: str = DEFAULT_ADS_TXT
    global_seo: dict[str, str] = Field(
        alias="globalSEO",
        default_factory=lambda: {
            "defaultMangaTitle": "Read {title} Manga Online Free - Luvrix",
            "defaultChapterTitle": "{title} Chapter {n} - Read Online Free",
            "defaultMangaDescription": "Read {title} manga online for free. Get the latest chapters in HD quality only on Luvrix.",
            "defaultChapterDescription": "Read {title} Chapter {n} online for free in HD quality. Enjoy the latest manga chapters on Luvrix.",
            "defaultOgImage": "https://luvrix.com/default-cover.jpg",
            "defaultBlogTitle": "{title} - Luvrix Blog",
            "defaultBlogDescription": "Read {title} on Luvrix Blog. Discover the latest articles and news.",
        },
    )


class AdminMangaLayout(SettingsSection):
    audit_action: ClassVar[str | None] = "Updated Admin Manga Layout"

    admin_manga_layout: dict[str, Any] = Field(
        default_factory=lambda: {"viewType": "grid", "columns": 3, "cardSize": "medium"}
    )


class MenuSettings(SettingsSection):
    navigation_menus: list[dict[str, Any]] = Field(default_factory=lambda: copy.deepcopy(DEFAULT_MENUS))

    def _find(self, mid: str) -> dict[str, Any] | None:
        return next((m for m in self.navigation_menus if m.get("id") == mid), None)

    def add_menu(self, name: str) -> bool:
        mid = menu_id(name)
        if mid is None:
            return False
        self.navigation_menus.append({"id": mid, "name": name.strip(), "submenus": []})
        return True

    def delete_menu(self, mid: str):
        self.navigation_menus = [m for m in self.navigation_menus if m.get("id") != mid]

    def rename_menu(self, mid: str, name: str):
        menu = self._find(mid)
        if menu is not None:
            menu["name"] = name

    def add_submenu(self, mid: str, name: str) -> bool:
        sid = menu_id(name)
        menu = self._find(mid)
        if sid is None or menu is None:
            return False
        menu.setdefault("submenus", []).append(
            {"id": sid, "name": name.strip(), "href": _category(name.strip())}
        )
        return True

    def delete_submenu(self, mid: str, sid: str):
        menu = self._find(mid)
        if menu is not None:
            menu["submenus"] = [s for s in menu.get("submenus", []) if s.get("id") != sid]

    def update_submenu(self, mid: str, sid: str, field: str, value: str):
        menu = self._find(mid)
        if menu is None or field not in ("name", "href"):
            return
        for s in menu.get("submenus", []):
            if s.get("id") == sid:
                s[field] = value

    def move_menu(self, index: int, direction: str):
        target = index - 1 if direction == "up" else index + 1
        if index < 0 or index >= len(self.navigation_menus):
            return
        if target < 0 or target >= len(self.navigation_menus):
            return
        menus = self.navigation_menus
        menus[index], menus[target] = menus[target], menus[index]


class CookieSettings(BaseModel):
    enabled: bool = True
    message: str = DEFAULT_COOKIE_MESSAGE

    @classmethod
    def from_blob(cls, blob: dict[str, Any] | None) -> "CookieSettings":
        blob = blob or {}
        enabled = blob.get("enabled")
        return cls(
            enabled=True if enabled is None else bool(enabled),
            message=blob.get("message") or DEFAULT_COOKIE_MESSAGE,
        )
