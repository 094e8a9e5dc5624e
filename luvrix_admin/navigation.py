from luvrix_admin.config import settings

# (href, label). The first MAIN_MENU_SIZE entries form "Main Menu", the rest "Settings".
MENU_ITEMS = [
    ("/admin/dashboard", "Dashboard"),
    ("/admin/trending", "Trending Topics"),
    ("/admin/drafts", "Draft Queue"),
    ("/admin/blogs", "Blogs"),
    ("/admin/manga", "Manga"),
    ("/admin/users", "Users"),
    ("/admin/subscribers", "Subscribers"),
    ("/admin/payments", "Payments"),
    ("/admin/menus", "Menus"),
    ("/admin/payu", "PayU Config"),
    ("/admin/ads", "Ads"),
    ("/admin/analytics", "Analytics"),
    ("/admin/theme", "Theme"),
    ("/admin/seo-settings", "SEO Files"),
    ("/admin/sitemap", "Sitemap"),
    ("/admin/giveaways", "Giveaways"),
    ("/admin/donations", "Donations"),
    ("/admin/audit-logs", "Audit Logs"),
    ("/admin/settings", "Settings"),
    ("/admin/change-password", "Password"),
]

MAIN_MENU_SIZE = 8


def is_active(href: str, path: str) -> bool:
    path = path.rstrip("/") or "/"
    return path == href or path.startswith(href + "/")


def sidebar_groups(path: str) -> list[dict]:
    items = [{"href": href, "label": label, "active": is_active(href, path)} for href, label in MENU_ITEMS]
    return [
        {"title": "Main Menu", "items": items[:MAIN_MENU_SIZE]},
        {"title": "Settings", "items": items[MAIN_MENU_SIZE:]},
    ]


def back_to_website() -> dict:
    return {"href": settings.public_site_url, "label": "Back to Website"}
