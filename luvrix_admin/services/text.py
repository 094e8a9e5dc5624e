import re
import time

_WHITESPACE = re.compile(r"\s+")
_NON_SLUG = re.compile(r"[^\w-]+", re.ASCII)
_DASHES = re.compile(r"--+")

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def slugify(text: str | None) -> str:
    if not text:
        return ""
    slug = str(text).lower().strip()
    slug = _WHITESPACE.sub("-", slug)
    slug = _NON_SLUG.sub("", slug)
    slug = _DASHES.sub("-", slug)
    return slug.strip("-")


def to_base36(n: int) -> str:
    if n == 0:
        return "0"
    out = []
    while n:
        n, r = divmod(n, 36)
        out.append(_BASE36[r])
    return "".join(reversed(out))


def generate_blog_slug(title: str, now_ms: int | None = None) -> str:
    """Blog slugs get a base36 millisecond suffix so reposting a title never collides."""
    ms = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{slugify(title)}-{to_base36(ms)}"


def generate_manga_slug(title: str) -> str:
    return slugify(title)


def mask_secret(value: str | None) -> str:
    if not value:
        return ""
    if len(value) <= 4:
        return "*" * len(value)
    return "*" * (len(value) - 4) + value[-4:]


def split_tags(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [t.strip() for t in raw.split(",") if t.strip()]
