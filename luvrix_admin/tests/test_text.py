from luvrix_admin.services.text import (
    generate_blog_slug,
    generate_manga_slug,
    mask_secret,
    slugify,
    split_tags,
    to_base36,
)


def test_slugify_collapses_spaces_and_strips_symbols():
    assert slugify("  Hello,  World! ") == "hello-world"
    assert slugify("One -- Two") == "one-two"
    assert slugify("-edge-") == "edge"
    assert slugify(None) == ""
    assert slugify("Café Déjà Vu") == "caf-dj-vu"


def test_blog_slug_has_base36_time_suffix():
    assert to_base36(0) == "0"
    assert to_base36(35) == "z"
    assert to_base36(36) == "10"
    assert generate_blog_slug("My First Post", now_ms=1295) == "my-first-post-zz"


def test_manga_slug_has_no_suffix():
    assert generate_manga_slug("Solo Leveling") == "solo-leveling"


def test_mask_secret_keeps_last_four():
    assert mask_secret("") == ""
    assert mask_secret("abc") == "***"
    assert mask_secret("sk-1234567890") == "*********7890"


def test_split_tags_drops_blanks():
    assert split_tags("anime, manga,, ,news ") == ["anime", "manga", "news"]
    assert split_tags(None) == []
