import pytest

from luvrix_admin.errors import ValidationError
from luvrix_admin.services.validation import (
    GA4_ERROR,
    menu_id,
    parse_int,
    validate_ad_placement,
    validate_blog,
    validate_draft,
    validate_ga_id,
    validate_giveaway,
    validate_manga,
    validate_password,
    validate_password_change,
    validate_points,
    validate_setup,
    validate_task,
)


@pytest.mark.parametrize(
    "password,message",
    [
        ("Ab1!", "Password must be at least 8 characters"),
        ("abcdefg1!", "Password must contain an uppercase letter"),
        ("ABCDEFG1!", "Password must contain a lowercase letter"),
        ("Abcdefgh!", "Password must contain a number"),
        ("Abcdefgh1", "Password must contain a special character (!@#$%^&*)"),
    ],
)
def test_password_rules(password, message):
    with pytest.raises(ValidationError) as exc:
        validate_password(password)
    assert exc.value.message == message


def test_strong_password_passes():
    validate_password("Str0ng!Pass")


def test_password_change_checks_match_first():
    with pytest.raises(ValidationError, match="New passwords do not match"):
        validate_password_change("old", "Str0ng!Pass", "Str0ng!Pas")
    with pytest.raises(ValidationError, match="Current password is required"):
        validate_password_change("", "Str0ng!Pass", "Str0ng!Pass")


def test_setup_requires_email():
    with pytest.raises(ValidationError, match="Email and password are required"):
        validate_setup("  ", "Str0ng!Pass")
    assert validate_setup(" admin@luvrix.com ", "Str0ng!Pass") == "admin@luvrix.com"


def test_ga_id_is_uppercased_and_checked():
    assert validate_ga_id(" g-abcde12345 ") == "G-ABCDE12345"
    assert validate_ga_id("") == ""
    with pytest.raises(ValidationError) as exc:
        validate_ga_id("UA-12345")
    assert exc.value.message == GA4_ERROR


def test_points_must_be_non_negative_integer():
    assert validate_points("12") == 12
    assert validate_points("0") == 0
    for raw in ("-1", "ten", None):
        with pytest.raises(ValidationError):
            validate_points(raw)


def test_parse_int_falls_back():
    assert parse_int(" 7 ") == 7
    assert parse_int("x", 3) == 3
    assert parse_int(None, 5) == 5


def test_blog_needs_title_and_content():
    with pytest.raises(ValidationError, match="Please fill in title and content"):
        validate_blog("Title", "   ")


def test_draft_builds_slug_and_dedupes_keywords():
    draft = validate_draft({"title": "Top 10 Anime", "keywords": "anime, top, anime"})
    wire = draft.to_wire()
    assert wire["slug"] == "top-10-anime"
    assert wire["keywords"] == ["anime", "top"]
    assert wire["seoTitle"] == ""
    with pytest.raises(ValidationError, match="Title is required"):
        validate_draft({"title": " "})


def test_manga_defaults_slug_and_numbers():
    manga = validate_manga({"title": "Solo Leveling", "totalChapters": "179", "chapterPadding": ""}).to_wire()
    assert manga["slug"] == "solo-leveling"
    assert manga["totalChapters"] == 179
    assert manga["chapterPadding"] == 0
    assert manga["chapterFormat"] == "chapter-{n}"


def test_ad_placement_requires_position_and_code():
    with pytest.raises(ValidationError):
        validate_ad_placement({"position": "header_top", "code": " "})
    with pytest.raises(ValidationError):
        validate_ad_placement({"position": "nowhere", "code": "<div/>"})

    placement = validate_ad_placement(
        {"position": "sidebar_right", "code": "<ins/>", "type": "bogus", "pages": "blog"}, now_ms=1700000000000
    )
    assert placement["id"] == "1700000000000"
    assert placement["type"] == "custom"
    assert placement["pages"] == ["blog"]
    assert placement["devices"] == "all"
    assert placement["enabled"] is True
    assert placement["createdAt"] == "2023-11-14T22:13:20Z"


def test_menu_id():
    assert menu_id("Hot Picks") == "hot-picks"
    assert menu_id("  ") is None


def _giveaway_form(**overrides):
    form = {
        "title": "PS5 Giveaway",
        "imageUrl": "https://img.test/ps5.png",
        "startDate": "2026-01-01T10:00",
        "endDate": "2026-01-31T10:00",
        "sponsors": [{"bannerUrl": "https://img.test/b.png", "redirectUrl": "", "name": "Acme"}, {"bannerUrl": " "}],
    }
    form.update(overrides)
    return form


def test_giveaway_validation():
    with pytest.raises(ValidationError, match="End date must be after start date"):
        validate_giveaway(_giveaway_form(endDate="2025-12-01T10:00"))
    with pytest.raises(ValidationError, match="Image URL is required"):
        validate_giveaway(_giveaway_form(imageUrl=""))

    wire = validate_giveaway(_giveaway_form(mode="weird", maxExtensions="7", maxExtensionsCustom="-1")).to_wire()
    assert wire["mode"] == "random"
    assert wire["status"] == "draft"
    assert wire["maxExtensions"] == -1
    assert wire["targetParticipants"] == 100
    assert [s["name"] for s in wire["sponsors"]] == ["Acme"]


def test_task_defaults_title_from_type():
    task = validate_task({"type": "youtube_subscribe", "url": "https://youtube.test/c", "timerDuration": "30"}).to_wire()
    assert task["title"] == "Subscribe to our YouTube Channel"
    assert task["metadata"] == {"url": "https://youtube.test/c", "timerDuration": 30}
    with pytest.raises(ValidationError, match="Task title is required"):
        validate_task({"type": "custom"})
    with pytest.raises(ValidationError, match="Unknown task type"):
        validate_task({"type": "dance"})
