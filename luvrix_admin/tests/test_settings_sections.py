from unittest.mock import MagicMock

from luvrix_admin.errors import ApiError
from luvrix_admin.services.settings_sections import (
    DEFAULT_ROBOTS_TXT,
    AdsSettings,
    CookieSettings,
    GeneralSettings,
    MenuSettings,
    PayUSettings,
    SeoSettings,
    ThemeSettings,
)


def test_from_blob_prefers_fetched_values_and_falls_back_on_blank():
    section = GeneralSettings.from_blob({"blogPostPrice": 99, "openaiApiKey": "", "unrelated": "x"})
    assert section.blog_post_price == 99
    assert section.openai_api_key == ""
    assert section.min_seo_score_for_auto_approval == 80


def test_zero_blog_price_falls_back_to_default():
    assert GeneralSettings.from_blob({"blogPostPrice": 0}).blog_post_price == 49
    assert GeneralSettings.from_blob({"blogPostPrice": 29}).blog_post_price == 29


def test_dict_fields_merge_with_defaults():
    section = GeneralSettings.from_blob({"mangaVisibility": {"ios": False}})
    assert section.manga_visibility == {"web": True, "mobileWeb": True, "android": True, "ios": False}


def test_to_wire_only_carries_own_keys():
    wire = PayUSettings.from_blob({"payuMerchantId": "M1", "siteName": "Luvrix"}).to_wire()
    assert set(wire) == {"payuMerchantId", "payuMerchantKey", "payuMerchantSalt", "payuTestMode"}


def test_payu_test_mode_only_off_when_explicit():
    assert PayUSettings.from_blob({}).payu_test_mode is True
    assert PayUSettings.from_blob({"payuTestMode": None}).payu_test_mode is True
    assert PayUSettings.from_blob({"payuTestMode": False}).payu_test_mode is False


def test_seo_uses_upper_case_alias():
    section = SeoSettings.from_blob({"globalSEO": {"defaultBlogTitle": "{title} | Luvrix"}})
    assert section.robots_txt == DEFAULT_ROBOTS_TXT
    wire = section.to_wire()
    assert wire["globalSEO"]["defaultBlogTitle"] == "{title} | Luvrix"
    assert "defaultMangaTitle" in wire["globalSEO"]


def test_save_writes_section_and_audits():
    client = MagicMock()
    ThemeSettings.from_blob({"siteName": "Luvrix Beta"}).save(client, "admin-1")
    sent = client.update_settings.call_args.args[0]
    assert sent["siteName"] == "Luvrix Beta"
    assert sent["headerMenu"] == ["News", "Anime", "Manga", "Technology"]
    client.create_log.assert_called_once_with(
        {"adminId": "admin-1", "action": "Updated Theme Settings", "targetId": "settings"}
    )


def test_ads_save_rewrites_ads_txt_and_tolerates_failure():
    client = MagicMock()
    client.write_system_files.side_effect = ApiError("disk full", 500)
    section = AdsSettings.from_blob({"adsTxt": "google.com, pub-1, DIRECT\n"})
    section.save(client, "admin-1")
    client.write_system_files.assert_called_once_with("google.com, pub-1, DIRECT\n")
    client.create_log.assert_called_once()


def test_ad_placement_edits():
    section = AdsSettings()
    section.add_placement({"id": "1", "position": "header_top", "enabled": True})
    section.add_placement({"id": "2", "position": "popup", "enabled": True})
    section.toggle_placement("1")
    assert [p["enabled"] for p in section.ad_placements] == [False, True]
    section.remove_placement("2")
    assert [p["id"] for p in section.ad_placements] == ["1"]


def test_menu_edits_do_not_touch_defaults():
    menus = MenuSettings.from_blob({})
    assert menus.add_menu("Hot Picks")
    assert not menus.add_menu("   ")
    assert menus.add_submenu("hot-picks", "Top Ten")
    menus.update_submenu("hot-picks", "top-ten", "href", "/top")
    menus.update_submenu("hot-picks", "top-ten", "id", "nope")
    menus.move_menu(3, "up")
    menus.move_menu(0, "up")

    ids = [m["id"] for m in menus.navigation_menus]
    assert ids == ["news", "blog", "hot-picks", "entertainment"]
    hot = menus.navigation_menus[2]
    assert hot["submenus"] == [{"id": "top-ten", "name": "Top Ten", "href": "/top"}]

    menus.delete_submenu("news", "sports")
    menus.rename_menu("blog", "Stories")
    menus.delete_menu("entertainment")
    assert [s["id"] for s in menus.navigation_menus[0]["submenus"]] == ["politics", "business", "science"]
    assert menus.navigation_menus[1]["name"] == "Stories"
    assert MenuSettings().navigation_menus[0]["submenus"][2]["id"] == "sports"


def test_menu_save_is_not_audited():
    client = MagicMock()
    MenuSettings().save(client, "admin-1")
    client.update_settings.assert_called_once()
    client.create_log.assert_not_called()


def test_cookie_settings_defaults():
    assert CookieSettings.from_blob(None).enabled is True
    assert CookieSettings.from_blob({"enabled": False, "message": ""}).enabled is False
    assert CookieSettings.from_blob({"message": "Hi"}).message == "Hi"
