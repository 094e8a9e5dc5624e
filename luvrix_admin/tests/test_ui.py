from luvrix_admin import ui


def test_post_button_confirm_survives_apostrophes():
    html = ui.post_button("/admin/x/delete", "Delete", confirm="Don't do it")
    assert 'onsubmit="return confirm(&quot;Don&#x27;t do it&quot;)"' in html


def test_post_button_without_confirm_has_no_handler():
    html = ui.post_button("/admin/x/delete", "Delete", hidden={"id": "7"})
    assert "onsubmit" not in html
    assert '<input type="hidden" name="id" value="7">' in html
