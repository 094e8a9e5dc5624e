import json
from unittest.mock import MagicMock

import pytest
import requests

from luvrix_admin.errors import ApiError
from luvrix_admin.services.platform_client import (
    PlatformClient,
    fetch_parallel,
    normalize_endpoint,
    with_query,
)


def _response(status_code=200, body=None, text=None):
    res = MagicMock()
    res.status_code = status_code
    res.text = text if text is not None else (json.dumps(body) if body is not None else "")
    return res


def _client(*responses, csrf_enabled=True, token=None):
    session = MagicMock()
    session.request.side_effect = list(responses)
    return PlatformClient(base_url="http://platform.test/api", token=token, csrf_enabled=csrf_enabled, session=session), session


def test_normalize_endpoint_adds_trailing_slash():
    assert normalize_endpoint("/blogs") == "/blogs/"
    assert normalize_endpoint("/blogs/") == "/blogs/"
    assert normalize_endpoint("/blogs?status=all") == "/blogs/?status=all"
    assert normalize_endpoint("/blogs/?status=all") == "/blogs/?status=all"


def test_with_query_drops_empty_params():
    assert with_query("/logs/audit", {"page": 2, "category": None, "severity": ""}) == "/logs/audit?page=2"
    assert with_query("/logs/audit", {}) == "/logs/audit"


def test_get_sends_bearer_and_skips_csrf():
    client, session = _client(_response(body={"user": {"id": "u1"}}), token="tok")
    assert client.me() == {"user": {"id": "u1"}}

    method, url = session.request.call_args.args
    headers = session.request.call_args.kwargs["headers"]
    assert (method, url) == ("GET", "http://platform.test/api/auth/me/")
    assert headers["Authorization"] == "Bearer tok"
    assert "x-csrf-token" not in headers


def test_mutation_fetches_csrf_once_and_reuses_it():
    client, session = _client(
        _response(body={"token": "csrf-1"}),
        _response(body={"success": True}),
        _response(body={"success": True}),
    )
    client.delete_blog("b1")
    client.approve_blog("b2")

    assert session.request.call_count == 3
    assert session.request.call_args_list[0].args[1] == "http://platform.test/api/csrf-token/"
    for call in session.request.call_args_list[1:]:
        assert call.kwargs["headers"]["x-csrf-token"] == "csrf-1"


def test_invalid_csrf_is_refreshed_and_retried_once():
    client, session = _client(
        _response(body={"token": "stale"}),
        _response(403, {"error": "Invalid CSRF token"}),
        _response(body={"token": "fresh"}),
        _response(body={"success": True, "id": "m1"}),
    )
    assert client.create_manga({"title": "Naruto"}) == {"success": True, "id": "m1"}

    retry = session.request.call_args_list[-1]
    assert retry.kwargs["headers"]["x-csrf-token"] == "fresh"
    assert retry.kwargs["json"] == {"title": "Naruto"}


def test_failed_retry_raises_with_status():
    client, _ = _client(
        _response(body={"token": "stale"}),
        _response(403, {"error": "Invalid CSRF token"}),
        _response(body={"token": "fresh"}),
        _response(403, {"error": "Invalid CSRF token"}),
    )
    with pytest.raises(ApiError) as exc:
        client.delete_user("u1")
    assert exc.value.status_code == 403
    assert exc.value.message == "Invalid CSRF token"


def test_error_body_becomes_api_error():
    client, _ = _client(_response(404, {"error": "Blog not found"}), csrf_enabled=False)
    with pytest.raises(ApiError) as exc:
        client.get_blog("missing")
    assert exc.value.message == "Blog not found"
    assert exc.value.status_code == 404


def test_error_without_message_is_generic():
    client, _ = _client(_response(500, text="<html>oops</html>"), csrf_enabled=False)
    with pytest.raises(ApiError) as exc:
        client.get_all_users()
    assert exc.value.message == "Invalid response from server"


def test_empty_success_body_is_empty_dict():
    client, _ = _client(_response(204), csrf_enabled=False)
    assert client.delete_subscriber("s1") == {}


def test_transport_failure_is_status_zero():
    session = MagicMock()
    session.request.side_effect = requests.ConnectionError("refused")
    client = PlatformClient(base_url="http://platform.test/api", csrf_enabled=False, session=session)
    with pytest.raises(ApiError) as exc:
        client.get_settings()
    assert exc.value.status_code == 0
    assert exc.value.message.startswith("Network error")


def test_fetch_parallel_keeps_call_order():
    assert fetch_parallel(lambda: 1, lambda: "two", lambda: [3]) == [1, "two", [3]]
    assert fetch_parallel() == []
