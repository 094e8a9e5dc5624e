"""
Thin wrapper around the platform's /api routes.

Every admin page talks to the platform through PlatformClient. The client
mirrors the web console's fetch helper: trailing-slash normalisation,
CSRF header on mutating calls with a single refresh-and-retry, bearer
auth, and lenient JSON parsing.
"""
import json
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable
from urllib.parse import quote, urlencode

import requests

from luvrix_admin.config import settings
from luvrix_admin.errors import ApiError

logger = logging.getLogger(__name__)

MUTATING_METHODS = {"POST", "PUT", "DELETE", "PATCH"}
INVALID_CSRF = "Invalid CSRF token"
INVALID_RESPONSE = "Invalid response from server"


def normalize_endpoint(endpoint: str) -> str:
    """The platform runs with trailing slashes on; without one, writes get 308'd and lose their body."""
    if "?" in endpoint:
        path, query = endpoint.split("?", 1)
        if path.endswith("/"):
            return endpoint
        return f"{path}/?{query}"
    return endpoint if endpoint.endswith("/") else endpoint + "/"


def with_query(endpoint: str, params: dict[str, Any] | None) -> str:
    if not params:
        return endpoint
    clean = {k: v for k, v in params.items() if v is not None and v != ""}
    if not clean:
        return endpoint
    return f"{endpoint}?{urlencode(clean)}"


def _seg(value: Any) -> str:
    return quote(str(value), safe="")


def fetch_parallel(*calls: Callable[[], Any]) -> list[Any]:
    """Run independent reads side by side; results come back in call order."""
    if not calls:
        return []
    with ThreadPoolExecutor(max_workers=len(calls)) as pool:
        futures = [pool.submit(call) for call in calls]
        return [f.result() for f in futures]


class PlatformClient:
    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        csrf_enabled: bool | None = None,
        session: requests.Session | None = None,
    ):
        self.base_url = (base_url or settings.platform_api_url).rstrip("/")
        self.token = token
        self.timeout = timeout if timeout is not None else settings.api_timeout_seconds
        self.csrf_enabled = settings.csrf_enabled if csrf_enabled is None else csrf_enabled
        self.session = session or requests.Session()
        self._csrf_token: str | None = None

    # --- transport ---

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url}{normalize_endpoint(endpoint)}"

    def _send(self, method: str, endpoint: str, headers: dict[str, str], body: Any = None):
        try:
            return self.session.request(
                method,
                self._url(endpoint),
                headers=headers,
                json=body,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ApiError(f"Network error: {e}", 0) from e

    @staticmethod
    def _parse(response) -> Any:
        text = response.text
        if not text:
            return {}
        try:
            return json.loads(text)
        except ValueError:
            logger.error(f"Failed to parse response: {text[:200]}")
            return {"error": INVALID_RESPONSE}

    @staticmethod
    def _is_ok(response) -> bool:
        return 200 <= response.status_code < 300

    @staticmethod
    def _error_message(data: Any) -> str:
        if isinstance(data, dict) and data.get("error"):
            return str(data["error"])
        return "Request failed"

    def get_csrf_token(self) -> str:
        if self._csrf_token:
            return self._csrf_token
        try:
            res = self.session.request(
                "GET", self._url("/csrf-token"), headers={"Content-Type": "application/json"}, timeout=self.timeout
            )
            data = self._parse(res)
            token = data.get("token") if isinstance(data, dict) else None
        except requests.RequestException as e:
            logger.warning(f"CSRF token fetch failed: {e}")
            token = None
        self._csrf_token = token or None
        return token or ""

    def clear_csrf_token(self):
        self._csrf_token = None

    def request(self, method: str, endpoint: str, body: Any = None, params: dict[str, Any] | None = None) -> Any:
        method = method.upper()
        endpoint = with_query(endpoint, params)
        headers = {"Content-Type": "application/json"}

        if method in MUTATING_METHODS and self.csrf_enabled:
            csrf = self.get_csrf_token()
            if csrf:
                headers["x-csrf-token"] = csrf

        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        res = self._send(method, endpoint, headers, body)
        data = self._parse(res)

        if res.status_code == 403 and isinstance(data, dict) and data.get("error") == INVALID_CSRF:
            self.clear_csrf_token()
            fresh = self.get_csrf_token()
            if fresh:
                headers["x-csrf-token"] = fresh
            retry = self._send(method, endpoint, headers, body)
            data = self._parse(retry)
            if not self._is_ok(retry):
                raise ApiError(self._error_message(data), retry.status_code, data if isinstance(data, dict) else None)
            return data

        if not self._is_ok(res):
            raise ApiError(self._error_message(data), res.status_code, data if isinstance(data, dict) else None)
        return data

    def get(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        return self.request("GET", endpoint, params=params)

    def post(self, endpoint: str, body: Any = None) -> Any:
        return self.request("POST", endpoint, body=body)

    def put(self, endpoint: str, body: Any = None) -> Any:
        return self.request("PUT", endpoint, body=body)

    def delete(self, endpoint: str, body: Any = None) -> Any:
        return self.request("DELETE", endpoint, body=body)

    # --- auth ---

    def login(self, email: str, password: str) -> dict:
        return self.post("/auth/login", {"email": email, "password": password})

    def me(self) -> dict:
        return self.get("/auth/me")

    def change_password(self, current_password: str, new_password: str) -> dict:
        return self.post("/auth/change-password", {"currentPassword": current_password, "newPassword": new_password})

    def setup_admin(self, email: str, password: str) -> dict:
        return self.post("/auth/setup-admin", {"email": email, "password": password})

    # --- blogs & drafts ---

    def get_all_blogs(self, status: str | None = "approved", include_all: bool = False) -> list[dict]:
        if include_all:
            return self.get("/blogs", {"all": "true"})
        return self.get("/blogs", {"status": status})

    def get_blog(self, blog_id) -> dict:
        return self.get(f"/blogs/{_seg(blog_id)}")

    def create_blog(self, data: dict) -> dict:
        return self.post("/blogs", data)

    def update_blog(self, blog_id, data: dict) -> dict:
        return self.put(f"/blogs/{_seg(blog_id)}", data)

    def delete_blog(self, blog_id) -> dict:
        return self.delete(f"/blogs/{_seg(blog_id)}")

    def approve_blog(self, blog_id) -> dict:
        return self.post(f"/blogs/{_seg(blog_id)}/approve")

    def reject_blog(self, blog_id, reason: str | None = None) -> dict:
        return self.post(f"/blogs/{_seg(blog_id)}/reject", {"reason": reason})

    def get_blog_drafts(self) -> list[dict]:
        return self.get("/drafts")

    def get_blog_draft(self, draft_id) -> dict:
        return self.get(f"/drafts/{_seg(draft_id)}")

    def update_blog_draft(self, draft_id, data: dict) -> dict:
        return self.put(f"/drafts/{_seg(draft_id)}", data)

    def delete_blog_draft(self, draft_id) -> dict:
        return self.delete(f"/drafts/{_seg(draft_id)}")

    def publish_blog_draft(self, draft_id, data: dict) -> dict:
        return self.post(f"/drafts/{_seg(draft_id)}/publish", data)

    # --- users ---

    def get_all_users(self) -> list[dict]:
        return self.get("/users")

    def get_user(self, user_id) -> dict:
        return self.get(f"/users/{_seg(user_id)}")

    def update_user(self, user_id, data: dict) -> dict:
        return self.put(f"/users/{_seg(user_id)}", data)

    def delete_user(self, user_id) -> dict:
        return self.delete(f"/users/{_seg(user_id)}")

    def hide_user_posts(self, user_id) -> dict:
        return self.post(f"/users/{_seg(user_id)}/hide-posts")

    def unhide_user_posts(self, user_id) -> dict:
        return self.post(f"/users/{_seg(user_id)}/unhide-posts")

    def update_user_points(self, user_id, points: int) -> dict:
        return self.put(f"/admin/users/{_seg(user_id)}/points", {"points": points})

    def reset_user_password(self, user_id) -> dict:
        return self.post(f"/admin/users/{_seg(user_id)}/reset-password")

    # --- manga ---

    def get_all_manga(self) -> list[dict]:
        return self.get("/manga")

    def create_manga(self, data: dict) -> dict:
        return self.post("/manga", data)

    def update_manga(self, manga_id, data: dict) -> dict:
        return self.put(f"/manga/{_seg(manga_id)}", data)

    def delete_manga(self, manga_id) -> dict:
        return self.delete(f"/manga/{_seg(manga_id)}")

    # --- settings blob ---

    def get_settings(self) -> dict:
        return self.get("/settings")

    def update_settings(self, data: dict) -> dict:
        return self.put("/settings", data)

    def get_cookie_settings(self) -> dict:
        return self.get("/settings/cookies")

    def update_cookie_settings(self, data: dict) -> dict:
        return self.put("/settings/cookies", data)

    # --- payments, subscribers, trending ---

    def get_all_payments(self) -> list[dict]:
        return self.get("/payments")

    def get_all_subscribers(self) -> list[dict]:
        return self.get("/subscribers")

    def update_subscriber_status(self, subscriber_id, status: str) -> dict:
        return self.put(f"/subscribers/{_seg(subscriber_id)}", {"status": status})

    def delete_subscriber(self, subscriber_id) -> dict:
        return self.delete(f"/subscribers/{_seg(subscriber_id)}")

    def get_trending_topics(self, country: str | None = None) -> list[dict]:
        return self.get("/trending", {"country": country})

    def generate_blog_draft(self, topic: str, user_id: str, category: str, tone: str) -> dict:
        return self.post(
            "/generate-draft",
            {"topic": topic, "userId": user_id, "category": category, "tone": tone},
        )

    # --- admin tooling ---

    def create_log(self, data: dict) -> dict:
        return self.post("/admin/logs", data)

    def get_logs(self) -> list[dict]:
        return self.get("/admin/logs")

    def get_audit_logs(self, page: int = 1, limit: int = 20, category: str | None = None, severity: str | None = None) -> dict:
        return self.get(
            "/admin/audit-logs",
            {"page": page, "limit": limit, "category": category, "severity": severity},
        )

    def clear_cache(self, action: str) -> dict:
        return self.post("/admin/cache", {"action": action})

    def write_system_files(self, ads_txt: str) -> dict:
        return self.post("/admin/write-system-files", {"adsTxt": ads_txt})

    def get_pageviews(self, range_: str) -> dict:
        return self.get("/analytics/pageviews", {"range": range_})

    def ping_sitemap(self) -> dict:
        return self.get("/sitemap/ping-google")

    def send_email(self, kind: str, to: str, data: dict) -> dict:
        return self.post("/send-email", {"type": kind, "to": to, "data": data})

    # --- giveaways ---

    def list_giveaways(self, status: str | None = None) -> list[dict]:
        return self.get("/giveaways", {"status": status})

    def get_giveaway(self, id_or_slug) -> dict:
        return self.get(f"/giveaways/{_seg(id_or_slug)}")

    def create_giveaway(self, data: dict) -> dict:
        return self.post("/giveaways", data)

    def update_giveaway(self, giveaway_id, data: dict) -> dict:
        return self.put(f"/giveaways/{_seg(giveaway_id)}", data)

    def delete_giveaway(self, giveaway_id) -> dict:
        return self.delete(f"/giveaways/{_seg(giveaway_id)}")

    def get_giveaway_tasks(self, giveaway_id) -> list[dict]:
        return self.get(f"/giveaways/{_seg(giveaway_id)}/tasks")

    def add_giveaway_task(self, giveaway_id, data: dict) -> dict:
        return self.post(f"/giveaways/{_seg(giveaway_id)}/tasks", data)

    def remove_giveaway_task(self, giveaway_id, task_id) -> dict:
        return self.delete(f"/giveaways/{_seg(giveaway_id)}/tasks", {"taskId": task_id})

    def get_giveaway_participants(self, giveaway_id, status: str | None = None, search: str | None = None) -> dict:
        return self.get(
            f"/giveaways/{_seg(giveaway_id)}/participants",
            {"status": status if status and status != "all" else None, "search": search},
        )

    def select_giveaway_winner(self, giveaway_id, mode: str, winner_user_id: str | None = None) -> dict:
        body: dict[str, Any] = {"mode": mode}
        if winner_user_id:
            body["winnerUserId"] = winner_user_id
        return self.post(f"/giveaways/{_seg(giveaway_id)}/winner", body)

    def get_giveaway_winner_info(self, giveaway_id) -> dict:
        return self.get(f"/giveaways/{_seg(giveaway_id)}/winner-info")

    def get_giveaway_shipping(self, giveaway_id) -> dict:
        return self.get(f"/giveaways/{_seg(giveaway_id)}/shipping-details")

    def get_giveaway_support(self, giveaway_id) -> dict:
        return self.get(f"/giveaways/{_seg(giveaway_id)}/support")

    def get_donation_stats(self) -> dict:
        return self.get("/giveaways/donation-stats")

    def get_all_donors(self) -> dict:
        return self.get("/giveaways/all-donors")


def client_for(token: str | None = None) -> PlatformClient:
    """Build a client for one request."""
    return PlatformClient(token=token)
