from typing import Any


class ApiError(Exception):
    """A platform API call failed. status_code is 0 for transport failures."""

    def __init__(self, message: str, status_code: int = 0, payload: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload or {}


class ValidationError(Exception):
    """A console form failed validation. The message is shown to the admin as-is."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AdminRedirect(Exception):
    """Raised by the admin guard; turned into a 303 by the app."""

    def __init__(self, url: str):
        super().__init__(url)
        self.url = url
