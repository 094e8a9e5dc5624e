from pydantic_settings import BaseSettings, SettingsConfigDict

import os

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    service_name: str = "luvrix-admin"
    database_url: str = "sqlite:///./console.db"
    log_level: str = "INFO"

    # Platform REST API, including the /api prefix
    platform_api_url: str = os.getenv("PLATFORM_API_URL", "http://localhost:3000/api")
    api_timeout_seconds: float = 15.0
    csrf_enabled: bool = True

    # Where "Back to Website" points and where non-admins get sent
    public_site_url: str = os.getenv("PUBLIC_SITE_URL", "https://luvrix.com")

    session_cookie_name: str = "luvrix_session"
    session_cookie_secure: bool = True
    session_ttl_hours: int = 168
    session_revalidate_seconds: int = 300
    session_purge_minutes: int = 30
    scheduler_enabled: bool = True

    display_timezone: str = "Asia/Kolkata"
    currency_symbol: str = "₹"
    audit_page_size: int = 20

settings = Settings()
