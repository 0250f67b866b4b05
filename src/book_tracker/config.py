"""Application configuration."""

import os
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from book_tracker.domain.auth import CookieWriteOptions

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

# Matches the @supabase/ssr default of 400 days.
_DEFAULT_COOKIE_MAX_AGE = 400 * 24 * 60 * 60


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_anon_key: str
    supabase_timeout_seconds: float = 10.0
    auth_cookie_name: str = "sb-auth-token"
    cookie_secure: bool = True
    cookie_domain: str | None = None
    cookie_max_age: int = _DEFAULT_COOKIE_MAX_AGE
    cookie_samesite: Literal["lax", "strict", "none"] = "lax"
    login_path: str = "/auth/login"
    dashboard_path: str = "/dashboard"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def cookie_options(self) -> CookieWriteOptions:
        """Return the attributes used when writing the auth cookie."""
        return CookieWriteOptions(
            path="/",
            domain=self.cookie_domain,
            max_age=self.cookie_max_age,
            secure=self.cookie_secure,
            httponly=True,
            samesite=self.cookie_samesite,
        )
