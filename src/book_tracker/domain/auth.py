"""Domain models for caller identity and auth cookies."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal
from uuid import UUID

_BEARER_PREFIX = "bearer "


@dataclass(frozen=True)
class Session:
    """A validated caller identity, valid for the duration of one request."""

    access_token: str
    user_id: UUID
    refresh_token: str | None = None
    expires_at: datetime | None = None


@dataclass(frozen=True)
class CookieWriteOptions:
    """Attributes applied when a cookie is written to a response."""

    path: str = "/"
    domain: str | None = None
    max_age: int | None = None
    secure: bool = True
    httponly: bool = True
    samesite: Literal["lax", "strict", "none"] = "lax"


@dataclass(frozen=True)
class CookieWrite:
    """A single pending cookie write; ``value`` is None for a removal."""

    name: str
    value: str | None
    options: CookieWriteOptions


@dataclass(frozen=True)
class RequestCredentials:
    """Credentials presented by a request."""

    cookies: Mapping[str, str] = field(default_factory=dict)
    authorization: str | None = None

    def has_cookie(self, name: str) -> bool:
        """Return True when the cookie, or its first chunk, is present."""
        return bool(self.cookies.get(name) or self.cookies.get(f"{name}.0"))

    @property
    def bearer_token(self) -> str | None:
        """Return the bearer token from the Authorization header, if well formed."""
        if not self.authorization:
            return None
        if not self.authorization.lower().startswith(_BEARER_PREFIX):
            return None
        token = self.authorization[len(_BEARER_PREFIX) :].strip()
        if not token or " " in token:
            return None
        return token
