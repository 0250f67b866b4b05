"""Session resolution for inbound requests."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol

from starlette.responses import Response

from book_tracker.domain.auth import (
    CookieWrite,
    CookieWriteOptions,
    RequestCredentials,
    Session,
)

logger = logging.getLogger(__name__)


@dataclass
class CookieSink:
    """Collects cookie writes made while serving one request."""

    options: CookieWriteOptions
    writes: list[CookieWrite] = field(default_factory=list)

    def set(self, name: str, value: str) -> None:
        """Queue a cookie write."""
        self.writes.append(CookieWrite(name=name, value=value, options=self.options))

    def remove(self, name: str) -> None:
        """Queue a cookie removal."""
        self.writes.append(CookieWrite(name=name, value=None, options=self.options))

    def pending(self, name: str) -> CookieWrite | None:
        """Return the latest queued write for a cookie, if any."""
        for write in reversed(self.writes):
            if write.name == name:
                return write
        return None

    def apply(self, response: Response) -> None:
        """Copy queued writes onto a response, latest write per cookie wins."""
        latest: dict[str, CookieWrite] = {}
        for write in self.writes:
            latest[write.name] = write
        for write in latest.values():
            options = write.options
            if write.value is None:
                response.delete_cookie(
                    write.name,
                    path=options.path,
                    domain=options.domain,
                    secure=options.secure,
                    httponly=options.httponly,
                    samesite=options.samesite,
                )
                continue
            response.set_cookie(
                write.name,
                write.value,
                max_age=options.max_age,
                path=options.path,
                domain=options.domain,
                secure=options.secure,
                httponly=options.httponly,
                samesite=options.samesite,
            )


class IdentityProvider(Protocol):
    """Interface to the managed authentication service.

    Implementations return None when credentials are absent, expired beyond
    refresh, or rejected, and raise ``IdentityProviderError`` only when the
    service itself fails.
    """

    def session_from_cookies(
        self, cookies: Mapping[str, str], sink: CookieSink
    ) -> Session | None:
        """Return the session stored in cookies, refreshing it if needed."""

    def session_from_token(self, access_token: str) -> Session | None:
        """Return the session for a bearer access token."""

    def sign_in(self, email: str, password: str, sink: CookieSink) -> Session:
        """Sign in with a password and store the new session in cookies."""

    def sign_out(self, cookies: Mapping[str, str], sink: CookieSink) -> None:
        """End the session stored in cookies and clear them."""


@dataclass
class SessionResolver:
    """Resolves who is calling from request credentials."""

    identity_provider: IdentityProvider
    cookie_name: str

    def resolve(
        self, credentials: RequestCredentials, sink: CookieSink
    ) -> Session | None:
        """Return the caller's session, or None when there is none.

        A bearer token wins over cookies. Refreshed cookie sessions are
        written to ``sink``.
        """
        token = credentials.bearer_token
        if token is not None:
            session = self.identity_provider.session_from_token(token)
            if session is None:
                logger.info("Rejected bearer token")
            return session
        if not credentials.has_cookie(self.cookie_name):
            return None
        return self.identity_provider.session_from_cookies(credentials.cookies, sink)
