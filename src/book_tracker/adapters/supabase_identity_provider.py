"""Supabase Auth adapter that keeps sessions in cookies."""

import base64
import binascii
import json
import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import NoReturn
from uuid import UUID

import httpx
from supabase import AuthError, Client, ClientOptions, create_client

from book_tracker.domain.auth import Session
from book_tracker.errors import IdentityProviderError, InvalidCredentialsError
from book_tracker.services.sessions import CookieSink, IdentityProvider

logger = logging.getLogger(__name__)

# Same chunking and encoding scheme as @supabase/ssr, so cookies written by
# either side can be read by the other.
_CHUNK_SIZE = 3180
_BASE64_PREFIX = "base64-"


def encode_cookie_value(value: str) -> str:
    """Encode a stored session string for a cookie."""
    encoded = base64.urlsafe_b64encode(value.encode()).decode().rstrip("=")
    return _BASE64_PREFIX + encoded


def decode_cookie_value(raw: str) -> str | None:
    """Decode a cookie into a session JSON string; None when malformed."""
    value = raw
    if raw.startswith(_BASE64_PREFIX):
        body = raw[len(_BASE64_PREFIX) :]
        try:
            value = base64.urlsafe_b64decode(body + "=" * (-len(body) % 4)).decode()
        except (binascii.Error, UnicodeDecodeError, ValueError):
            return None
    try:
        data = json.loads(value)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    return value


@dataclass
class CookieSessionStorage:
    """Auth client storage that reads request cookies and writes to a sink."""

    cookie_name: str
    cookies: Mapping[str, str]
    sink: CookieSink

    def get_item(self, key: str) -> str | None:
        """Return the stored session for the auth client."""
        raw = self._read()
        return decode_cookie_value(raw) if raw else None

    def set_item(self, key: str, value: str) -> None:
        """Store a session, splitting it across cookies when too large."""
        encoded = encode_cookie_value(value)
        self._clear()
        if len(encoded) <= _CHUNK_SIZE:
            self.sink.set(self.cookie_name, encoded)
            return
        for index, start in enumerate(range(0, len(encoded), _CHUNK_SIZE)):
            self.sink.set(
                f"{self.cookie_name}.{index}", encoded[start : start + _CHUNK_SIZE]
            )

    def remove_item(self, key: str) -> None:
        """Clear the stored session."""
        self._clear()

    def _current(self) -> dict[str, str]:
        values = dict(self.cookies)
        for write in self.sink.writes:
            if write.value is None:
                values.pop(write.name, None)
            else:
                values[write.name] = write.value
        return values

    def _read(self) -> str | None:
        values = self._current()
        if values.get(self.cookie_name):
            return values[self.cookie_name]
        chunks = []
        index = 0
        while f"{self.cookie_name}.{index}" in values:
            chunks.append(values[f"{self.cookie_name}.{index}"])
            index += 1
        return "".join(chunks) or None

    def _clear(self) -> None:
        pattern = re.compile(rf"^{re.escape(self.cookie_name)}(\.\d+)?$")
        for name in sorted(self._current()):
            if pattern.match(name):
                self.sink.remove(name)


@dataclass
class SupabaseIdentityProvider(IdentityProvider):
    """Identity provider backed by Supabase Auth."""

    supabase_url: str
    supabase_anon_key: str
    cookie_name: str
    http_client: httpx.Client | None = None
    client_factory: Callable[[ClientOptions], Client] | None = None

    def session_from_cookies(
        self, cookies: Mapping[str, str], sink: CookieSink
    ) -> Session | None:
        """Return the session stored in cookies, refreshing it if expired."""
        storage = CookieSessionStorage(self.cookie_name, cookies, sink)
        client = self._client(storage)
        try:
            session = client.auth.get_session()
        except AuthError as exc:
            _raise_for_fault(exc, "get_session")
            logger.info(
                "Stored session rejected",
                extra={"status": getattr(exc, "status", None)},
            )
            storage.remove_item(self.cookie_name)
            return None
        except httpx.HTTPError as exc:
            _raise_unreachable(exc, "get_session")
        if session is None:
            return None
        return _to_session(session)

    def session_from_token(self, access_token: str) -> Session | None:
        """Return the session for a bearer access token."""
        client = self._client(None)
        try:
            response = client.auth.get_user(access_token)
        except AuthError as exc:
            _raise_for_fault(exc, "get_user")
            return None
        except httpx.HTTPError as exc:
            _raise_unreachable(exc, "get_user")
        if response is None or response.user is None:
            return None
        return Session(access_token=access_token, user_id=UUID(response.user.id))

    def sign_in(self, email: str, password: str, sink: CookieSink) -> Session:
        """Sign in with a password; the new session is written to ``sink``."""
        client = self._client(CookieSessionStorage(self.cookie_name, {}, sink))
        try:
            response = client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthError as exc:
            _raise_for_fault(exc, "sign_in_with_password")
            raise InvalidCredentialsError() from exc
        except httpx.HTTPError as exc:
            _raise_unreachable(exc, "sign_in_with_password")
        if response.session is None:
            raise InvalidCredentialsError()
        return _to_session(response.session)

    def sign_out(self, cookies: Mapping[str, str], sink: CookieSink) -> None:
        """Revoke the session stored in cookies and clear them."""
        storage = CookieSessionStorage(self.cookie_name, cookies, sink)
        client = self._client(storage)
        try:
            client.auth.sign_out()
        except AuthError as exc:
            _raise_for_fault(exc, "sign_out")
        except httpx.HTTPError as exc:
            _raise_unreachable(exc, "sign_out")
        finally:
            storage.remove_item(self.cookie_name)

    def _client(self, storage: CookieSessionStorage | None) -> Client:
        if storage is None:
            options = ClientOptions(
                auto_refresh_token=False,
                persist_session=False,
                httpx_client=self.http_client,
            )
        else:
            options = ClientOptions(
                storage=storage,
                auto_refresh_token=False,
                persist_session=True,
                httpx_client=self.http_client,
            )
        if self.client_factory is not None:
            return self.client_factory(options)
        return create_client(
            self.supabase_url, self.supabase_anon_key, options=options
        )


def _raise_for_fault(exc: AuthError, action: str) -> None:
    """Raise IdentityProviderError unless the provider merely rejected us."""
    status = getattr(exc, "status", None)
    if status is None or status == 0 or status >= 500:
        logger.exception("Supabase Auth call failed", extra={"action": action})
        raise IdentityProviderError() from exc


def _raise_unreachable(exc: httpx.HTTPError, action: str) -> NoReturn:
    """Raise IdentityProviderError for a transport failure."""
    logger.warning(
        "Supabase Auth unreachable",
        extra={"action": action, "error": type(exc).__name__},
    )
    raise IdentityProviderError() from exc


def _to_session(session) -> Session:  # type: ignore[no-untyped-def]
    """Convert a Supabase Auth session into a domain session."""
    expires_at = (
        datetime.fromtimestamp(session.expires_at, tz=UTC)
        if session.expires_at
        else None
    )
    return Session(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        user_id=UUID(str(session.user.id)),
        expires_at=expires_at,
    )
