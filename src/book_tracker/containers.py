"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import httpx

from book_tracker.adapters.supabase_book_repository import SupabaseBookRepository
from book_tracker.adapters.supabase_identity_provider import SupabaseIdentityProvider
from book_tracker.config import Settings
from book_tracker.domain.auth import Session
from book_tracker.services.access import RecordAccessGuard
from book_tracker.services.books import BookRepository
from book_tracker.services.gatekeeper import GatePolicy
from book_tracker.services.sessions import IdentityProvider, SessionResolver


@dataclass
class AppContainer:
    """Holds application-wide dependencies.

    Nothing here holds per-request state; repositories are built for each
    request from the caller's session and share one HTTP connection pool.
    """

    settings: Settings
    identity_provider: IdentityProvider
    session_resolver: SessionResolver
    access_guard: RecordAccessGuard
    gate_policy: GatePolicy
    book_repository_factory: Callable[[Session], BookRepository]
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    http_client = httpx.Client(
        timeout=resolved_settings.supabase_timeout_seconds, follow_redirects=True
    )
    identity_provider = SupabaseIdentityProvider(
        supabase_url=resolved_settings.supabase_url,
        supabase_anon_key=resolved_settings.supabase_anon_key,
        cookie_name=resolved_settings.auth_cookie_name,
        http_client=http_client,
    )

    def book_repository_factory(session: Session) -> BookRepository:
        return SupabaseBookRepository.for_access_token(
            resolved_settings.supabase_url,
            resolved_settings.supabase_anon_key,
            session.access_token,
            http_client=http_client,
        )

    async def close_resources() -> None:
        http_client.close()

    return AppContainer(
        settings=resolved_settings,
        identity_provider=identity_provider,
        session_resolver=SessionResolver(
            identity_provider, cookie_name=resolved_settings.auth_cookie_name
        ),
        access_guard=RecordAccessGuard(),
        gate_policy=build_gate_policy(resolved_settings),
        book_repository_factory=book_repository_factory,
        close_resources=close_resources,
    )


def build_gate_policy(settings: Settings) -> GatePolicy:
    """Create the gate policy for the configured page paths."""
    return GatePolicy(
        login_path=settings.login_path,
        dashboard_path=settings.dashboard_path,
    )
