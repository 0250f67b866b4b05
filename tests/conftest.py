"""Shared test fixtures."""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from book_tracker.api.app import create_app
from book_tracker.config import Settings
from book_tracker.containers import AppContainer, build_gate_policy
from book_tracker.domain.auth import Session
from book_tracker.domain.books import Book, BookQuery, BookStatus
from book_tracker.errors import IdentityProviderError, InvalidCredentialsError
from book_tracker.services.access import RecordAccessGuard
from book_tracker.services.books import BookRepository
from book_tracker.services.sessions import (
    CookieSink,
    IdentityProvider,
    SessionResolver,
)

AUTH_COOKIE = "sb-auth-token"


@dataclass
class InMemoryBookRepository(BookRepository):
    """In-memory book repository for tests.

    Lookups by id are not scoped by owner, so ownership checks in the
    services are what keep users apart.
    """

    books: dict[UUID, Book] = field(default_factory=dict)
    created_count: int = 0

    def list_books(self, query: BookQuery) -> list[Book]:
        results = [
            book for book in self.books.values() if book.user_id == query.user_id
        ]
        if query.status is not None:
            results = [book for book in results if book.status == query.status]
        if query.search:
            needle = query.search.casefold()
            results = [
                book
                for book in results
                if needle in book.title.casefold() or needle in book.author.casefold()
            ]
        return sorted(results, key=lambda book: book.created_at, reverse=True)

    def get_book(self, book_id: UUID) -> Book | None:
        return self.books.get(book_id)

    def create_book(self, payload: dict[str, object]) -> Book:
        self.created_count += 1
        book = Book(
            id=uuid4(),
            user_id=UUID(str(payload["user_id"])),
            title=str(payload["title"]),
            author=str(payload["author"]),
            status=BookStatus(str(payload["status"])),
            created_at=datetime(2024, 1, 1, tzinfo=UTC)
            + timedelta(seconds=self.created_count),
        )
        self.books[book.id] = book
        return book

    def update_book(
        self, book_id: UUID, user_id: UUID, payload: dict[str, object]
    ) -> Book | None:
        current = self.books.get(book_id)
        if current is None or current.user_id != user_id:
            return None
        updated = replace(
            current,
            title=str(payload.get("title", current.title)),
            author=str(payload.get("author", current.author)),
            status=BookStatus(str(payload.get("status", current.status))),
        )
        self.books[book_id] = updated
        return updated

    def delete_book(self, book_id: UUID, user_id: UUID) -> bool:
        current = self.books.get(book_id)
        if current is None or current.user_id != user_id:
            return False
        del self.books[book_id]
        return True


@dataclass
class FakeIdentityProvider(IdentityProvider):
    """Identity provider that treats cookie values as access tokens."""

    cookie_name: str = AUTH_COOKIE
    users_by_token: dict[str, UUID] = field(default_factory=dict)
    refreshes: dict[str, str] = field(default_factory=dict)
    passwords: dict[str, tuple[str, str]] = field(default_factory=dict)
    failing: bool = False
    lookups: int = 0
    signed_out: list[str] = field(default_factory=list)

    def register(self, token: str | None = None) -> tuple[str, UUID]:
        """Create a user with a valid token and return both."""
        access_token = token or f"token-{uuid4()}"
        user_id = uuid4()
        self.users_by_token[access_token] = user_id
        return access_token, user_id

    def session_from_cookies(
        self, cookies: Mapping[str, str], sink: CookieSink
    ) -> Session | None:
        self._check()
        token = cookies.get(self.cookie_name)
        if token in self.refreshes:
            token = self.refreshes[token]
            sink.set(self.cookie_name, token)
        return self._session(token)

    def session_from_token(self, access_token: str) -> Session | None:
        self._check()
        return self._session(access_token)

    def sign_in(self, email: str, password: str, sink: CookieSink) -> Session:
        self._check()
        expected = self.passwords.get(email)
        if expected is None or expected[0] != password:
            raise InvalidCredentialsError()
        token = expected[1]
        sink.set(self.cookie_name, token)
        session = self._session(token)
        assert session is not None
        return session

    def sign_out(self, cookies: Mapping[str, str], sink: CookieSink) -> None:
        self.signed_out.append(cookies.get(self.cookie_name, ""))
        sink.remove(self.cookie_name)

    def _check(self) -> None:
        self.lookups += 1
        if self.failing:
            raise IdentityProviderError()

    def _session(self, token: str | None) -> Session | None:
        if token is None:
            return None
        user_id = self.users_by_token.get(token)
        if user_id is None:
            return None
        return Session(access_token=token, user_id=user_id)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_anon_key="anon-key",
        auth_cookie_name=AUTH_COOKIE,
        cookie_secure=False,
    )


@pytest.fixture
def identity_provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def book_repository() -> InMemoryBookRepository:
    return InMemoryBookRepository()


@pytest.fixture
def container(
    settings: Settings,
    identity_provider: FakeIdentityProvider,
    book_repository: InMemoryBookRepository,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        identity_provider=identity_provider,
        session_resolver=SessionResolver(
            identity_provider, cookie_name=settings.auth_cookie_name
        ),
        access_guard=RecordAccessGuard(),
        gate_policy=build_gate_policy(settings),
        book_repository_factory=lambda _session: book_repository,
        close_resources=close_resources,
    )


@pytest.fixture
def client(container: AppContainer) -> TestClient:
    return TestClient(create_app(container))


def bearer(token: str) -> dict[str, str]:
    """Return an Authorization header for a token."""
    return {"Authorization": f"Bearer {token}"}
