"""Supabase implementation for book persistence."""

import logging
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

import httpx
from supabase import Client, ClientOptions, PostgrestAPIError, create_client

from book_tracker.domain.books import Book, BookQuery, BookStatus
from book_tracker.errors import BackendError
from book_tracker.services.books import BookRepository

logger = logging.getLogger(__name__)

_TABLE = "books"
_SEARCH_COLUMNS = ("title", "author")


@dataclass
class SupabaseBookRepository(BookRepository):
    """Supabase-backed repository for books.

    The client should carry the caller's access token so row-level security
    applies beneath the ownership checks done by the services.
    """

    client: Client

    @classmethod
    def for_access_token(
        cls,
        supabase_url: str,
        supabase_anon_key: str,
        access_token: str,
        http_client: httpx.Client | None = None,
    ) -> "SupabaseBookRepository":
        """Create a repository whose queries run as the token's user.

        Pass a shared ``http_client`` so per-request clients do not open their
        own connection pools.
        """
        client = create_client(
            supabase_url,
            supabase_anon_key,
            options=ClientOptions(
                auto_refresh_token=False,
                persist_session=False,
                httpx_client=http_client,
            ),
        )
        client.postgrest.auth(access_token)
        return cls(client=client)

    def list_books(self, query: BookQuery) -> list[Book]:
        """Return books matching the query, newest first."""
        request = (
            self.client.table(_TABLE).select("*").eq("user_id", str(query.user_id))
        )
        if query.status is not None:
            request = request.eq("status", query.status.value)
        if query.search:
            request = request.or_(ilike_any_filter(_SEARCH_COLUMNS, query.search))
        request = request.order("created_at", desc=True)
        response = _execute(request, "list books")
        return [_parse_book(row) for row in response.data or []]

    def get_book(self, book_id: UUID) -> Book | None:
        """Return a book by id, if visible."""
        request = (
            self.client.table(_TABLE).select("*").eq("id", str(book_id)).limit(1)
        )
        response = _execute(request, "get book")
        if not response.data:
            return None
        return _parse_book(response.data[0])

    def create_book(self, payload: dict[str, object]) -> Book:
        """Insert a book and return it with its generated fields."""
        request = self.client.table(_TABLE).insert(payload)
        response = _execute(request, "create book")
        if not response.data:
            raise BackendError("Failed to create book")
        return _parse_book(response.data[0])

    def update_book(
        self, book_id: UUID, user_id: UUID, payload: dict[str, object]
    ) -> Book | None:
        """Update a book owned by ``user_id``; None when nothing matched."""
        request = (
            self.client.table(_TABLE)
            .update(payload)
            .eq("id", str(book_id))
            .eq("user_id", str(user_id))
        )
        response = _execute(request, "update book")
        if not response.data:
            return None
        return _parse_book(response.data[0])

    def delete_book(self, book_id: UUID, user_id: UUID) -> bool:
        """Delete a book owned by ``user_id``; False when nothing matched."""
        request = (
            self.client.table(_TABLE)
            .delete()
            .eq("id", str(book_id))
            .eq("user_id", str(user_id))
        )
        response = _execute(request, "delete book")
        return bool(response.data)


def ilike_any_filter(columns: tuple[str, ...], search: str) -> str:
    """Render a PostgREST ``or`` filter matching ``search`` in any column.

    LIKE wildcards in the search text are escaped, then the pattern is quoted
    so commas and parentheses cannot break the filter syntax.
    """
    escaped = search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    pattern = f"%{escaped}%"
    quoted = '"' + pattern.replace("\\", "\\\\").replace('"', '\\"') + '"'
    return ",".join(f"{column}.ilike.{quoted}" for column in columns)


def _execute(request, action: str):  # type: ignore[no-untyped-def]
    """Run a PostgREST request, translating API errors."""
    try:
        return request.execute()
    except PostgrestAPIError as exc:
        logger.warning(
            "Supabase request failed",
            extra={"action": action, "code": exc.code},
        )
        raise BackendError(exc.message or f"Failed to {action}") from exc
    except httpx.HTTPError as exc:
        logger.warning(
            "Supabase unreachable",
            extra={"action": action, "error": type(exc).__name__},
        )
        raise BackendError(f"Failed to {action}") from exc


def _parse_book(row: dict[str, object]) -> Book:
    """Parse a book row into a domain model."""
    return Book(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        title=str(row.get("title", "")),
        author=str(row.get("author", "")),
        status=BookStatus(str(row["status"])),
        created_at=datetime.fromisoformat(str(row["created_at"])),
    )
