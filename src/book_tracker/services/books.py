"""Services for managing a user's books."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from book_tracker.domain.access import Operation
from book_tracker.domain.auth import Session
from book_tracker.domain.books import Book, BookChanges, BookQuery, BookStatus, NewBook
from book_tracker.errors import BookValidationError, RecordNotFoundError
from book_tracker.services.access import RecordAccessGuard

logger = logging.getLogger(__name__)


class BookRepository(Protocol):
    """Persistence interface for books."""

    def list_books(self, query: BookQuery) -> list[Book]:
        """Return books matching the query, newest first."""

    def get_book(self, book_id: UUID) -> Book | None:
        """Return a book by id, if visible."""

    def create_book(self, payload: dict[str, object]) -> Book:
        """Insert a book and return it with its generated fields."""

    def update_book(
        self, book_id: UUID, user_id: UUID, payload: dict[str, object]
    ) -> Book | None:
        """Update a book owned by ``user_id``; None when nothing matched."""

    def delete_book(self, book_id: UUID, user_id: UUID) -> bool:
        """Delete a book owned by ``user_id``; False when nothing matched."""


def build_book_query(
    user_id: UUID, status: str | None = None, search: str | None = None
) -> BookQuery:
    """Build an owner-scoped listing query.

    Unknown status values are ignored rather than rejected. Blank searches
    are dropped.
    """
    cleaned_search = search.strip() if search else None
    return BookQuery(
        user_id=user_id,
        status=BookStatus.parse(status),
        search=cleaned_search or None,
    )


def validate_new_book(title: object, author: object, status: object) -> NewBook:
    """Validate fields for a new book."""
    clean_title = _clean_text(title)
    clean_author = _clean_text(author)
    if not clean_title or not clean_author:
        raise BookValidationError("Title and author are required")
    parsed_status = BookStatus.parse(status)
    if parsed_status is None:
        raise BookValidationError("Invalid status")
    return NewBook(title=clean_title, author=clean_author, status=parsed_status)


def validate_changes(
    title: object = None, author: object = None, status: object = None
) -> BookChanges:
    """Validate a partial update; None means the field is left unchanged."""
    if title is None and author is None and status is None:
        raise BookValidationError("No valid fields to update")
    clean_title = None
    if title is not None:
        clean_title = _clean_text(title)
        if not clean_title:
            raise BookValidationError("Title cannot be empty")
    clean_author = None
    if author is not None:
        clean_author = _clean_text(author)
        if not clean_author:
            raise BookValidationError("Author cannot be empty")
    parsed_status = None
    if status is not None:
        parsed_status = BookStatus.parse(status)
        if parsed_status is None:
            raise BookValidationError("Invalid status")
    return BookChanges(title=clean_title, author=clean_author, status=parsed_status)


def parse_book_id(raw: str | UUID | None) -> UUID | None:
    """Parse a book id, returning None for anything that is not a UUID."""
    if raw is None or isinstance(raw, UUID):
        return raw
    try:
        return UUID(raw.strip())
    except ValueError:
        return None


@dataclass
class BookService:
    """Application service for book operations on behalf of one caller."""

    repository: BookRepository
    guard: RecordAccessGuard

    def list_books(
        self,
        session: Session | None,
        status: str | None = None,
        search: str | None = None,
    ) -> list[Book]:
        """Return the caller's books, optionally filtered."""
        self.guard.require(session, Operation.LIST)
        query = build_book_query(self.guard.scope(session), status, search)
        return self.repository.list_books(query)

    def get_book(self, session: Session | None, book_id: str | UUID) -> Book:
        """Return one of the caller's books."""
        return self._find(session, Operation.READ, book_id)

    def create_book(self, session: Session | None, new_book: NewBook) -> Book:
        """Create a book owned by the caller."""
        self.guard.require(session, Operation.CREATE)
        payload = self.guard.claim_ownership(
            session,
            {
                "title": new_book.title,
                "author": new_book.author,
                "status": new_book.status.value,
            },
        )
        book = self.repository.create_book(payload)
        logger.info("Created book", extra={"book_id": str(book.id)})
        return book

    def update_book(
        self, session: Session | None, book_id: str | UUID, changes: BookChanges
    ) -> Book:
        """Apply a partial update to one of the caller's books."""
        target = self._find(session, Operation.UPDATE, book_id)
        updated = self.repository.update_book(
            target.id, self.guard.scope(session), changes.as_payload()
        )
        if updated is None:
            raise RecordNotFoundError()
        return updated

    def delete_book(self, session: Session | None, book_id: str | UUID) -> None:
        """Permanently delete one of the caller's books."""
        target = self._find(session, Operation.DELETE, book_id)
        if not self.repository.delete_book(target.id, self.guard.scope(session)):
            raise RecordNotFoundError()
        logger.info("Deleted book", extra={"book_id": str(target.id)})

    def _find(
        self, session: Session | None, operation: Operation, book_id: str | UUID
    ) -> Book:
        """Look up a book and check the caller owns it."""
        parsed_id = parse_book_id(book_id)
        target = None
        if session is not None and parsed_id is not None:
            target = self.repository.get_book(parsed_id)
        self.guard.require(session, operation, target)
        return target


def _clean_text(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip() or None
