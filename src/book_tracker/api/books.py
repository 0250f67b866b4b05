"""Book API endpoints."""

from fastapi import APIRouter, Depends, Query, status

from book_tracker.api.dependencies import get_book_service, require_session
from book_tracker.api.models import CreateBookRequest, UpdateBookRequest
from book_tracker.domain.auth import Session
from book_tracker.domain.books import Book
from book_tracker.errors import BookValidationError
from book_tracker.services.books import (
    BookService,
    validate_changes,
    validate_new_book,
)

router = APIRouter(prefix="/api/books", tags=["books"])


@router.get("")
def list_books(
    status_filter: str | None = Query(default=None, alias="status"),
    search: str | None = None,
    session: Session = Depends(require_session),
    service: BookService = Depends(get_book_service),
) -> dict[str, object]:
    """Return the caller's books, newest first."""
    books = service.list_books(session, status=status_filter, search=search)
    return {"books": [serialize_book(book) for book in books]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_book(
    payload: CreateBookRequest,
    session: Session = Depends(require_session),
    service: BookService = Depends(get_book_service),
) -> dict[str, object]:
    """Create a book owned by the caller."""
    new_book = validate_new_book(payload.title, payload.author, payload.status)
    book = service.create_book(session, new_book)
    return {"book": serialize_book(book)}


@router.delete("")
def delete_book_by_query(
    book_id: str | None = Query(default=None, alias="id"),
    session: Session = Depends(require_session),
    service: BookService = Depends(get_book_service),
) -> dict[str, object]:
    """Delete a book identified by the ``id`` query parameter."""
    if not book_id:
        raise BookValidationError("Book ID is required")
    service.delete_book(session, book_id)
    return {"success": True}


@router.get("/{book_id}")
def get_book(
    book_id: str,
    session: Session = Depends(require_session),
    service: BookService = Depends(get_book_service),
) -> dict[str, object]:
    """Return one of the caller's books."""
    return {"book": serialize_book(service.get_book(session, book_id))}


@router.patch("/{book_id}")
def update_book(
    book_id: str,
    payload: UpdateBookRequest | None = None,
    session: Session = Depends(require_session),
    service: BookService = Depends(get_book_service),
) -> dict[str, object]:
    """Apply a partial update to one of the caller's books."""
    payload = payload or UpdateBookRequest()
    changes = validate_changes(payload.title, payload.author, payload.status)
    book = service.update_book(session, book_id, changes)
    return {"book": serialize_book(book)}


@router.delete("/{book_id}")
def delete_book(
    book_id: str,
    session: Session = Depends(require_session),
    service: BookService = Depends(get_book_service),
) -> dict[str, str]:
    """Permanently delete one of the caller's books."""
    service.delete_book(session, book_id)
    return {"message": "Book deleted successfully"}


def serialize_book(book: Book) -> dict[str, object]:
    """Render a book as JSON-compatible data."""
    return {
        "id": str(book.id),
        "user_id": str(book.user_id),
        "title": book.title,
        "author": book.author,
        "status": book.status.value,
        "created_at": book.created_at.isoformat(),
    }
