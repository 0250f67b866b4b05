"""Tests for the book service, query builder, and validation."""

from uuid import uuid4

import pytest

from book_tracker.domain.auth import Session
from book_tracker.domain.books import BookChanges, BookStatus, NewBook
from book_tracker.errors import (
    BookValidationError,
    RecordNotFoundError,
    UnauthenticatedError,
)
from book_tracker.services.access import RecordAccessGuard
from book_tracker.services.books import (
    BookService,
    build_book_query,
    parse_book_id,
    validate_changes,
    validate_new_book,
)
from tests.conftest import InMemoryBookRepository


def _service() -> tuple[BookService, InMemoryBookRepository]:
    repository = InMemoryBookRepository()
    return BookService(repository, RecordAccessGuard()), repository


def _session() -> Session:
    return Session(access_token=f"token-{uuid4()}", user_id=uuid4())


def _add(  # type: ignore[no-untyped-def]
    service: BookService, session: Session, title: str, author: str, status: str
):
    return service.create_book(
        session, NewBook(title=title, author=author, status=BookStatus(status))
    )


def test_build_query_ignores_invalid_status_and_blank_search() -> None:
    user_id = uuid4()

    query = build_book_query(user_id, status="foo", search="   ")

    assert query.user_id == user_id
    assert query.status is None
    assert query.search is None


def test_build_query_keeps_valid_filters() -> None:
    query = build_book_query(uuid4(), status="completed", search="  dune ")

    assert query.status is BookStatus.COMPLETED
    assert query.search == "dune"


def test_validate_new_book_trims_fields() -> None:
    new_book = validate_new_book("  Dune ", " Frank Herbert ", "reading")

    assert new_book == NewBook("Dune", "Frank Herbert", BookStatus.READING)


@pytest.mark.parametrize(
    ("title", "author", "status", "message"),
    [
        ("", "Herbert", "reading", "Title and author are required"),
        ("Dune", None, "reading", "Title and author are required"),
        ("   ", "Herbert", "reading", "Title and author are required"),
        ("Dune", "Herbert", "finished", "Invalid status"),
        ("Dune", "Herbert", None, "Invalid status"),
    ],
)
def test_validate_new_book_rejects_bad_input(
    title, author, status, message  # type: ignore[no-untyped-def]
) -> None:
    with pytest.raises(BookValidationError) as excinfo:
        validate_new_book(title, author, status)

    assert excinfo.value.message == message


def test_validate_changes_requires_a_field() -> None:
    with pytest.raises(BookValidationError) as excinfo:
        validate_changes()

    assert excinfo.value.message == "No valid fields to update"


def test_validate_changes_rejects_invalid_values() -> None:
    with pytest.raises(BookValidationError):
        validate_changes(title="  ")
    with pytest.raises(BookValidationError):
        validate_changes(status="done")


def test_validate_changes_payload_contains_only_changed_fields() -> None:
    changes = validate_changes(author=" Le Guin ", status="wishlist")

    assert changes.as_payload() == {"author": "Le Guin", "status": "wishlist"}


def test_parse_book_id_rejects_non_uuid() -> None:
    book_id = uuid4()

    assert parse_book_id(str(book_id)) == book_id
    assert parse_book_id("../other") is None
    assert parse_book_id(None) is None


def test_create_then_list_returns_newest_first() -> None:
    service, _ = _service()
    session = _session()
    _add(service, session, "Neuromancer", "William Gibson", "completed")
    created = _add(service, session, "Dune", "Herbert", "reading")

    books = service.list_books(session)

    assert books[0] == created
    assert books[0].id is not None
    assert books[0].created_at > books[1].created_at


def test_status_filter_and_permissive_invalid_status() -> None:
    service, _ = _service()
    session = _session()
    _add(service, session, "A", "One", "reading")
    completed = _add(service, session, "B", "Two", "completed")
    _add(service, session, "C", "Three", "wishlist")

    assert service.list_books(session, status="completed") == [completed]
    assert len(service.list_books(session, status="foo")) == 3


def test_search_matches_title_or_author_case_insensitively() -> None:
    service, _ = _service()
    session = _session()
    by_title = _add(service, session, "Dune", "Frank Herbert", "reading")
    by_author = _add(service, session, "Sandworms", "John Dune", "wishlist")
    _add(service, session, "Emma", "Jane Austen", "completed")

    results = service.list_books(session, search="dune")

    assert set(book.id for book in results) == {by_title.id, by_author.id}


def test_list_only_returns_callers_books() -> None:
    service, _ = _service()
    alice, bob = _session(), _session()
    _add(service, alice, "Dune", "Herbert", "reading")

    assert service.list_books(bob) == []


def test_foreign_book_cannot_be_read_updated_or_deleted() -> None:
    service, repository = _service()
    alice, bob = _session(), _session()
    book = _add(service, alice, "Dune", "Herbert", "reading")

    with pytest.raises(RecordNotFoundError):
        service.get_book(bob, book.id)
    with pytest.raises(RecordNotFoundError):
        service.update_book(bob, book.id, BookChanges(title="Stolen"))
    with pytest.raises(RecordNotFoundError):
        service.delete_book(bob, book.id)

    assert repository.books[book.id] == book


def test_owner_can_update_and_delete() -> None:
    service, repository = _service()
    session = _session()
    book = _add(service, session, "Dune", "Herbert", "reading")

    updated = service.update_book(
        session, str(book.id), BookChanges(status=BookStatus.COMPLETED)
    )
    service.delete_book(session, book.id)

    assert updated.status is BookStatus.COMPLETED
    assert updated.created_at == book.created_at
    assert book.id not in repository.books


def test_repeated_delete_is_not_found_each_time() -> None:
    service, _ = _service()
    session = _session()
    book = _add(service, session, "Dune", "Herbert", "reading")
    service.delete_book(session, book.id)

    for _ in range(2):
        with pytest.raises(RecordNotFoundError):
            service.delete_book(session, book.id)


def test_invalid_id_is_not_found() -> None:
    service, _ = _service()

    with pytest.raises(RecordNotFoundError):
        service.get_book(_session(), "not-a-uuid")


def test_missing_session_is_rejected() -> None:
    service, repository = _service()

    with pytest.raises(UnauthenticatedError):
        service.list_books(None)
    with pytest.raises(UnauthenticatedError):
        service.create_book(None, NewBook("Dune", "Herbert", BookStatus.READING))
    with pytest.raises(UnauthenticatedError):
        service.delete_book(None, uuid4())

    assert repository.books == {}
