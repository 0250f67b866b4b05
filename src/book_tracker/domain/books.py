"""Domain models for the book library."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class BookStatus(StrEnum):
    """Reading status of a book."""

    READING = "reading"
    COMPLETED = "completed"
    WISHLIST = "wishlist"

    @classmethod
    def parse(cls, raw: object) -> "BookStatus | None":
        """Return the status for a raw value, or None when it is not a valid one."""
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str):
            return None
        try:
            return cls(raw)
        except ValueError:
            return None


@dataclass(frozen=True)
class Book:
    """Represents a book owned by a single user."""

    id: UUID
    user_id: UUID
    title: str
    author: str
    status: BookStatus
    created_at: datetime


@dataclass(frozen=True)
class BookQuery:
    """An owner-scoped listing query, always ordered newest first."""

    user_id: UUID
    status: BookStatus | None = None
    search: str | None = None


@dataclass(frozen=True)
class NewBook:
    """Validated fields for a book that is about to be created."""

    title: str
    author: str
    status: BookStatus


@dataclass(frozen=True)
class BookChanges:
    """Validated partial update for a book."""

    title: str | None = None
    author: str | None = None
    status: BookStatus | None = None

    def as_payload(self) -> dict[str, object]:
        """Return only the fields that are being changed."""
        payload: dict[str, object] = {}
        if self.title is not None:
            payload["title"] = self.title
        if self.author is not None:
            payload["author"] = self.author
        if self.status is not None:
            payload["status"] = self.status.value
        return payload
