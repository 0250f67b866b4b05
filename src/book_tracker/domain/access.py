"""Access decision models."""

from dataclasses import dataclass
from enum import StrEnum


class Operation(StrEnum):
    """Operations a caller can perform on book records."""

    CREATE = "create"
    LIST = "list"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


class DenialReason(StrEnum):
    """Why an operation was refused."""

    UNAUTHENTICATED = "unauthenticated"
    # Covers both a missing record and one owned by someone else.
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Allowed:
    """The operation may proceed."""


@dataclass(frozen=True)
class Denied:
    """The operation is refused."""

    reason: DenialReason


AccessDecision = Allowed | Denied
