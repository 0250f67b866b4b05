"""Ownership rules for book records."""

import logging
from dataclasses import dataclass
from uuid import UUID

from book_tracker.domain.access import (
    AccessDecision,
    Allowed,
    Denied,
    DenialReason,
    Operation,
)
from book_tracker.domain.auth import Session
from book_tracker.domain.books import Book
from book_tracker.errors import RecordNotFoundError, UnauthenticatedError

logger = logging.getLogger(__name__)

_RECORD_OPERATIONS = frozenset({Operation.READ, Operation.UPDATE, Operation.DELETE})


@dataclass(frozen=True)
class RecordAccessGuard:
    """Decides whether a session may act on a book."""

    def authorize(
        self,
        session: Session | None,
        operation: Operation,
        target: Book | None = None,
    ) -> AccessDecision:
        """Return whether ``session`` may perform ``operation`` on ``target``.

        Record operations need the looked-up target. A missing target and a
        target owned by another user are denied with the same reason.
        """
        if session is None:
            return Denied(DenialReason.UNAUTHENTICATED)
        if operation not in _RECORD_OPERATIONS:
            return Allowed()
        if target is None:
            return Denied(DenialReason.NOT_FOUND)
        if target.user_id != session.user_id:
            logger.warning(
                "Denied access to foreign book",
                extra={"operation": operation.value, "book_id": str(target.id)},
            )
            return Denied(DenialReason.NOT_FOUND)
        return Allowed()

    def require(
        self,
        session: Session | None,
        operation: Operation,
        target: Book | None = None,
    ) -> None:
        """Raise the matching error unless the operation is allowed."""
        decision = self.authorize(session, operation, target)
        if isinstance(decision, Allowed):
            return
        if decision.reason is DenialReason.UNAUTHENTICATED:
            raise UnauthenticatedError()
        raise RecordNotFoundError()

    def scope(self, session: Session) -> UUID:
        """Return the owner id every query for this session is filtered by."""
        return session.user_id

    def claim_ownership(
        self, session: Session, payload: dict[str, object]
    ) -> dict[str, object]:
        """Return ``payload`` with its owner forced to the session's user."""
        return {**payload, "user_id": str(session.user_id)}
