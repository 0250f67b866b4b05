"""Application error types, each mapped to an HTTP status code."""


class BookTrackerError(Exception):
    """Base class for errors surfaced to API callers as ``{"error": message}``."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnauthenticatedError(BookTrackerError):
    """The request carries no valid session."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class RecordNotFoundError(BookTrackerError):
    """The record does not exist or belongs to another user."""

    status_code = 404

    def __init__(self, message: str = "Book not found or unauthorized") -> None:
        super().__init__(message)


class BookValidationError(BookTrackerError):
    """Request input failed validation."""

    status_code = 400


class InvalidCredentialsError(BookTrackerError):
    """Sign-in was rejected by the identity provider."""

    status_code = 400

    def __init__(self, message: str = "Invalid login credentials") -> None:
        super().__init__(message)


class BackendError(BookTrackerError):
    """The data backend reported a failure; the message is passed through."""

    status_code = 500


class IdentityProviderError(BookTrackerError):
    """The identity provider could not be reached or failed unexpectedly."""

    status_code = 500

    def __init__(self, message: str = "Authentication service unavailable") -> None:
        super().__init__(message)
