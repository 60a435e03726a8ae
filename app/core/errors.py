"""Domain error taxonomy and store error classification."""

from __future__ import annotations

from google.api_core import exceptions as google_exceptions


class PameKidsError(Exception):
    """Base class for errors surfaced by the services."""

    code = "unknown"
    default_message = "An unknown error occurred"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class RemoteUnavailable(PameKidsError):
    """The document store or a remote API could not be reached."""

    code = "unavailable"
    default_message = "Database is currently unavailable. Please check your internet connection and try again."


class NotFound(PameKidsError):
    """A single requested entity does not exist."""

    code = "not-found"
    default_message = "The requested document does not exist."


class PermissionDenied(PameKidsError):
    """The caller is not allowed to perform a mutating operation."""

    code = "permission-denied"
    default_message = (
        "You do not have permission to perform this operation. Please make sure you are logged in as an admin."
    )


class ValidationError(PameKidsError):
    """Malformed input, rejected before any store call."""

    code = "invalid-argument"
    default_message = "The request data is invalid."


class UnknownStoreError(PameKidsError):
    """A store failure that fits no other category."""


_PERMISSION_ERRORS = (
    google_exceptions.PermissionDenied,
    google_exceptions.Forbidden,
    google_exceptions.Unauthenticated,
    google_exceptions.Unauthorized,
)
_UNAVAILABLE_ERRORS = (
    google_exceptions.ServiceUnavailable,
    google_exceptions.DeadlineExceeded,
    google_exceptions.RetryError,
    google_exceptions.TooManyRequests,
    google_exceptions.InternalServerError,
    ConnectionError,
    TimeoutError,
)


def classify_store_error(exc: BaseException) -> PameKidsError:
    """Map an SDK/transport exception onto the domain taxonomy.

    Errors that are already classified pass through unchanged so the mapping
    can be applied at any layer without double wrapping.
    """
    if isinstance(exc, PameKidsError):
        return exc
    if isinstance(exc, _PERMISSION_ERRORS):
        return PermissionDenied()
    if isinstance(exc, google_exceptions.NotFound):
        return NotFound()
    if isinstance(exc, _UNAVAILABLE_ERRORS):
        return RemoteUnavailable()
    return UnknownStoreError(str(exc) or None)
