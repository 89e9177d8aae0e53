"""
Exceptions raised by the scheduling core.

The API layer maps each kind to a status code, see ``scheduling.api.exceptions``.
"""


class SchedulingError(Exception):
    """Base exception for all scheduling core errors."""

    code = "SCHEDULING_ERROR"
    retryable = False


class UnauthorizedError(SchedulingError):
    """Raised when the caller could not be identified."""

    code = "UNAUTHORIZED"


class NotFoundError(SchedulingError):
    """Raised when a card, session, lesson or deck does not exist or is not visible to the caller."""

    code = "NOT_FOUND"


class InvalidArgumentError(SchedulingError):
    """Raised for malformed ratings, deck-id lists or limits, before any state is touched."""

    code = "VALIDATION_ERROR"


class InvalidStateError(SchedulingError):
    """Raised when an operation targets a session in the wrong lifecycle state."""

    code = "INVALID_STATE"


class ConflictError(SchedulingError):
    """Raised when an optimistic-concurrency write loses to another writer."""

    code = "CONFLICT"
    retryable = True
