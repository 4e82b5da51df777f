from __future__ import annotations

from .enums import ClockInFailure


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced shift, template, session or location does not exist."""


class ClockInRejected(DomainError):
    """Raised when a clock-in attempt fails a site or schedule check."""

    def __init__(self, failure: ClockInFailure, message: str):
        super().__init__(message)
        self.failure = failure


class PersistenceError(DomainError):
    """Raised when the store is unavailable or a batch fails.

    A failed batch is never partially committed; callers may retry.
    """

    retryable = True
