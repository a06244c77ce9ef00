from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations.

    ``code`` is a stable identifier clients can branch on without parsing the message.
    """

    code = "domain_error"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "validation_error"


class AuthenticationError(DomainError):
    """Raised when no identity is attached to the request."""

    code = "unauthorized"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action or does not own the resource."""

    code = "forbidden"


class NotFoundError(DomainError):
    code = "not_found"


class InvalidStateError(DomainError):
    """Raised when an operation is not allowed in the entity's current state."""

    code = "invalid_state"


class ConflictError(DomainError):
    """Raised when a concurrent writer won the race; the whole operation may be retried."""

    code = "conflict"


class AlreadyCheckedInError(DomainError):
    code = "already_checked_in"

    def __init__(self, message: str, record: Optional[Any] = None):
        super().__init__(message)
        self.record = record


class AlreadyCheckedOutError(DomainError):
    code = "already_checked_out"

    def __init__(self, message: str, record: Optional[Any] = None):
        super().__init__(message)
        self.record = record
