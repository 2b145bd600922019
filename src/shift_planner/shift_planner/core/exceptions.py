from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when the requested record does not exist."""


class ConflictError(DomainError):
    """Raised when the target cell or record is already occupied or finalized."""


class AuthenticationError(DomainError):
    """Raised when login credentials or reset tokens are invalid."""

    def __init__(self, message: str, *, remaining_attempts: Optional[int] = None):
        super().__init__(message)
        self.remaining_attempts = remaining_attempts


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class RateLimitError(AuthenticationError):
    """Raised while an account is locked out after too many failed logins."""

    def __init__(self, message: str, *, next_attempt_allowed: Optional[datetime] = None):
        super().__init__(message, remaining_attempts=0)
        self.next_attempt_allowed = next_attempt_allowed


class ImportValidationError(ValidationError):
    """Raised when an import payload contains unsupported characters.

    `errors` holds one dict per offending row/field:
    {"row": 1, "field": "name", "value": "...", "invalid_chars": ["@"]}.
    """

    def __init__(self, message: str, errors: Sequence[dict]):
        super().__init__(message)
        self.errors = list(errors)
