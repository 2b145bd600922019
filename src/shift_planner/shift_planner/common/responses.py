from __future__ import annotations

import logging

from flask import jsonify

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    ImportValidationError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)
from .datetime_utils import iso_or_none

logger = logging.getLogger(__name__)


def ok(data=None, *, status: int = 200, **extra):
    body = {"success": True}
    if data is not None:
        body["data"] = data
    body.update(extra)
    return jsonify(body), status


def error(message: str, status: int, **extra):
    body = {"success": False, "message": message}
    body.update(extra)
    return jsonify(body), status


def domain_error(e: DomainError):
    """Map a domain exception to its JSON error response."""

    if isinstance(e, RateLimitError):
        return error(
            str(e),
            429,
            remainingAttempts=0,
            nextAttemptAllowed=iso_or_none(e.next_attempt_allowed),
        )
    if isinstance(e, AuthenticationError):
        extra = {}
        if e.remaining_attempts is not None:
            extra["remainingAttempts"] = e.remaining_attempts
        return error(str(e), 401, **extra)
    if isinstance(e, AuthorizationError):
        return error(str(e), 403)
    if isinstance(e, NotFoundError):
        return error(str(e), 404)
    if isinstance(e, ConflictError):
        return error(str(e), 409)
    if isinstance(e, ImportValidationError):
        return error(str(e), 400, errors=e.errors)
    if isinstance(e, ValidationError):
        return error(str(e), 400)
    return error(str(e), 400)


def server_error(message: str):
    logger.exception(message)
    return error(message, 500)
