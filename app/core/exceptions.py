"""Application error taxonomy.

Every error carries an HTTP status, a stable machine-readable ``code`` and a
``retryable`` flag. ``retryable`` tells the client whether nothing was
committed (safe to repeat the request) or whether the operation already
happened / can never succeed with the same input.
"""
from typing import Any, Dict, Optional


class AppError(Exception):
    """Base class for errors raised by the service layer."""

    status_code: int = 500
    code: str = "INTERNAL_SERVER_ERROR"
    retryable: bool = False

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppError):
    """A referenced quiz, question, attempt, subject or mapping does not exist (404)."""

    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, resource: str, identifier: Any = None):
        message = f"{resource} not found." if identifier is None else f"{resource} not found: {identifier}"
        super().__init__(message, details={"resource": resource})


class InvalidStateError(AppError):
    """The operation conflicts with current state, e.g. an attempt that was already submitted (409)."""

    status_code = 409
    code = "INVALID_STATE"


class ValidationFailedError(AppError):
    status_code = 422
    code = "VALIDATION_ERROR"


class ForbiddenError(AppError):
    status_code = 403
    code = "FORBIDDEN"


class TransientStoreError(AppError):
    """Persistence failure; the transaction was rolled back so the whole request may be retried (503)."""

    status_code = 503
    code = "TRANSIENT_STORE_ERROR"
    retryable = True

    def __init__(self, message: str = "A storage error occurred. Nothing was saved; please retry."):
        super().__init__(message)
