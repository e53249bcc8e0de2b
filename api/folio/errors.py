"""Domain error taxonomy for the content lifecycle engine.

Services raise these; the exception handlers in main.py render them as
RFC 7807 problem responses.
"""

from __future__ import annotations


class FolioError(Exception):
    """Base class for all domain errors."""

    code: str = "ERROR"
    status_code: int = 500
    title: str = "Error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.title)
        self.detail = detail or self.title


class ValidationError(FolioError):
    """Unknown or malformed input, rejected before any mutation."""

    code = "VALIDATION"
    status_code = 400
    title = "Validation failed"


class InvalidTransitionError(ValidationError):
    """Requested state change is not in the transition table for the entity."""

    status_code = 409
    title = "Transition not allowed"


class AuthorizationError(FolioError):
    """Actor lacks the capability required for the operation."""

    code = "AUTHORIZATION"
    status_code = 403
    title = "Not authorized"


class NotFoundError(FolioError):
    code = "NOT_FOUND"
    status_code = 404
    title = "Not found"


class StorageError(FolioError):
    """Backing store failure. The detail is never exposed to clients."""

    code = "STORAGE"
    status_code = 500
    title = "Storage failure"
