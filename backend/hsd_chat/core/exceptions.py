"""
Custom exceptions for the application.

Every error carries a stable ``code`` that the API layer returns to clients.
"""

from typing import Any, Optional


class ChatAppError(Exception):
    """Base exception for hsd_chat."""

    code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str, details: Optional[Any] = None, code: Optional[str] = None):
        self.message = message
        self.details = details
        if code:
            self.code = code
        super().__init__(message)


class NotFoundError(ChatAppError):
    """Resource not found (or not owned by the caller)."""

    code = "CHAT_NOT_FOUND"


class DuplicateError(ChatAppError):
    """Duplicate resource detected."""

    code = "DUPLICATE_ENTRY"


class ValidationError(ChatAppError):
    """Validation error."""

    code = "VALIDATION_FAILED"


class InvalidArgumentError(ValidationError):
    """Pagination or other caller-supplied argument out of range."""

    code = "INVALID_PAGINATION"


class InvalidTitleError(ValidationError):
    """Chat title empty or too long after trimming."""

    code = "INVALID_TITLE"


class AuthenticationError(ChatAppError):
    """Authentication failed."""

    code = "INVALID_TOKEN"


class AuthorizationError(ChatAppError):
    """Authorization failed."""

    code = "ACCESS_DENIED"


class InfrastructureError(ChatAppError):
    """Infrastructure-related error (DB, external services, etc.)."""

    pass


class StorageError(InfrastructureError):
    """Document store call failed (timeout, connectivity, constraint)."""

    code = "DATABASE_ERROR"
