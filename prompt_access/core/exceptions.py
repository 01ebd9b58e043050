"""
Exception hierarchy for permission and user operations.

Every error carries a message, an error code and a details dict so route
handlers can render a uniform JSON error body.
"""

from typing import Any, Dict, Optional


class PromptAccessError(Exception):
    """Base exception for all prompt-access errors."""

    status_code = 500

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


class NotFoundError(PromptAccessError):
    """Referenced user or override does not exist."""

    status_code = 404


class ConflictError(PromptAccessError):
    status_code = 409


class UnauthorizedError(PromptAccessError):
    """Caller did not present authorization evidence for a mutating operation."""

    status_code = 403


class StoreFailure(PromptAccessError):
    """Backing store call failed. The original exception is kept as __cause__."""

    status_code = 503


def create_error_response(exception: PromptAccessError) -> Dict[str, Any]:
    return {
        "error": {
            "code": exception.error_code,
            "message": exception.message,
            "details": exception.details,
        }
    }
