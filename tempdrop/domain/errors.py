"""
Error Handling Module

Defines domain exceptions and error categories for the application.
Domain exceptions are pure and have no external dependencies.
Application exceptions carry the user-facing messaging used by the API.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Error category enumeration for structured error handling."""

    FILE_NOT_FOUND = "file_not_found"
    FILE_EXPIRED = "file_expired"
    INVALID_REQUEST = "invalid_request"
    INVALID_EXPIRATION = "invalid_expiration"
    INVALID_SIGNATURE = "invalid_signature"
    STORAGE_ERROR = "storage_error"
    SYSTEM_ERROR = "system_error"


# User-friendly error messages with actionable guidance
ERROR_MESSAGES: Dict[ErrorCategory, Dict[str, str]] = {
    ErrorCategory.FILE_NOT_FOUND: {
        "title": "File Not Found",
        "message": "The requested file does not exist or has already been deleted.",
        "action": "Check the link, or ask the sender to upload the file again.",
    },
    ErrorCategory.FILE_EXPIRED: {
        "title": "File Expired",
        "message": "This file has expired and is no longer available for download.",
        "action": "Ask the sender to upload the file again.",
    },
    ErrorCategory.INVALID_REQUEST: {
        "title": "Invalid Request",
        "message": "The request is missing required information or contains invalid data.",
        "action": "Please check your input and try again.",
    },
    ErrorCategory.INVALID_EXPIRATION: {
        "title": "Unsupported Expiration",
        "message": "Files can be kept for 10 minutes, 1 hour, 24 hours or 7 days.",
        "action": "Choose one of the supported expiration options.",
    },
    ErrorCategory.INVALID_SIGNATURE: {
        "title": "Upload Link Invalid",
        "message": "The upload link is invalid or has expired.",
        "action": "Request a new upload link and try again.",
    },
    ErrorCategory.STORAGE_ERROR: {
        "title": "Storage Error",
        "message": "The file storage backend could not complete the operation.",
        "action": "Please try again in a moment.",
    },
    ErrorCategory.SYSTEM_ERROR: {
        "title": "System Error",
        "message": "An unexpected error occurred while processing your request.",
        "action": "Please try again later. If the problem persists, contact support.",
    },
}


# ============================================================================
# Domain Exceptions (Pure - No External Dependencies)
# ============================================================================

class DomainError(Exception):
    """
    Base exception for all domain errors.

    Domain exceptions can optionally wrap original errors for context.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        """
        Initialize domain error.

        Args:
            message: Error message
            original_error: Optional original exception that caused this error
        """
        super().__init__(message)
        self.original_error = original_error


class FileRecordNotFoundError(DomainError):
    """Raised when no record exists for an id or object path."""
    pass


class FileExpiredError(DomainError):
    """
    Raised when a record exists but is past its expiration time.

    Distinct from FileRecordNotFoundError so clients can tell an expired
    file apart from one that never existed.
    """
    pass


class ValidationError(DomainError):
    """Raised when input is malformed or out of range."""
    pass


class InvalidExpirationError(ValidationError):
    """Raised when a requested retention period is not on the allow-list."""
    pass


class ObjectNotFoundError(DomainError):
    """Raised by an object gateway when a blob does not exist."""
    pass


class ObjectStorageError(DomainError):
    """Raised by an object gateway on backend faults unrelated to existence."""
    pass


# ============================================================================
# Application Layer Exceptions
# ============================================================================

class ApplicationError(Exception):
    """
    Base application error with category and user-friendly messaging.

    Bridges domain errors with user-facing error messages and HTTP responses.
    """

    def __init__(
        self,
        category: ErrorCategory,
        technical_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize application error.

        Args:
            category: Error category
            technical_message: Technical error details for logging
            context: Additional context information
        """
        self.category = category
        self.technical_message = technical_message or ""
        self.context = context or {}

        error_info = ERROR_MESSAGES.get(
            category, ERROR_MESSAGES[ErrorCategory.SYSTEM_ERROR]
        )
        self.title = error_info["title"]
        self.message = error_info["message"]
        self.action = error_info["action"]

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary for API response.

        Returns:
            Dictionary with error information
        """
        return {
            "error": self.category.value,
            "title": self.title,
            "message": self.message,
            "action": self.action,
        }


def create_error_response(
    category: ErrorCategory,
    technical_message: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 400,
) -> tuple[Dict[str, Any], int]:
    """
    Create a structured error response for API endpoints.

    Args:
        category: Error category
        technical_message: Technical error details for logging
        context: Additional context information
        status_code: HTTP status code

    Returns:
        Tuple of (error_dict, status_code)
    """
    error = ApplicationError(category, technical_message, context)
    return error.to_dict(), status_code
