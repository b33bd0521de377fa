"""
Domain Error Mapping

Translates domain exceptions into structured API error responses.
"""

from typing import Any, Dict, Tuple

from tempdrop.domain.errors import (
    DomainError,
    ErrorCategory,
    FileExpiredError,
    FileRecordNotFoundError,
    InvalidExpirationError,
    ObjectNotFoundError,
    ObjectStorageError,
    ValidationError,
    create_error_response,
)

# Checked in order: subclasses before their bases
_DOMAIN_ERROR_MAP = (
    (FileExpiredError, ErrorCategory.FILE_EXPIRED, 410),
    (FileRecordNotFoundError, ErrorCategory.FILE_NOT_FOUND, 404),
    (ObjectNotFoundError, ErrorCategory.FILE_NOT_FOUND, 404),
    (InvalidExpirationError, ErrorCategory.INVALID_EXPIRATION, 400),
    (ValidationError, ErrorCategory.INVALID_REQUEST, 400),
    (ObjectStorageError, ErrorCategory.STORAGE_ERROR, 500),
)


def domain_error_response(error: DomainError) -> Tuple[Dict[str, Any], int]:
    """
    Build the error body and status code for a domain exception.

    Args:
        error: Domain exception raised by a service

    Returns:
        Tuple of (error_dict, status_code)
    """
    for error_type, category, status_code in _DOMAIN_ERROR_MAP:
        if isinstance(error, error_type):
            return create_error_response(category, str(error), status_code=status_code)

    return create_error_response(ErrorCategory.SYSTEM_ERROR, str(error), status_code=500)
