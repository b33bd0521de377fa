"""
File Storage Domain

Metadata, expiry rules and blob access for temporary shared files.
"""

from .entities import FileRecord
from .expiry_policy import (
    compute_expiration,
    format_remaining,
    is_expired,
    remaining,
    resolve_expiration,
    utc_now,
)
from .object_gateway import ObjectGateway, UploadHandle
from .repositories import FileRecordRepository
from .services import FileManager
from .signed_url_service import SignedUrlService
from .value_objects import ExpirationOption, NewFileRecord

__all__ = [
    "ExpirationOption",
    "FileManager",
    "FileRecord",
    "FileRecordRepository",
    "NewFileRecord",
    "ObjectGateway",
    "SignedUrlService",
    "UploadHandle",
    "compute_expiration",
    "format_remaining",
    "is_expired",
    "remaining",
    "resolve_expiration",
    "utc_now",
]
