"""
File Storage Entities

Domain entities for shared file metadata.
"""

import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict

from .expiry_policy import format_remaining, is_expired, utc_now
from .value_objects import NewFileRecord


@dataclass
class FileRecord:
    """
    Entity describing one uploaded file and its expiration.

    Expiry is computed from expiration_time at read time; the record
    carries no status flag.
    """

    id: str
    filename: str
    original_filename: str
    mime_type: str
    size: int
    object_path: str
    upload_time: datetime
    expiration_time: datetime
    download_count: int = 0

    @classmethod
    def create(cls, fields: NewFileRecord) -> "FileRecord":
        """
        Factory method to create a new record from uploader-supplied fields.

        Args:
            fields: Validated uploader fields

        Returns:
            New FileRecord with a fresh id, upload_time of now and a
            download count of zero
        """
        return cls(
            id=str(uuid.uuid4()),
            filename=fields.filename,
            original_filename=fields.original_filename,
            mime_type=fields.mime_type,
            size=fields.size,
            object_path=fields.object_path,
            upload_time=utc_now(),
            expiration_time=fields.expiration_time,
            download_count=0,
        )

    def is_expired(self, now: datetime) -> bool:
        return is_expired(self.expiration_time, now)

    def expires_in(self, now: datetime) -> str:
        """Human readable time left, e.g. '9 minutes' or 'Expired'."""
        return format_remaining(self.expiration_time, now)

    def copy(self) -> "FileRecord":
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "filename": self.filename,
            "original_filename": self.original_filename,
            "mime_type": self.mime_type,
            "size": self.size,
            "object_path": self.object_path,
            "upload_time": self.upload_time.isoformat(),
            "expiration_time": self.expiration_time.isoformat(),
            "download_count": self.download_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileRecord":
        """Create FileRecord from dictionary."""
        return cls(
            id=data["id"],
            filename=data["filename"],
            original_filename=data["original_filename"],
            mime_type=data["mime_type"],
            size=int(data["size"]),
            object_path=data["object_path"],
            upload_time=datetime.fromisoformat(data["upload_time"]),
            expiration_time=datetime.fromisoformat(data["expiration_time"]),
            download_count=int(data.get("download_count", 0)),
        )
