"""
Object Gateway Interface

Abstract interface for the blob store holding uploaded file content.
The domain layer depends only on this contract; the local filesystem and
Google Cloud Storage adapters live in the infrastructure layer.

Blobs are addressed by their canonical object path, e.g.
'/objects/uploads/3f0c...'. The same value is stored in file metadata,
used for download lookups and passed to delete_object.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, BinaryIO, Dict

OBJECTS_PREFIX = "/objects/"
UPLOADS_DIR = "uploads"


@dataclass(frozen=True)
class UploadHandle:
    """
    Time-limited write capability for a single blob.

    Attributes:
        upload_url: URL the client PUTs the file content to
        object_path: Canonical path the blob resolves to once written
        expires_at: When upload_url stops being accepted
    """

    upload_url: str
    object_path: str
    expires_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "upload_url": self.upload_url,
            "object_path": self.object_path,
            "expires_at": self.expires_at.isoformat(),
        }


class ObjectGateway(ABC):
    """
    Contract for blob storage used by the file lifecycle.

    Contract Guarantees:
    - normalize_path() is deterministic and idempotent
    - read_stream() returns the complete blob or raises ObjectNotFoundError;
      it never yields a partially written or partially deleted blob
    - delete_object() succeeds when the blob is already gone
    - Backend faults surface as ObjectStorageError

    Thread Safety:
    - Implementations must tolerate concurrent reads and deletes of the
      same path (a download racing the reaper)
    """

    @abstractmethod
    def issue_upload_handle(self) -> UploadHandle:
        """
        Issue a write capability for a new blob.

        Returns:
            UploadHandle with the signed upload URL and its canonical path

        Raises:
            ObjectStorageError: If the backend cannot sign the URL
        """
        pass  # pragma: no cover

    @abstractmethod
    def normalize_path(self, raw_path: str) -> str:
        """
        Collapse an upload URL (or an already canonical path) into the
        canonical object path.

        Values that do not match this gateway's URL form are returned
        unchanged.

        Example:
            >>> gateway.normalize_path(
            ...     'https://storage.googleapis.com/bucket/private/uploads/abc?X-Goog-Signature=...'
            ... )
            '/objects/uploads/abc'
        """
        pass  # pragma: no cover

    @abstractmethod
    def read_stream(self, object_path: str) -> BinaryIO:
        """
        Open a blob for reading.

        The caller is responsible for closing the returned stream.

        Raises:
            ObjectNotFoundError: If no blob exists at object_path
            ObjectStorageError: On backend faults
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete_object(self, object_path: str) -> None:
        """
        Delete a blob. Idempotent: deleting a missing blob succeeds.

        Raises:
            ObjectStorageError: On backend faults other than "already gone"
        """
        pass  # pragma: no cover

    @abstractmethod
    def write_object(self, object_path: str, content: BinaryIO) -> int:
        """
        Store blob content at object_path, replacing any previous blob.

        Returns:
            Number of bytes written

        Raises:
            ObjectStorageError: On backend faults
        """
        pass  # pragma: no cover

    @abstractmethod
    def object_exists(self, object_path: str) -> bool:
        """Check for a blob without raising."""
        pass  # pragma: no cover


def object_key(object_path: str) -> str:
    """
    Strip the '/objects/' prefix from a canonical path.

    Example:
        >>> object_key('/objects/uploads/abc')
        'uploads/abc'

    Raises:
        ValueError: If object_path is not a canonical object path or tries
            to escape the object namespace
    """
    if not object_path or not object_path.startswith(OBJECTS_PREFIX):
        raise ValueError(f"Not an object path: {object_path!r}")

    key = object_path[len(OBJECTS_PREFIX):].strip("/")
    parts = key.split("/")
    if not key or any(part in ("", ".", "..") for part in parts):
        raise ValueError(f"Invalid object path: {object_path!r}")
    return key
