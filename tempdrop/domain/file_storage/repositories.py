"""
File Storage Repositories

Repository interface for file metadata persistence.
Concrete implementations are in the infrastructure layer.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from .entities import FileRecord
from .value_objects import NewFileRecord


class FileRecordRepository(ABC):
    """
    Abstract repository interface for file metadata persistence.

    Implementations are shared between request handlers and the reaper,
    so every method must be safe to call concurrently.
    """

    @abstractmethod
    def get(self, file_id: str) -> Optional[FileRecord]:
        """
        Retrieve a record by id.

        Args:
            file_id: Record identifier

        Returns:
            FileRecord if found, None otherwise
        """
        pass  # pragma: no cover

    @abstractmethod
    def get_by_object_path(self, object_path: str) -> Optional[FileRecord]:
        """
        Retrieve a record by exact object path.

        If several records share a path, the earliest upload wins (ties
        broken by id) so the answer is deterministic.

        Args:
            object_path: Canonical object path

        Returns:
            FileRecord if found, None otherwise
        """
        pass  # pragma: no cover

    @abstractmethod
    def create(self, fields: NewFileRecord) -> FileRecord:
        """
        Store a new record.

        Assigns id and upload_time and starts the download count at zero.

        Args:
            fields: Uploader-supplied fields

        Returns:
            The stored FileRecord
        """
        pass  # pragma: no cover

    @abstractmethod
    def increment_download_count(self, file_id: str) -> None:
        """
        Atomically add one to a record's download count.

        Unknown ids are ignored so a download is never failed by a
        concurrent deletion.
        """
        pass  # pragma: no cover

    @abstractmethod
    def list_expired(self, now: datetime) -> List[FileRecord]:
        """
        Snapshot of every record whose expiration_time is before now.

        The returned list is detached from the store: deleting records
        while iterating over it neither skips nor repeats entries.

        Args:
            now: Reference time for the whole scan

        Returns:
            Expired records ordered by expiration_time
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, file_id: str) -> None:
        """
        Delete a record. Deleting an unknown id is not an error.
        """
        pass  # pragma: no cover

    @abstractmethod
    def count(self) -> int:
        """Number of stored records."""
        pass  # pragma: no cover
