"""
File Storage Services

Domain service for the access path of temporary files: registering
uploads, reading metadata and opening downloads with expiry enforced at
read time.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import BinaryIO, Optional, Tuple

from ..errors import (
    FileExpiredError,
    FileRecordNotFoundError,
    ObjectNotFoundError,
    ObjectStorageError,
    ValidationError,
)
from ..events import FileDownloadedEvent, FileRegisteredEvent
from .entities import FileRecord
from .expiry_policy import utc_now
from .object_gateway import ObjectGateway, UploadHandle
from .repositories import FileRecordRepository
from .value_objects import NewFileRecord

logger = logging.getLogger(__name__)


class FileManager:
    """
    Domain service coordinating metadata and blob access.

    Every read re-checks expiry against the supplied (or current) time, so
    an expired record is never served even when the reaper has not caught
    up yet.
    """

    def __init__(
        self,
        file_repository: FileRecordRepository,
        object_gateway: ObjectGateway,
        event_publisher=None,
    ):
        """
        Initialize FileManager.

        Args:
            file_repository: Metadata store
            object_gateway: Blob store adapter
            event_publisher: Optional EventPublisher for domain events
        """
        self.file_repo = file_repository
        self.gateway = object_gateway
        self.event_publisher = event_publisher

    def issue_upload(self) -> UploadHandle:
        """
        Issue a time-limited upload capability.

        Raises:
            ObjectStorageError: If the gateway cannot sign an upload URL
        """
        return self.gateway.issue_upload_handle()

    def register_file(self, fields: NewFileRecord) -> FileRecord:
        """
        Register metadata for an uploaded blob.

        The object path is normalized first, so clients may send back the
        upload URL they were given.

        Args:
            fields: Uploader-supplied fields

        Returns:
            The stored FileRecord
        """
        object_path = self.gateway.normalize_path(fields.object_path)
        if object_path != fields.object_path:
            fields = replace(fields, object_path=object_path)

        record = self.file_repo.create(fields)
        logger.debug(f"Registered file {record.id} at {record.object_path}")

        self._publish(
            FileRegisteredEvent(
                aggregate_id=record.id,
                occurred_at=record.upload_time,
                object_path=record.object_path,
                original_filename=record.original_filename,
                size=record.size,
                expiration_time=record.expiration_time,
            )
        )
        return record

    def get_file(self, file_id: str, now: Optional[datetime] = None) -> FileRecord:
        """
        Retrieve a live record by id.

        Does not change the download count.

        Raises:
            FileRecordNotFoundError: If no record exists
            FileExpiredError: If the record is past its expiration time
        """
        now = now or utc_now()
        record = self.file_repo.get(file_id)

        if record is None:
            raise FileRecordNotFoundError(f"File not found: {file_id}")

        if record.is_expired(now):
            raise FileExpiredError(f"File has expired: {file_id}")

        return record

    def open_download(
        self, object_path: str, now: Optional[datetime] = None
    ) -> Tuple[FileRecord, BinaryIO]:
        """
        Resolve an object path to a live record and an open blob stream.

        The download count is incremented once, after the stream is open.
        A blob deleted by the reaper between the metadata lookup and the
        read is reported as not found and is not counted.

        Args:
            object_path: Canonical object path, e.g. '/objects/uploads/abc'
            now: Reference time for the expiry check

        Returns:
            Tuple of (record, stream); the caller closes the stream

        Raises:
            FileRecordNotFoundError: If the record or the blob is missing
            FileExpiredError: If the record is past its expiration time
            ObjectStorageError: On backend faults while opening the blob
        """
        now = now or utc_now()
        record = self.file_repo.get_by_object_path(object_path)

        if record is None:
            raise FileRecordNotFoundError(f"No file registered at {object_path}")

        if record.is_expired(now):
            raise FileExpiredError(f"File has expired: {record.id}")

        try:
            stream = self.gateway.read_stream(record.object_path)
        except ObjectNotFoundError as e:
            logger.info(
                f"Blob missing for file {record.id} at {record.object_path}"
            )
            raise FileRecordNotFoundError(
                f"No file registered at {object_path}", original_error=e
            ) from e

        self.file_repo.increment_download_count(record.id)
        record.download_count += 1

        self._publish(
            FileDownloadedEvent(
                aggregate_id=record.id,
                occurred_at=now,
                object_path=record.object_path,
                original_filename=record.original_filename,
            )
        )
        return record, stream

    def _publish(self, event) -> None:
        if self.event_publisher is not None:
            self.event_publisher.publish(event)


__all__ = [
    "FileManager",
    "FileRecordNotFoundError",
    "FileExpiredError",
    "ObjectStorageError",
    "ValidationError",
]
