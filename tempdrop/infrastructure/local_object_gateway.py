"""
Local Object Gateway Implementation

Concrete implementation of ObjectGateway for the local filesystem.
Uploads are accepted by this service's own PUT /objects/uploads/<id>
endpoint, authorized by an HMAC-signed URL.
"""

import logging
import os
import tempfile
import uuid
from datetime import timedelta
from pathlib import Path
from typing import BinaryIO, Optional
from urllib.parse import urlsplit

from tempdrop.domain.errors import ObjectNotFoundError, ObjectStorageError
from tempdrop.domain.file_storage.expiry_policy import utc_now
from tempdrop.domain.file_storage.object_gateway import (
    OBJECTS_PREFIX,
    UPLOADS_DIR,
    ObjectGateway,
    UploadHandle,
    object_key,
)
from tempdrop.domain.file_storage.signed_url_service import SignedUrlService

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class LocalObjectGateway(ObjectGateway):
    """
    Local filesystem implementation of ObjectGateway.

    Blobs live under base_path, keyed by the object path without its
    '/objects/' prefix.

    Thread Safety:
        Writes go to a temporary file in the target directory and are moved
        into place with os.replace, so readers see either no blob or the
        complete blob. An open read stream stays valid after the blob is
        unlinked by the reaper.

    Attributes:
        base_path: Base directory for blob storage
        signer: SignedUrlService used for upload URLs
        upload_ttl: Lifetime of issued upload URLs
    """

    def __init__(
        self,
        base_path: str = "/tmp/tempdrop",
        signer: Optional[SignedUrlService] = None,
        upload_ttl_seconds: int = 900,
    ):
        """
        Initialize the local object gateway.

        Args:
            base_path: Base directory for blob storage (default: /tmp/tempdrop)
            signer: Signs upload URLs (default: SignedUrlService from env)
            upload_ttl_seconds: Lifetime of issued upload URLs

        Raises:
            ObjectStorageError: If the base directory cannot be created
        """
        self.base_path = Path(base_path)
        self.signer = signer or SignedUrlService()
        self.upload_ttl = timedelta(seconds=upload_ttl_seconds)
        self._ensure_base_directory()

    def _ensure_base_directory(self) -> None:
        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ObjectStorageError(
                f"Failed to create storage directory: {self.base_path}", original_error=e
            ) from e

    def _full_path(self, object_path: str) -> Path:
        try:
            return self.base_path / object_key(object_path)
        except ValueError as e:
            raise ObjectNotFoundError(str(e), original_error=e) from e

    # ObjectGateway interface methods

    def issue_upload_handle(self) -> UploadHandle:
        object_path = f"{OBJECTS_PREFIX}{UPLOADS_DIR}/{uuid.uuid4()}"
        signed = self.signer.generate_signed_url(object_path, utc_now() + self.upload_ttl)

        return UploadHandle(
            upload_url=signed.url,
            object_path=object_path,
            expires_at=signed.expires_at,
        )

    def normalize_path(self, raw_path: str) -> str:
        """
        Strip scheme, host and query string from a local upload URL.

        Example:
            >>> gateway.normalize_path('http://host/objects/uploads/abc?expires=1&signature=f')
            '/objects/uploads/abc'
        """
        if not raw_path:
            return raw_path

        path = urlsplit(raw_path).path
        if path.startswith(OBJECTS_PREFIX):
            return path
        return raw_path

    def read_stream(self, object_path: str) -> BinaryIO:
        full_path = self._full_path(object_path)
        try:
            return open(full_path, "rb")
        except (FileNotFoundError, IsADirectoryError) as e:
            raise ObjectNotFoundError(
                f"Blob not found: {object_path}", original_error=e
            ) from e
        except OSError as e:
            raise ObjectStorageError(
                f"Failed to open blob {object_path}: {e}", original_error=e
            ) from e

    def delete_object(self, object_path: str) -> None:
        try:
            full_path = self.base_path / object_key(object_path)
        except ValueError:
            # Nothing can be stored under an invalid path
            return

        try:
            full_path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise ObjectStorageError(
                f"Failed to delete blob {object_path}: {e}", original_error=e
            ) from e

    def write_object(self, object_path: str, content: BinaryIO) -> int:
        full_path = self._full_path(object_path)
        written = 0
        tmp_name = None

        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=full_path.parent, prefix=f".{full_path.name}.", suffix=".part"
            )
            with os.fdopen(fd, "wb") as tmp:
                while True:
                    chunk = content.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    tmp.write(chunk)
                    written += len(chunk)
            os.replace(tmp_name, full_path)
            tmp_name = None
        except OSError as e:
            raise ObjectStorageError(
                f"Failed to write blob {object_path}: {e}", original_error=e
            ) from e
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)

        logger.debug(f"Stored {written} bytes at {object_path}")
        return written

    def object_exists(self, object_path: str) -> bool:
        try:
            return (self.base_path / object_key(object_path)).is_file()
        except (OSError, ValueError):
            return False
