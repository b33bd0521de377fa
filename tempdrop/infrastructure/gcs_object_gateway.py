"""
Google Cloud Storage Object Gateway Implementation

Concrete implementation of ObjectGateway for Google Cloud Storage.
Clients upload directly to the bucket with a V4 signed PUT URL; downloads
are proxied through the /objects endpoint.
"""

import logging
import uuid
from datetime import timedelta
from io import BytesIO
from typing import BinaryIO, Optional
from urllib.parse import unquote, urlsplit

from google.cloud import storage
from google.cloud.exceptions import GoogleCloudError, NotFound

from tempdrop.domain.errors import ObjectNotFoundError, ObjectStorageError
from tempdrop.domain.file_storage.expiry_policy import utc_now
from tempdrop.domain.file_storage.object_gateway import (
    OBJECTS_PREFIX,
    UPLOADS_DIR,
    ObjectGateway,
    UploadHandle,
    object_key,
)

logger = logging.getLogger(__name__)

GCS_HOST = "storage.googleapis.com"


class GCSObjectGateway(ObjectGateway):
    """
    Google Cloud Storage implementation of ObjectGateway.

    Blob names are '<private_prefix>/<object key>', e.g.
    'private/uploads/3f0c...' for the object path '/objects/uploads/3f0c...'.

    Thread Safety:
        This implementation is thread-safe. The GCS client handles
        concurrent operations safely, and objects are replaced atomically
        by the service, so a read returns a whole generation of a blob.

    Attributes:
        bucket_name: Name of the GCS bucket for blob storage
        private_prefix: Directory inside the bucket holding uploads
        client: Google Cloud Storage client instance
        bucket: GCS bucket object
    """

    def __init__(
        self,
        bucket_name: str,
        private_prefix: str = "private",
        client: Optional[storage.Client] = None,
        upload_ttl_seconds: int = 900,
    ):
        """
        Initialize the GCS object gateway.

        Args:
            bucket_name: Name of the GCS bucket to use for storage
            private_prefix: Directory inside the bucket holding uploads
            client: Preconfigured storage client (default: storage.Client())
            upload_ttl_seconds: Lifetime of issued upload URLs

        Raises:
            ValueError: If bucket_name is empty
        """
        if not bucket_name or not bucket_name.strip():
            raise ValueError("bucket_name cannot be empty")

        self.bucket_name = bucket_name
        self.private_prefix = private_prefix.strip("/")
        self.client = client or storage.Client()
        self.bucket = self.client.bucket(bucket_name)
        self.upload_ttl = timedelta(seconds=upload_ttl_seconds)

    def _blob_name(self, object_path: str) -> str:
        try:
            key = object_key(object_path)
        except ValueError as e:
            raise ObjectNotFoundError(str(e), original_error=e) from e
        return f"{self.private_prefix}/{key}" if self.private_prefix else key

    def issue_upload_handle(self) -> UploadHandle:
        """
        Generate a V4 signed PUT URL for a new blob.

        Raises:
            ObjectStorageError: If signing fails (e.g. credentials without a
                private key)
        """
        object_path = f"{OBJECTS_PREFIX}{UPLOADS_DIR}/{uuid.uuid4()}"
        expires_at = utc_now() + self.upload_ttl

        try:
            blob = self.bucket.blob(self._blob_name(object_path))
            upload_url = blob.generate_signed_url(
                version="v4",
                expiration=self.upload_ttl,
                method="PUT",
            )
        except (GoogleCloudError, AttributeError, ValueError) as e:
            raise ObjectStorageError(
                f"Failed to generate signed upload URL: {e}", original_error=e
            ) from e

        return UploadHandle(upload_url=upload_url, object_path=object_path, expires_at=expires_at)

    def normalize_path(self, raw_path: str) -> str:
        """
        Map a signed bucket URL back to its canonical object path.

        Example:
            >>> gateway.normalize_path(
            ...     'https://storage.googleapis.com/bucket/private/uploads/abc?X-Goog-Signature=...'
            ... )
            '/objects/uploads/abc'
        """
        if not raw_path or not raw_path.startswith("https://"):
            return raw_path

        parts = urlsplit(raw_path)
        if parts.netloc != GCS_HOST:
            return raw_path

        bucket_prefix = f"/{self.bucket_name}/"
        path = unquote(parts.path)
        if not path.startswith(bucket_prefix):
            return raw_path

        blob_name = path[len(bucket_prefix):]
        if self.private_prefix:
            private = f"{self.private_prefix}/"
            if not blob_name.startswith(private):
                return raw_path
            blob_name = blob_name[len(private):]

        return f"{OBJECTS_PREFIX}{blob_name}"

    def read_stream(self, object_path: str) -> BinaryIO:
        blob = self.bucket.blob(self._blob_name(object_path))
        content = BytesIO()

        try:
            blob.download_to_file(content)
        except NotFound as e:
            raise ObjectNotFoundError(
                f"Blob not found: {object_path}", original_error=e
            ) from e
        except GoogleCloudError as e:
            raise ObjectStorageError(
                f"Failed to download blob {object_path}: {e}", original_error=e
            ) from e

        content.seek(0)
        return content

    def delete_object(self, object_path: str) -> None:
        try:
            blob_name = self._blob_name(object_path)
        except ObjectNotFoundError:
            return

        try:
            self.bucket.blob(blob_name).delete()
        except NotFound:
            logger.debug(f"Blob already deleted: {object_path}")
        except GoogleCloudError as e:
            raise ObjectStorageError(
                f"Failed to delete blob {object_path}: {e}", original_error=e
            ) from e

    def write_object(self, object_path: str, content: BinaryIO) -> int:
        blob = self.bucket.blob(self._blob_name(object_path))

        try:
            if hasattr(content, "seek"):
                content.seek(0)
            blob.upload_from_file(content)
        except GoogleCloudError as e:
            raise ObjectStorageError(
                f"Failed to upload blob {object_path}: {e}", original_error=e
            ) from e

        return blob.size or 0

    def object_exists(self, object_path: str) -> bool:
        try:
            return self.bucket.blob(self._blob_name(object_path)).exists()
        except (ObjectNotFoundError, GoogleCloudError):
            return False
