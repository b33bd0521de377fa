"""
Mock Object Gateway

In-memory implementation of ObjectGateway for unit testing, with failure
injection and call history for assertions.
"""

import threading
import uuid
from datetime import timedelta
from io import BytesIO
from typing import Any, BinaryIO, Dict, List, Set

from tempdrop.domain.errors import ObjectNotFoundError, ObjectStorageError
from tempdrop.domain.file_storage.expiry_policy import utc_now
from tempdrop.domain.file_storage.object_gateway import ObjectGateway, UploadHandle


class MockObjectGateway(ObjectGateway):
    """
    Dictionary-backed blob store.

    Paths listed in fail_deletes raise ObjectStorageError on delete_object,
    which simulates a backend fault for a single blob.
    """

    UPLOAD_HOST = "https://uploads.example.com"

    def __init__(self):
        self.blobs: Dict[str, bytes] = {}
        self.fail_deletes: Set[str] = set()
        self.call_history: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def issue_upload_handle(self) -> UploadHandle:
        object_path = f"/objects/uploads/{uuid.uuid4()}"
        return UploadHandle(
            upload_url=f"{self.UPLOAD_HOST}{object_path}?token=abc",
            object_path=object_path,
            expires_at=utc_now() + timedelta(minutes=15),
        )

    def normalize_path(self, raw_path: str) -> str:
        if raw_path.startswith(self.UPLOAD_HOST):
            return raw_path[len(self.UPLOAD_HOST):].split("?", 1)[0]
        return raw_path

    def read_stream(self, object_path: str) -> BinaryIO:
        with self._lock:
            self.call_history.append({"method": "read_stream", "path": object_path})
            if object_path not in self.blobs:
                raise ObjectNotFoundError(f"Blob not found: {object_path}")
            return BytesIO(self.blobs[object_path])

    def delete_object(self, object_path: str) -> None:
        with self._lock:
            self.call_history.append({"method": "delete_object", "path": object_path})
            if object_path in self.fail_deletes:
                raise ObjectStorageError(f"Simulated backend fault for {object_path}")
            self.blobs.pop(object_path, None)

    def write_object(self, object_path: str, content: BinaryIO) -> int:
        data = content.read()
        with self._lock:
            self.blobs[object_path] = data
        return len(data)

    def object_exists(self, object_path: str) -> bool:
        with self._lock:
            return object_path in self.blobs

    def put(self, object_path: str, data: bytes = b"content") -> None:
        """Store a blob directly (test helper)."""
        with self._lock:
            self.blobs[object_path] = data
