"""
In-Memory File Record Repository

Process-local implementation of FileRecordRepository. Suitable for a single
process running the in-process reaper scheduler, and for tests.
"""

import logging
import threading
from datetime import datetime
from typing import Dict, List, Optional

from tempdrop.domain.file_storage.entities import FileRecord
from tempdrop.domain.file_storage.repositories import FileRecordRepository
from tempdrop.domain.file_storage.value_objects import NewFileRecord

logger = logging.getLogger(__name__)


class InMemoryFileRecordRepository(FileRecordRepository):
    """
    Dictionary-backed metadata store guarded by a re-entrant lock.

    Every read hands out copies, so callers never share mutable state with
    the store.
    """

    def __init__(self):
        self._records: Dict[str, FileRecord] = {}
        self._lock = threading.RLock()

    def get(self, file_id: str) -> Optional[FileRecord]:
        with self._lock:
            record = self._records.get(file_id)
            return record.copy() if record else None

    def get_by_object_path(self, object_path: str) -> Optional[FileRecord]:
        with self._lock:
            matches = [
                record
                for record in self._records.values()
                if record.object_path == object_path
            ]
            if not matches:
                return None
            earliest = min(matches, key=lambda r: (r.upload_time, r.id))
            return earliest.copy()

    def create(self, fields: NewFileRecord) -> FileRecord:
        record = FileRecord.create(fields)
        with self._lock:
            self._records[record.id] = record
        logger.debug(f"Stored file record {record.id}")
        return record.copy()

    def increment_download_count(self, file_id: str) -> None:
        with self._lock:
            record = self._records.get(file_id)
            if record is not None:
                record.download_count += 1

    def list_expired(self, now: datetime) -> List[FileRecord]:
        with self._lock:
            expired = [
                record.copy()
                for record in self._records.values()
                if record.expiration_time < now
            ]
        expired.sort(key=lambda r: (r.expiration_time, r.id))
        return expired

    def delete(self, file_id: str) -> None:
        with self._lock:
            self._records.pop(file_id, None)

    def count(self) -> int:
        with self._lock:
            return len(self._records)
