"""
Redis File Record Repository Implementation

Concrete Redis-based implementation of FileRecordRepository. Lets several
API processes and Celery workers share one metadata store.

Key layout (under the optional key prefix):
- file_record:<id>      JSON document of the record, without its download count
- file_downloads:<id>   integer download counter, absent until the first download
- file_path:<path>      sorted set of record ids sharing a path, scored by
                        upload time
- file_expirations      sorted set of record ids scored by expiration time
"""

import json
import logging
from datetime import datetime
from typing import Dict, List, Optional

from tempdrop.domain.file_storage.entities import FileRecord
from tempdrop.domain.file_storage.repositories import FileRecordRepository
from tempdrop.domain.file_storage.value_objects import NewFileRecord

logger = logging.getLogger(__name__)


class RedisFileRecordRepository(FileRecordRepository):
    """
    Redis-based implementation of FileRecordRepository.

    Records carry no Redis TTL: removal is the reaper's job, so an expired
    record stays visible (and answers 410) until it is reclaimed.
    """

    def __init__(self, redis_repository):
        """
        Initialize with Redis repository.

        Args:
            redis_repository: RedisRepository instance from infrastructure layer
        """
        self.redis_repo = redis_repository
        self.record_prefix = "file_record"
        self.downloads_prefix = "file_downloads"
        self.path_prefix = "file_path"
        self.expirations_key = "file_expirations"

    def _record_key(self, file_id: str) -> str:
        return f"{self.record_prefix}:{file_id}"

    def _downloads_key(self, file_id: str) -> str:
        return f"{self.downloads_prefix}:{file_id}"

    def _path_key(self, object_path: str) -> str:
        return f"{self.path_prefix}:{object_path}"

    def _load(self, file_ids: List[str]) -> Dict[str, FileRecord]:
        """Fetch records with their counters; missing ids are left out."""
        documents = self.redis_repo.get_many_json(
            [self._record_key(file_id) for file_id in file_ids]
        )
        counts = self.redis_repo.get_many_counters(
            [self._downloads_key(file_id) for file_id in file_ids]
        )

        records = {}
        for file_id, data, count in zip(file_ids, documents, counts):
            if data is None:
                continue
            data["download_count"] = count
            records[file_id] = FileRecord.from_dict(data)
        return records

    def get(self, file_id: str) -> Optional[FileRecord]:
        return self._load([file_id]).get(file_id)

    def get_by_object_path(self, object_path: str) -> Optional[FileRecord]:
        """
        Resolve a path through its index.

        Equal upload-time scores are ordered by id, which gives the
        earliest-upload-then-id rule directly. Ids whose document is gone
        are skipped and dropped from the index.
        """
        path_key = self._path_key(object_path)
        candidate_ids = self.redis_repo.sorted_set_members(path_key)
        if not candidate_ids:
            return None

        records = self._load(candidate_ids)
        stale_ids = [file_id for file_id in candidate_ids if file_id not in records]
        if stale_ids:
            self.redis_repo.sorted_set_remove(path_key, *stale_ids)

        for file_id in candidate_ids:
            if file_id in records:
                return records[file_id]
        return None

    def create(self, fields: NewFileRecord) -> FileRecord:
        record = FileRecord.create(fields)
        make_key = self.redis_repo.make_key

        document = record.to_dict()
        # The counter key holds the count
        del document["download_count"]

        pipe = self.redis_repo.pipeline()
        pipe.set(make_key(self._record_key(record.id)), json.dumps(document))
        pipe.zadd(
            make_key(self._path_key(record.object_path)),
            {record.id: record.upload_time.timestamp()},
        )
        pipe.zadd(
            make_key(self.expirations_key),
            {record.id: record.expiration_time.timestamp()},
        )
        pipe.execute()

        logger.debug(f"Stored file record {record.id} in Redis")
        return record

    def increment_download_count(self, file_id: str) -> None:
        new_value = self.redis_repo.increment_if_exists(
            self._record_key(file_id), self._downloads_key(file_id)
        )
        if new_value is None:
            logger.debug(f"Download count not incremented, {file_id} is gone")

    def list_expired(self, now: datetime) -> List[FileRecord]:
        candidate_ids = self.redis_repo.sorted_set_below(
            self.expirations_key, now.timestamp()
        )
        records = self._load(candidate_ids)

        stale_ids = [file_id for file_id in candidate_ids if file_id not in records]
        if stale_ids:
            # Index entries left behind by a delete that did not complete
            self.redis_repo.sorted_set_remove(self.expirations_key, *stale_ids)

        # Float scores can round; the exact comparison decides
        expired = [record for record in records.values() if record.expiration_time < now]
        expired.sort(key=lambda r: (r.expiration_time, r.id))
        return expired

    def delete(self, file_id: str) -> None:
        record = self.get(file_id)
        make_key = self.redis_repo.make_key

        pipe = self.redis_repo.pipeline()
        pipe.delete(
            make_key(self._record_key(file_id)), make_key(self._downloads_key(file_id))
        )
        pipe.zrem(make_key(self.expirations_key), file_id)
        if record is not None:
            pipe.zrem(make_key(self._path_key(record.object_path)), file_id)
        pipe.execute()

    def count(self) -> int:
        return self.redis_repo.sorted_set_size(self.expirations_key)
