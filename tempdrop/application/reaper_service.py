"""
Reaper Service

Application service that reclaims storage held by expired files.

Each record is reclaimed in two steps: the blob is deleted first, then the
metadata. If the blob delete fails the metadata is kept, so the record is
still listed as expired and the next cycle retries. If only the metadata
delete fails, the blob is already gone and the retry is a no-op on the
blob side. Both steps are idempotent, which makes overlapping cycles
harmless.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from tempdrop.domain.events import (
    FileReclaimedEvent,
    FileReclaimFailedEvent,
    ReaperCycleCompletedEvent,
)
from tempdrop.domain.file_storage.entities import FileRecord
from tempdrop.domain.file_storage.expiry_policy import utc_now
from tempdrop.domain.file_storage.object_gateway import ObjectGateway
from tempdrop.domain.file_storage.repositories import FileRecordRepository

logger = logging.getLogger(__name__)

STAGE_SCAN = "scan"
STAGE_BLOB = "blob"
STAGE_METADATA = "metadata"


@dataclass
class ReapFailure:
    """One failed reclaim step."""

    file_id: Optional[str]
    object_path: Optional[str]
    stage: str
    error: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file_id": self.file_id,
            "object_path": self.object_path,
            "stage": self.stage,
            "error": self.error,
        }


@dataclass
class ReapReport:
    """
    Outcome of one reaper cycle.

    Attributes:
        started_at: Reference time used for every expiry comparison
        attempted: Expired records found
        succeeded: Records whose blob and metadata were both removed
        failed: Records left for the next cycle
        failures: Details of each failed record (and of a failed scan)
        duration_seconds: Wall time of the cycle
        scan_failed: True if the expired records could not be listed
    """

    started_at: datetime
    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    failures: List[ReapFailure] = field(default_factory=list)
    duration_seconds: float = 0.0
    scan_failed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization (Celery task result)."""
        return {
            "started_at": self.started_at.isoformat(),
            "attempted": self.attempted,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "failures": [failure.to_dict() for failure in self.failures],
            "duration_seconds": self.duration_seconds,
            "scan_failed": self.scan_failed,
        }


class ExpiredFileReaper:
    """
    Reclaims blobs and metadata of expired files.

    run_cycle() never raises: every failure is logged, reported and left
    for the next cycle.
    """

    def __init__(
        self,
        file_repository: FileRecordRepository,
        object_gateway: ObjectGateway,
        max_workers: int = 4,
        event_publisher=None,
    ):
        """
        Initialize the reaper.

        Args:
            file_repository: Metadata store
            object_gateway: Blob store adapter
            max_workers: Upper bound on concurrent reclaims per cycle
            event_publisher: Optional EventPublisher for domain events
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")

        self.file_repo = file_repository
        self.gateway = object_gateway
        self.max_workers = max_workers
        self.event_publisher = event_publisher

    def run_cycle(self, now: Optional[datetime] = None) -> ReapReport:
        """
        Run one reclaim pass over every record expired before now.

        Args:
            now: Reference time for the whole cycle (default: current time)

        Returns:
            ReapReport describing the cycle
        """
        now = now or utc_now()
        started = time.monotonic()
        report = ReapReport(started_at=now)

        try:
            expired = self.file_repo.list_expired(now)
        except Exception as e:
            logger.error(f"Reaper could not list expired files: {e}", exc_info=True)
            report.scan_failed = True
            report.failures.append(ReapFailure(None, None, STAGE_SCAN, str(e)))
            report.duration_seconds = time.monotonic() - started
            return report

        if not expired:
            logger.debug("Reaper cycle: no expired files")
            report.duration_seconds = time.monotonic() - started
            return report

        report.attempted = len(expired)
        workers = min(self.max_workers, len(expired))

        if workers == 1:
            outcomes = [self._reclaim(record, now) for record in expired]
        else:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="reaper") as pool:
                outcomes = list(pool.map(lambda record: self._reclaim(record, now), expired))

        for failure in outcomes:
            if failure is None:
                report.succeeded += 1
            else:
                report.failed += 1
                report.failures.append(failure)

        report.duration_seconds = time.monotonic() - started
        logger.info(
            f"Reaper cycle finished: attempted={report.attempted}, "
            f"succeeded={report.succeeded}, failed={report.failed}"
        )

        self._publish(
            ReaperCycleCompletedEvent(
                aggregate_id=now.isoformat(),
                occurred_at=utc_now(),
                attempted=report.attempted,
                succeeded=report.succeeded,
                failed=report.failed,
                duration_seconds=report.duration_seconds,
            )
        )
        return report

    def _reclaim(self, record: FileRecord, now: datetime) -> Optional[ReapFailure]:
        """
        Delete one record's blob, then its metadata.

        Returns:
            None on success, the ReapFailure otherwise
        """
        try:
            self.gateway.delete_object(record.object_path)
        except Exception as e:
            return self._failed(record, STAGE_BLOB, e, now)

        try:
            self.file_repo.delete(record.id)
        except Exception as e:
            return self._failed(record, STAGE_METADATA, e, now)

        logger.debug(f"Reclaimed file {record.id} at {record.object_path}")
        self._publish(
            FileReclaimedEvent(
                aggregate_id=record.id,
                occurred_at=now,
                object_path=record.object_path,
                original_filename=record.original_filename,
            )
        )
        return None

    def _failed(
        self, record: FileRecord, stage: str, error: Exception, now: datetime
    ) -> ReapFailure:
        logger.warning(
            f"Reaper failed to delete {stage} for file {record.id} "
            f"at {record.object_path}: {error}"
        )
        self._publish(
            FileReclaimFailedEvent(
                aggregate_id=record.id,
                occurred_at=now,
                object_path=record.object_path,
                stage=stage,
                error_message=str(error),
            )
        )
        return ReapFailure(record.id, record.object_path, stage, str(error))

    def _publish(self, event) -> None:
        if self.event_publisher is not None:
            self.event_publisher.publish(event)
