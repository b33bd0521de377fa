"""
Unit tests for ExpiredFileReaper.

Covers the reclaim order (blob, then metadata), partial failures that are
retried on the next cycle, and reads racing a cycle.
"""

import threading
from datetime import timedelta
from unittest.mock import Mock

import pytest

from tempdrop.application.reaper_service import (
    STAGE_BLOB,
    STAGE_METADATA,
    STAGE_SCAN,
    ExpiredFileReaper,
)
from tempdrop.domain.errors import FileExpiredError, FileRecordNotFoundError
from tempdrop.domain.events import (
    FileReclaimedEvent,
    FileReclaimFailedEvent,
    ReaperCycleCompletedEvent,
)
from tempdrop.domain.file_storage.services import FileManager
from tests.fixtures import create_new_file_record


def _register(repository, gateway, object_path, expiration_time, data=b"content"):
    gateway.put(object_path, data)
    return repository.create(
        create_new_file_record(object_path, expiration_time=expiration_time)
    )


@pytest.fixture
def reaper(memory_repository, mock_gateway):
    return ExpiredFileReaper(memory_repository, mock_gateway, max_workers=4)


class TestReaperConstruction:
    def test_rejects_zero_workers(self, memory_repository, mock_gateway):
        with pytest.raises(ValueError):
            ExpiredFileReaper(memory_repository, mock_gateway, max_workers=0)


class TestReaperCycle:
    def test_empty_store(self, reaper, fixed_now):
        report = reaper.run_cycle(fixed_now)

        assert report.attempted == 0
        assert report.succeeded == 0
        assert report.failures == []
        assert report.started_at == fixed_now

    def test_live_files_are_left_alone(self, reaper, memory_repository, mock_gateway, fixed_now):
        record = _register(
            memory_repository, mock_gateway, "/objects/uploads/a", fixed_now + timedelta(minutes=1)
        )

        report = reaper.run_cycle(fixed_now)

        assert report.attempted == 0
        assert memory_repository.get(record.id) is not None
        assert mock_gateway.object_exists("/objects/uploads/a")

    def test_ten_minute_lifecycle(self, reaper, memory_repository, mock_gateway, fixed_now):
        manager = FileManager(memory_repository, mock_gateway)
        record = _register(
            memory_repository,
            mock_gateway,
            "/objects/uploads/a",
            fixed_now + timedelta(minutes=10),
        )

        # Live: served and counted
        manager.open_download("/objects/uploads/a", now=fixed_now + timedelta(minutes=5))
        assert memory_repository.get(record.id).download_count == 1

        # At the expiration instant reads refuse, the reaper has not run yet
        with pytest.raises(FileExpiredError):
            manager.open_download("/objects/uploads/a", now=fixed_now + timedelta(minutes=10))

        report = reaper.run_cycle(fixed_now + timedelta(minutes=10, seconds=1))

        assert report.attempted == 1
        assert report.succeeded == 1
        assert memory_repository.get(record.id) is None
        assert not mock_gateway.object_exists("/objects/uploads/a")
        with pytest.raises(FileRecordNotFoundError):
            manager.open_download("/objects/uploads/a", now=fixed_now + timedelta(minutes=11))

    def test_blob_deleted_before_metadata(self, memory_repository, fixed_now):
        calls = []
        gateway = Mock()
        gateway.delete_object.side_effect = lambda path: calls.append(("blob", path))
        repository = Mock(wraps=memory_repository)
        repository.delete.side_effect = lambda file_id: calls.append(("metadata", file_id))
        record = memory_repository.create(
            create_new_file_record("/objects/uploads/a", expiration_time=fixed_now)
        )

        ExpiredFileReaper(repository, gateway).run_cycle(fixed_now + timedelta(seconds=1))

        assert calls == [("blob", "/objects/uploads/a"), ("metadata", record.id)]

    def test_blob_failure_keeps_metadata_for_retry(
        self, reaper, memory_repository, mock_gateway, fixed_now
    ):
        expired_at = fixed_now - timedelta(minutes=1)
        records = [
            _register(memory_repository, mock_gateway, f"/objects/uploads/{name}", expired_at)
            for name in ("a", "b", "c")
        ]
        mock_gateway.fail_deletes.add("/objects/uploads/b")

        report = reaper.run_cycle(fixed_now)

        assert (report.attempted, report.succeeded, report.failed) == (3, 2, 1)
        failure = report.failures[0]
        assert failure.stage == STAGE_BLOB
        assert failure.object_path == "/objects/uploads/b"
        assert memory_repository.get(records[1].id) is not None
        assert memory_repository.get(records[0].id) is None
        assert memory_repository.get(records[2].id) is None

        # The survivor still answers Gone, never its content
        manager = FileManager(memory_repository, mock_gateway)
        with pytest.raises(FileExpiredError):
            manager.get_file(records[1].id, now=fixed_now)
        with pytest.raises(FileExpiredError):
            manager.open_download("/objects/uploads/b", now=fixed_now)
        assert memory_repository.get(records[1].id).download_count == 0

        # Fault clears; the next cycle retries the survivor
        mock_gateway.fail_deletes.clear()
        retry = reaper.run_cycle(fixed_now + timedelta(seconds=1))

        assert (retry.attempted, retry.succeeded, retry.failed) == (1, 1, 0)
        assert memory_repository.count() == 0
        assert mock_gateway.blobs == {}

    def test_metadata_failure_is_retried_with_blob_already_gone(
        self, memory_repository, mock_gateway, fixed_now
    ):
        record = _register(
            memory_repository, mock_gateway, "/objects/uploads/a", fixed_now - timedelta(minutes=1)
        )
        repository = Mock(wraps=memory_repository)
        repository.delete.side_effect = RuntimeError("store unavailable")

        report = ExpiredFileReaper(repository, mock_gateway).run_cycle(fixed_now)

        assert report.failed == 1
        assert report.failures[0].stage == STAGE_METADATA
        assert not mock_gateway.object_exists("/objects/uploads/a")
        assert memory_repository.get(record.id) is not None

        retry = ExpiredFileReaper(memory_repository, mock_gateway).run_cycle(fixed_now)

        assert retry.succeeded == 1
        assert memory_repository.get(record.id) is None

    def test_scan_failure_is_reported_not_raised(self, mock_gateway, fixed_now):
        repository = Mock()
        repository.list_expired.side_effect = ConnectionError("redis down")

        report = ExpiredFileReaper(repository, mock_gateway).run_cycle(fixed_now)

        assert report.scan_failed is True
        assert report.attempted == 0
        assert report.failures[0].stage == STAGE_SCAN
        assert "redis down" in report.failures[0].error

    def test_second_cycle_is_a_no_op(self, reaper, memory_repository, mock_gateway, fixed_now):
        _register(memory_repository, mock_gateway, "/objects/uploads/a", fixed_now)
        later = fixed_now + timedelta(seconds=1)

        first = reaper.run_cycle(later)
        second = reaper.run_cycle(later)

        assert first.succeeded == 1
        assert second.attempted == 0

    def test_overlapping_cycles_do_not_fail(self, memory_repository, mock_gateway, fixed_now):
        expired_at = fixed_now - timedelta(minutes=1)
        for i in range(20):
            _register(memory_repository, mock_gateway, f"/objects/uploads/{i}", expired_at)
        reapers = [ExpiredFileReaper(memory_repository, mock_gateway) for _ in range(3)]
        reports = []

        threads = [
            threading.Thread(target=lambda r=r: reports.append(r.run_cycle(fixed_now)))
            for r in reapers
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert all(report.failed == 0 for report in reports)
        assert memory_repository.count() == 0
        assert mock_gateway.blobs == {}

    def test_report_to_dict(self, reaper, memory_repository, mock_gateway, fixed_now):
        _register(memory_repository, mock_gateway, "/objects/uploads/a", fixed_now)
        mock_gateway.fail_deletes.add("/objects/uploads/a")

        data = reaper.run_cycle(fixed_now + timedelta(seconds=1)).to_dict()

        assert data["attempted"] == 1
        assert data["failed"] == 1
        assert data["failures"][0]["stage"] == "blob"
        assert data["started_at"] == "2024-01-15T12:00:01+00:00"
        assert data["scan_failed"] is False


class TestReaperEvents:
    def test_publishes_reclaim_and_cycle_events(self, memory_repository, mock_gateway, fixed_now):
        publisher = Mock()
        reaper = ExpiredFileReaper(
            memory_repository, mock_gateway, max_workers=1, event_publisher=publisher
        )
        _register(memory_repository, mock_gateway, "/objects/uploads/a", fixed_now)
        _register(memory_repository, mock_gateway, "/objects/uploads/b", fixed_now)
        mock_gateway.fail_deletes.add("/objects/uploads/b")

        reaper.run_cycle(fixed_now + timedelta(seconds=1))

        events = [c[0][0] for c in publisher.publish.call_args_list]
        assert sum(isinstance(e, FileReclaimedEvent) for e in events) == 1
        failed = [e for e in events if isinstance(e, FileReclaimFailedEvent)]
        assert len(failed) == 1 and failed[0].stage == "blob"
        cycle = events[-1]
        assert isinstance(cycle, ReaperCycleCompletedEvent)
        assert (cycle.attempted, cycle.succeeded, cycle.failed) == (2, 1, 1)

    def test_no_cycle_event_when_nothing_expired(self, memory_repository, mock_gateway, fixed_now):
        publisher = Mock()

        ExpiredFileReaper(
            memory_repository, mock_gateway, event_publisher=publisher
        ).run_cycle(fixed_now)

        publisher.publish.assert_not_called()


class TestReaperRacingDownloads:
    def test_downloads_during_cycle_are_served_whole_or_refused(
        self, memory_repository, mock_gateway, fixed_now
    ):
        payload = b"x" * 4096
        _register(
            memory_repository, mock_gateway, "/objects/uploads/a", fixed_now, data=payload
        )
        manager = FileManager(memory_repository, mock_gateway)
        reaper = ExpiredFileReaper(memory_repository, mock_gateway)
        before_expiry = fixed_now - timedelta(seconds=1)
        outcomes = []
        lock = threading.Lock()

        def download():
            for _ in range(50):
                try:
                    _, stream = manager.open_download("/objects/uploads/a", now=before_expiry)
                    result = stream.read()
                except FileRecordNotFoundError:
                    result = "not-found"
                with lock:
                    outcomes.append(result)

        readers = [threading.Thread(target=download) for _ in range(4)]
        for reader in readers:
            reader.start()
        reaper.run_cycle(fixed_now + timedelta(seconds=1))
        for reader in readers:
            reader.join()

        assert all(outcome in (payload, "not-found") for outcome in outcomes)
        assert memory_repository.count() == 0
