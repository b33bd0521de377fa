from datetime import datetime, timezone

import pytest

from tempdrop.domain.events import (
    DomainEvent,
    FileDownloadedEvent,
    FileReclaimedEvent,
    FileReclaimFailedEvent,
    FileRegisteredEvent,
    ReaperCycleCompletedEvent,
)


def test_all_events_to_dict_cover_fields():
    now = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

    cases = [
        FileRegisteredEvent(
            aggregate_id="f1",
            occurred_at=now,
            object_path="/objects/uploads/a",
            original_filename="a.pdf",
            size=10,
            expiration_time=now,
        ),
        FileDownloadedEvent(
            aggregate_id="f1",
            occurred_at=now,
            object_path="/objects/uploads/a",
            original_filename="a.pdf",
        ),
        FileReclaimedEvent(
            aggregate_id="f1",
            occurred_at=now,
            object_path="/objects/uploads/a",
            original_filename="a.pdf",
        ),
        FileReclaimFailedEvent(
            aggregate_id="f1",
            occurred_at=now,
            object_path="/objects/uploads/a",
            stage="blob",
            error_message="boom",
        ),
        ReaperCycleCompletedEvent(
            aggregate_id=now.isoformat(),
            occurred_at=now,
            attempted=3,
            succeeded=2,
            failed=1,
            duration_seconds=0.5,
        ),
    ]

    for event in cases:
        data = event.to_dict()
        assert data["event_type"] == event.__class__.__name__
        assert data["occurred_at"] == "2024-01-15T12:00:00+00:00"
        for field_name in event.__dataclass_fields__:
            assert field_name in data


def test_registered_event_serializes_expiration():
    now = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)
    event = FileRegisteredEvent(
        aggregate_id="f1",
        occurred_at=now,
        object_path="/objects/uploads/a",
        original_filename="a.pdf",
        size=10,
        expiration_time=now,
    )

    assert event.to_dict()["expiration_time"] == "2024-01-15T12:00:00+00:00"


def test_events_are_immutable():
    event = FileDownloadedEvent(
        aggregate_id="f1",
        occurred_at=datetime.now(timezone.utc),
        object_path="/objects/uploads/a",
        original_filename="a.pdf",
    )

    with pytest.raises(AttributeError):
        event.aggregate_id = "other"


def test_all_events_are_domain_events():
    for event_type in (
        FileRegisteredEvent,
        FileDownloadedEvent,
        FileReclaimedEvent,
        FileReclaimFailedEvent,
        ReaperCycleCompletedEvent,
    ):
        assert issubclass(event_type, DomainEvent)
