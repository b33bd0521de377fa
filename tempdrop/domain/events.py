"""
Domain Events

Immutable records of significant state changes in the file lifecycle.
Events decouple side effects (logging) from core business logic.
"""

from abc import ABC
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict


@dataclass(frozen=True)
class DomainEvent(ABC):
    """
    Base class for all domain events.

    Attributes:
        aggregate_id: ID of the aggregate that generated the event (file id,
            or the cycle start timestamp for reaper cycles)
        occurred_at: Timestamp when the event occurred
    """
    aggregate_id: str
    occurred_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert event to dictionary for serialization.

        Returns:
            Dictionary representation of the event
        """
        return {
            "event_type": self.__class__.__name__,
            "aggregate_id": self.aggregate_id,
            "occurred_at": self.occurred_at.isoformat(),
        }


@dataclass(frozen=True)
class FileRegisteredEvent(DomainEvent):
    """
    Event emitted when file metadata is registered after an upload.

    Attributes:
        object_path: Canonical object path of the blob
        original_filename: User-facing file name
        size: Size in bytes as reported by the uploader
        expiration_time: When the file expires
    """
    object_path: str
    original_filename: str
    size: int
    expiration_time: datetime

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict.update({
            "object_path": self.object_path,
            "original_filename": self.original_filename,
            "size": self.size,
            "expiration_time": self.expiration_time.isoformat(),
        })
        return base_dict


@dataclass(frozen=True)
class FileDownloadedEvent(DomainEvent):
    """Event emitted after a blob has been handed to a client."""
    object_path: str
    original_filename: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict.update({
            "object_path": self.object_path,
            "original_filename": self.original_filename,
        })
        return base_dict


@dataclass(frozen=True)
class FileReclaimedEvent(DomainEvent):
    """Event emitted when the reaper removed both blob and metadata."""
    object_path: str
    original_filename: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict.update({
            "object_path": self.object_path,
            "original_filename": self.original_filename,
        })
        return base_dict


@dataclass(frozen=True)
class FileReclaimFailedEvent(DomainEvent):
    """
    Event emitted when the reaper could not fully reclaim a file.

    Attributes:
        object_path: Canonical object path of the blob
        stage: 'blob' if the blob delete failed (metadata kept),
            'metadata' if the blob is gone but the record lingers
        error_message: Failure detail
    """
    object_path: str
    stage: str
    error_message: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict.update({
            "object_path": self.object_path,
            "stage": self.stage,
            "error_message": self.error_message,
        })
        return base_dict


@dataclass(frozen=True)
class ReaperCycleCompletedEvent(DomainEvent):
    """Event emitted once per reaper cycle that found expired files."""
    attempted: int
    succeeded: int
    failed: int
    duration_seconds: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict.update({
            "attempted": self.attempted,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "duration_seconds": self.duration_seconds,
        })
        return base_dict
