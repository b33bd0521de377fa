"""
Logging Event Handler

Infrastructure event handler for logging domain events.
Subscribes to domain events and logs them appropriately.
Domain layer remains unaware of logging infrastructure.
"""

import logging

from tempdrop.domain.events import (
    DomainEvent,
    FileDownloadedEvent,
    FileReclaimedEvent,
    FileReclaimFailedEvent,
    FileRegisteredEvent,
    ReaperCycleCompletedEvent,
)


class LoggingEventHandler:
    """
    Infrastructure event handler for logging domain events.

    Subscribes to domain events and logs them appropriately.
    Domain layer remains unaware of logging infrastructure.
    """

    def __init__(self, logger: logging.Logger):
        """
        Initialize with logger instance.

        Args:
            logger: Python logging.Logger instance
        """
        self.logger = logger

    def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event by logging it.

        Args:
            event: Domain event to log
        """
        try:
            if isinstance(event, FileRegisteredEvent):
                self._handle_file_registered(event)
            elif isinstance(event, FileDownloadedEvent):
                self._handle_file_downloaded(event)
            elif isinstance(event, FileReclaimedEvent):
                self._handle_file_reclaimed(event)
            elif isinstance(event, FileReclaimFailedEvent):
                self._handle_reclaim_failed(event)
            elif isinstance(event, ReaperCycleCompletedEvent):
                self._handle_cycle_completed(event)
            else:
                self.logger.debug(
                    f"Unhandled event: {event.__class__.__name__} "
                    f"(aggregate_id={event.aggregate_id})"
                )
        except Exception as e:
            # Log handler errors but don't fail the operation
            self.logger.error(
                f"Error in logging event handler for {event.__class__.__name__}: {e}",
                exc_info=True,
            )

    def _handle_file_registered(self, event: FileRegisteredEvent) -> None:
        """Log file registration."""
        self.logger.info(
            f"File registered: file_id={event.aggregate_id}, "
            f"path={event.object_path}, name={event.original_filename}, "
            f"size={event.size} bytes, expires={event.expiration_time.isoformat()}"
        )

    def _handle_file_downloaded(self, event: FileDownloadedEvent) -> None:
        """Log file download."""
        self.logger.info(
            f"File downloaded: file_id={event.aggregate_id}, path={event.object_path}"
        )

    def _handle_file_reclaimed(self, event: FileReclaimedEvent) -> None:
        self.logger.info(
            f"File reclaimed: file_id={event.aggregate_id}, path={event.object_path}"
        )

    def _handle_reclaim_failed(self, event: FileReclaimFailedEvent) -> None:
        """Log a reclaim failure; it is retried on the next cycle."""
        self.logger.warning(
            f"File reclaim failed: file_id={event.aggregate_id}, "
            f"path={event.object_path}, stage={event.stage}, "
            f"error={event.error_message}"
        )

    def _handle_cycle_completed(self, event: ReaperCycleCompletedEvent) -> None:
        """Log reaper cycle summary."""
        self.logger.info(
            f"Reaper cycle completed: attempted={event.attempted}, "
            f"succeeded={event.succeeded}, failed={event.failed}, "
            f"duration={event.duration_seconds:.3f}s"
        )
