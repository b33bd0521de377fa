"""
Reaper Scheduler

Runs ExpiredFileReaper cycles on a fixed interval inside the API process.

A timer thread produces ticks into a single-slot queue and a worker thread
consumes them. A tick that arrives while a cycle is running, or while
another tick is already waiting, is dropped, so slow cycles never pile up.
"""

import atexit
import logging
import queue
import threading
from typing import Optional

from tempdrop.application.reaper_service import ExpiredFileReaper, ReapReport

logger = logging.getLogger(__name__)

_TICK = "tick"
_STOP = "stop"


class ReaperScheduler:
    """
    Interval scheduler for the reaper with graceful shutdown.

    Example:
        scheduler = ReaperScheduler(reaper, interval_seconds=60)
        scheduler.start()
        ...
        scheduler.stop()  # lets an in-flight cycle finish
    """

    def __init__(self, reaper: ExpiredFileReaper, interval_seconds: float = 60.0):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self.reaper = reaper
        self.interval_seconds = interval_seconds

        self._queue: "queue.Queue[str]" = queue.Queue(maxsize=1)
        self._stop_event = threading.Event()
        self._busy = threading.Event()
        self._lock = threading.Lock()
        self._cycle_lock = threading.Lock()
        self._timer_thread: Optional[threading.Thread] = None
        self._worker_thread: Optional[threading.Thread] = None
        self._atexit_registered = False

        self.last_report: Optional[ReapReport] = None
        self.completed_cycles = 0
        self.dropped_ticks = 0

    @property
    def is_running(self) -> bool:
        return self._worker_thread is not None and self._worker_thread.is_alive()

    def start(self) -> None:
        """Start the timer and worker threads. Calling start twice is a no-op."""
        with self._lock:
            if self.is_running:
                return

            self._stop_event.clear()
            self._worker_thread = threading.Thread(
                target=self._work_loop, name="reaper-worker", daemon=True
            )
            self._timer_thread = threading.Thread(
                target=self._tick_loop, name="reaper-timer", daemon=True
            )
            self._worker_thread.start()
            self._timer_thread.start()

            if not self._atexit_registered:
                atexit.register(self.stop)
                self._atexit_registered = True

        logger.info(f"Reaper scheduler started (interval={self.interval_seconds}s)")

    def stop(self, timeout: Optional[float] = None) -> None:
        """
        Stop scheduling new cycles and wait for the in-flight one.

        A tick that is queued but not yet started is discarded.

        Args:
            timeout: Seconds to wait for each thread (None waits indefinitely)
        """
        with self._lock:
            if self._worker_thread is None:
                return
            self._stop_event.set()
            timer, worker = self._timer_thread, self._worker_thread

        if timer is not None:
            timer.join(timeout)

        try:
            self._queue.get_nowait()
        except queue.Empty:
            pass

        try:
            self._queue.put(_STOP, timeout=timeout)
        except queue.Full:
            logger.warning("Reaper scheduler stop timed out waiting for the worker")

        worker.join(timeout)

        with self._lock:
            if not worker.is_alive():
                self._worker_thread = None
                self._timer_thread = None

        logger.info("Reaper scheduler stopped")

    def trigger(self) -> bool:
        """
        Request a cycle from the worker.

        Returns:
            True if the tick was queued, False if it was dropped
        """
        with self._lock:
            if self._stop_event.is_set():
                return False
            if self._busy.is_set():
                self.dropped_ticks += 1
                logger.debug("Reaper tick dropped, a cycle is still running")
                return False
            try:
                self._queue.put_nowait(_TICK)
            except queue.Full:
                self.dropped_ticks += 1
                logger.debug("Reaper tick dropped, a cycle is already queued")
                return False
            return True

    def run_once(self) -> ReapReport:
        """Run one cycle synchronously in the calling thread."""
        return self._run_cycle()

    def _tick_loop(self) -> None:
        while not self._stop_event.wait(self.interval_seconds):
            self.trigger()

    def _work_loop(self) -> None:
        while True:
            item = self._queue.get()
            if item == _STOP:
                return

            self._busy.set()
            try:
                self._run_cycle()
            except Exception as e:
                logger.error(f"Reaper cycle crashed: {e}", exc_info=True)
            finally:
                self._busy.clear()

    def _run_cycle(self) -> ReapReport:
        with self._cycle_lock:
            report = self.reaper.run_cycle()
            self.last_report = report
            self.completed_cycles += 1
            return report
