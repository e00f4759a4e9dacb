"""
Publisher trigger for local and single-process deployments.

Runs the PublisherJob on a background thread at a fixed interval, and exposes
``trigger_now`` for an explicit run. In hosted deployments the same job is
fired by an external timer hitting the HTTP or CLI entry point instead.

Key behaviors:
- The poll loop never dies on a failed run; the error is logged and the next
  tick tries again
- Overlapping ``trigger_now`` and poll runs are safe because the job uses
  conditional writes
"""

from __future__ import annotations

import logging
import threading

from contentlab.services.publisher import PublisherJob, PublishReport

logger = logging.getLogger(__name__)


class DevJobScheduler:
    """
    Background polling trigger for the publisher job.
    """

    def __init__(
        self,
        job: PublisherJob,
        poll_interval_seconds: float = 60.0,
    ) -> None:
        """
        Initialize scheduler.

        Args:
            job: Publisher job to run on each tick
            poll_interval_seconds: Interval between runs
        """
        self._job = job
        self._poll_interval = poll_interval_seconds
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._running = False

    def start(self) -> None:
        """Start the background scheduler."""
        if self._running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._poll_loop, daemon=True)
        self._thread.start()
        self._running = True
        logger.info("Publisher scheduler started (poll interval: %.1fs)", self._poll_interval)

    def stop(self) -> None:
        """Stop the scheduler gracefully."""
        if not self._running:
            return

        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=5.0)
        self._running = False
        logger.info("Publisher scheduler stopped")

    def trigger_now(self) -> PublishReport:
        """Run the publisher immediately on the caller's thread."""
        return self._job.run()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until stopped or ``timeout`` elapses. Returns True if stopped."""
        return self._stop_event.wait(timeout=timeout)

    @property
    def is_running(self) -> bool:
        """Check if scheduler is active."""
        return self._running

    def _poll_loop(self) -> None:
        """Background polling loop."""
        while not self._stop_event.wait(timeout=self._poll_interval):
            self._tick()

    def _tick(self) -> PublishReport | None:
        try:
            return self._job.run()
        except Exception:
            logger.exception("Error in publisher poll loop")
            return None


def create_dev_scheduler(
    job: PublisherJob,
    poll_interval_seconds: float = 60.0,
) -> DevJobScheduler:
    """
    Create a polling scheduler for the given job.

    Args:
        job: Publisher job to run
        poll_interval_seconds: Interval between runs

    Returns:
        Configured DevJobScheduler
    """
    return DevJobScheduler(job, poll_interval_seconds)
