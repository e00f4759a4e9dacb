"""
PublisherJob - promote due schedules to published content.

A stateless batch run triggered externally (timer, CLI or HTTP "run now").

Key behaviors:
- Only pending schedules with scheduled_at <= now are picked up, and each is
  re-read before acting; one rescheduled or resolved since the query is skipped
- Content is written before its schedule, so a crash in between leaves the
  schedule pending and safe to retry
- Content already published counts as success; published_at is not rewritten
- The schedule write is conditional on still being pending; losing that race
  means another run handled the item and it is reported as skipped
- A per-item failure marks that schedule failed (best effort) and never
  aborts the rest of the batch
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from contentlab.domain.entities import Content, ScheduledPublication, as_utc
from contentlab.domain.errors import Conflict, NotFound, StoreUnavailable
from contentlab.domain.state import transition
from contentlab.ports.clock import ClockPort
from contentlab.ports.repo import ContentRepoPort, ScheduleRepoPort

logger = logging.getLogger(__name__)

Outcome = Literal["success", "failed", "skipped"]


# --- Report ---


@dataclass(frozen=True)
class ItemResult:
    """Outcome for one schedule in a batch."""

    id: UUID
    content_id: UUID
    status: Outcome
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": str(self.id),
            "content_id": str(self.content_id),
            "status": self.status,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class PublishReport:
    """Result of one publisher run."""

    results: list[ItemResult] = field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.status == "success")

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.status == "failed")

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if r.status == "skipped")

    def to_dict(self) -> dict[str, Any]:
        return {
            "processed": self.processed,
            "results": [r.to_dict() for r in self.results],
        }


# --- Job ---


class PublisherJob:
    def __init__(
        self,
        content_repo: ContentRepoPort,
        schedule_repo: ScheduleRepoPort,
        clock: ClockPort,
        batch_limit: int = 100,
    ) -> None:
        self._content = content_repo
        self._schedules = schedule_repo
        self._clock = clock
        self._batch_limit = batch_limit

    def run(self, now: datetime | None = None) -> PublishReport:
        """
        Process every due pending schedule.

        Args:
            now: Override of the current time (defaults to the clock)

        Returns:
            PublishReport with one entry per schedule examined

        Raises:
            StoreUnavailable: the due-query itself could not be performed
        """
        now = as_utc(now) if now else self._clock.now_utc()

        try:
            due = self._schedules.list_due(now, limit=self._batch_limit)
        except StoreUnavailable:
            logger.error("Publisher run aborted: due-query failed")
            raise

        report = self.process_batch(due, now)
        if report.processed:
            logger.info(
                "Publisher processed %d schedules: %d succeeded, %d failed, %d skipped",
                report.processed,
                report.succeeded,
                report.failed,
                report.skipped,
            )
        return report

    def process_batch(
        self,
        schedules: Iterable[ScheduledPublication],
        now: datetime,
    ) -> PublishReport:
        """Process already-fetched schedules; each item is isolated."""
        now = as_utc(now)
        return PublishReport(results=[self._process_one(s, now) for s in schedules])

    # --- Per item ---

    def _process_one(self, schedule: ScheduledPublication, now: datetime) -> ItemResult:
        # The batch may be stale; act on the stored record only.
        try:
            current = self._schedules.get_by_id(schedule.id)
        except Exception as e:
            return self._fail(schedule, e)

        if current is None or not current.is_due(now):
            logger.info("Schedule %s is no longer pending and due; skipping", schedule.id)
            return ItemResult(schedule.id, schedule.content_id, "skipped")

        try:
            self._publish_content(current, now)
        except Exception as e:
            return self._fail(current, e)

        try:
            self._schedules.update(
                current.model_copy(
                    update={"status": "published", "published_at": now, "error_message": None}
                ),
                expected_status="pending",
            )
        except Conflict:
            logger.info("Schedule %s already handled by another run; skipping", current.id)
            return ItemResult(current.id, current.content_id, "skipped")
        except Exception as e:
            return self._fail(current, e)

        return ItemResult(current.id, current.content_id, "success")

    def _fail(self, schedule: ScheduledPublication, error: Exception) -> ItemResult:
        reason = str(error) or type(error).__name__
        logger.warning(
            "Publishing content %s for schedule %s failed: %s",
            schedule.content_id,
            schedule.id,
            reason,
        )
        if not self._mark_failed(schedule, reason):
            return ItemResult(schedule.id, schedule.content_id, "skipped")
        return ItemResult(schedule.id, schedule.content_id, "failed", reason)

    def _publish_content(self, schedule: ScheduledPublication, now: datetime) -> Content:
        content = self._content.get_by_id(schedule.content_id)
        if content is None:
            raise NotFound("Content", schedule.content_id)

        if content.status == "published":
            # An overlapping run got here first; keep its published_at.
            return content

        published = transition(content, "published", now)
        try:
            return self._content.update(published, expected_status=content.status)
        except Conflict:
            current = self._content.get_by_id(schedule.content_id)
            if current is not None and current.status == "published":
                return current
            raise

    def _mark_failed(self, schedule: ScheduledPublication, reason: str) -> bool:
        """
        Best effort. Returns False if another caller resolved the schedule first.

        Any other write failure leaves the schedule pending for the next run.
        """
        try:
            self._schedules.update(
                schedule.model_copy(update={"status": "failed", "error_message": reason}),
                expected_status="pending",
            )
        except (Conflict, NotFound):
            logger.info("Schedule %s was resolved by another caller", schedule.id)
            return False
        except Exception as e:
            logger.warning("Could not mark schedule %s failed (%s); left pending", schedule.id, e)
            return True

        self._clear_content_schedule(schedule)
        return True

    def _clear_content_schedule(self, schedule: ScheduledPublication) -> None:
        # The schedule is no longer pending, so the content must not point at it.
        try:
            content = self._content.get_by_id(schedule.content_id)
            if content is None or content.scheduled_at != schedule.scheduled_at:
                return
            self._content.update(
                content.model_copy(update={"scheduled_at": None}),
                expected_status=content.status,
            )
        except Exception as e:
            logger.warning("Could not clear scheduled_at on content %s: %s", schedule.content_id, e)
