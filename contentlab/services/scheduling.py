"""
SchedulingService - client-facing schedule, cancel and reschedule.

Each operation reads current state from the stores, applies the state machine,
writes with conditional updates keyed on the status it read, and finishes with
a read-after-write so the caller gets the store's copy back.

Key behaviors:
- At most one pending ScheduledPublication per content id
- Content.scheduled_at is set iff a pending schedule exists for it
- A failed schedule-record insert rolls the content back before re-raising
- Past instants are accepted (by default) and published on the next job run
"""

from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from contentlab.domain.entities import Content, ScheduledPublication, as_utc
from contentlab.domain.errors import (
    AlreadyScheduled,
    Conflict,
    InvalidSchedule,
    NotFound,
    StoreUnavailable,
)
from contentlab.domain.state import revert_to_draft, transition
from contentlab.ports.clock import ClockPort
from contentlab.ports.repo import ContentRepoPort, ScheduleRepoPort
from contentlab.rules.models import SchedulingRules

logger = logging.getLogger(__name__)

# Conflicts tolerated when only scheduled_at changes and status is left alone.
_SCHEDULED_AT_RETRIES = 3


class SchedulingService:
    def __init__(
        self,
        content_repo: ContentRepoPort,
        schedule_repo: ScheduleRepoPort,
        clock: ClockPort,
        rules: SchedulingRules | None = None,
    ) -> None:
        self._content = content_repo
        self._schedules = schedule_repo
        self._clock = clock
        self._rules = rules or SchedulingRules()

    # --- Operations ---

    def schedule(self, content_id: UUID, at: datetime) -> ScheduledPublication:
        """
        Schedule content for publishing at ``at``.

        Moves the content draft -> pending_approval, records scheduled_at on it
        and creates a pending ScheduledPublication.

        Raises:
            NotFound: content does not exist
            AlreadyScheduled: a pending schedule already exists for the content
            InvalidTransition: content is not in draft
            InvalidSchedule: ``at`` is past and past schedules are disabled
            StoreUnavailable: a store could not be reached
        """
        at = as_utc(at)
        now = self._clock.now_utc()

        prior = self._get_content(content_id)
        self._check_instant(at, now)
        if self._schedules.get_pending_for_content(content_id) is not None:
            raise AlreadyScheduled(content_id)

        updated = transition(prior, "pending_approval", now).model_copy(
            update={"scheduled_at": at}
        )
        self._content.update(updated, expected_status=prior.status)

        record = ScheduledPublication(content_id=content_id, scheduled_at=at, created_at=now)
        try:
            self._schedules.add(record)
        except Exception:
            self._rollback_content(prior, updated)
            raise

        logger.info("Scheduled content %s for %s (schedule %s)", content_id, at, record.id)
        return self._confirm(record.id)

    def cancel(self, schedule_id: UUID) -> None:
        """
        Cancel a pending schedule: content back to draft, schedule deleted.

        Raises:
            NotFound: schedule missing or no longer pending
            InvalidTransition: content is already published
        """
        record = self._get_pending(schedule_id)
        now = self._clock.now_utc()

        content = self._content.get_by_id(record.content_id)
        reverted: Content | None = None
        if content is not None:
            reverted = revert_to_draft(content, now)
            self._content.update(reverted, expected_status=content.status)

        try:
            self._schedules.delete(schedule_id, expected_status="pending")
        except (Conflict, NotFound) as e:
            # The job (or another caller) resolved it between our read and delete.
            if content is not None and reverted is not None:
                self._rollback_content(content, reverted)
            raise NotFound("ScheduledPublication", schedule_id, "no longer pending") from e
        except Exception:
            if content is not None and reverted is not None:
                self._rollback_content(content, reverted)
            raise

        logger.info("Cancelled schedule %s for content %s", schedule_id, record.content_id)

    def reschedule(self, schedule_id: UUID, new_at: datetime) -> ScheduledPublication:
        """
        Move a pending schedule to ``new_at``. Statuses are untouched.

        Raises:
            NotFound: schedule missing or no longer pending
            InvalidSchedule: ``new_at`` is past and past schedules are disabled
            StoreUnavailable: a store could not be reached; the schedule keeps
                its previous instant
        """
        new_at = as_utc(new_at)
        now = self._clock.now_utc()

        record = self._get_pending(schedule_id)
        self._check_instant(new_at, now)
        try:
            self._schedules.update(
                record.model_copy(update={"scheduled_at": new_at}),
                expected_status="pending",
            )
        except (Conflict, NotFound) as e:
            raise NotFound("ScheduledPublication", schedule_id, "no longer pending") from e

        try:
            self._set_content_scheduled_at(record.content_id, new_at, now)
        except Exception:
            self._rollback_schedule(record, new_at)
            raise

        logger.info("Rescheduled %s from %s to %s", schedule_id, record.scheduled_at, new_at)
        return self._confirm(schedule_id)

    # --- Reads ---

    def get(self, schedule_id: UUID) -> ScheduledPublication:
        record = self._schedules.get_by_id(schedule_id)
        if record is None:
            raise NotFound("ScheduledPublication", schedule_id)
        return record

    def pending_for_content(self, content_id: UUID) -> ScheduledPublication | None:
        return self._schedules.get_pending_for_content(content_id)

    def list_for_owner(self, owner_id: UUID) -> list[ScheduledPublication]:
        """All schedules for the owner's content, earliest scheduled_at first."""
        contents = self._content.list_items({"owner_id": owner_id})
        return self._schedules.list_for_contents(c.id for c in contents)

    # --- Helpers ---

    def _check_instant(self, at: datetime, now: datetime) -> None:
        if at > now:
            return
        if not self._rules.allow_past_schedule:
            raise InvalidSchedule("Publish time must be in the future")
        logger.info("Schedule instant %s is not in the future; next job run will publish it", at)

    def _get_content(self, content_id: UUID) -> Content:
        content = self._content.get_by_id(content_id)
        if content is None:
            raise NotFound("Content", content_id)
        return content

    def _get_pending(self, schedule_id: UUID) -> ScheduledPublication:
        record = self._schedules.get_by_id(schedule_id)
        if record is None:
            raise NotFound("ScheduledPublication", schedule_id)
        if not record.is_pending:
            raise NotFound("ScheduledPublication", schedule_id, f"status is {record.status}")
        return record

    def _confirm(self, schedule_id: UUID) -> ScheduledPublication:
        record = self._schedules.get_by_id(schedule_id)
        if record is None:
            raise StoreUnavailable(f"Schedule {schedule_id} not readable after write")
        return record

    def _rollback_content(self, prior: Content, written: Content) -> None:
        """Compensate a content write, only if nobody has changed it since."""
        try:
            self._content.update(prior, expected_status=written.status)
        except Exception:
            logger.exception("Rollback of content %s failed", prior.id)
        else:
            logger.info("Rolled back content %s to %s", prior.id, prior.status)

    def _rollback_schedule(self, prior: ScheduledPublication, written_at: datetime) -> None:
        """Restore the previous instant, only if the record is still the one we wrote."""
        try:
            current = self._schedules.get_by_id(prior.id)
            if current is None or not current.is_pending or current.scheduled_at != written_at:
                logger.warning("Schedule %s changed since reschedule; not rolled back", prior.id)
                return
            self._schedules.update(
                current.model_copy(update={"scheduled_at": prior.scheduled_at}),
                expected_status="pending",
            )
        except Exception:
            logger.exception("Rollback of schedule %s failed", prior.id)
        else:
            logger.info("Rolled back schedule %s to %s", prior.id, prior.scheduled_at)

    def _set_content_scheduled_at(
        self,
        content_id: UUID,
        value: datetime | None,
        now: datetime,
    ) -> None:
        # Status may move under us (reviewer actions); re-read and retry.
        for _ in range(_SCHEDULED_AT_RETRIES):
            content = self._content.get_by_id(content_id)
            if content is None:
                logger.warning("Content %s vanished while updating scheduled_at", content_id)
                return
            try:
                self._content.update(
                    content.model_copy(update={"scheduled_at": value, "updated_at": now}),
                    expected_status=content.status,
                )
                return
            except Conflict:
                continue
        raise Conflict(f"Content {content_id} kept changing while updating scheduled_at")
