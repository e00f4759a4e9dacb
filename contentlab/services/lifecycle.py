import logging
from typing import Any
from uuid import UUID

from contentlab.domain.entities import CONTENT_STATUSES, Content, ContentStatus, ContentType
from contentlab.domain.errors import Conflict, InvalidContent, NotFound
from contentlab.domain.state import transition
from contentlab.ports.clock import ClockPort
from contentlab.ports.repo import ContentRepoPort, ScheduleRepoPort
from contentlab.rules.models import ContentRules

logger = logging.getLogger(__name__)


class LifecycleService:
    """Authoring and review moves on content outside the scheduling flow."""

    def __init__(
        self,
        content_repo: ContentRepoPort,
        schedule_repo: ScheduleRepoPort,
        clock: ClockPort,
        rules: ContentRules | None = None,
    ):
        self.content_repo = content_repo
        self.schedule_repo = schedule_repo
        self.clock = clock
        self.rules = rules

    def create_draft(
        self,
        title: str,
        type: ContentType = "post",
        description: str = "",
        media: list[str] | None = None,
        tags: list[str] | None = None,
        owner_id: UUID | None = None,
    ) -> Content:
        title = title.strip()
        self._validate(title, type, tags or [])

        now = self.clock.now_utc()
        item = Content(
            title=title,
            type=type,
            description=description,
            media=media or [],
            tags=tags or [],
            owner_id=owner_id,
            status="draft",
            created_at=now,
            updated_at=now,
        )
        self.content_repo.add(item)
        return self.get(item.id)

    def get(self, content_id: UUID) -> Content:
        item = self.content_repo.get_by_id(content_id)
        if item is None:
            raise NotFound("Content", content_id)
        return item

    def list_content(
        self,
        status: ContentStatus | None = None,
        owner_id: UUID | None = None,
    ) -> list[Content]:
        filters: dict[str, Any] = {}
        if status:
            filters["status"] = status
        if owner_id:
            filters["owner_id"] = owner_id
        return self.content_repo.list_items(filters)

    def status_counts(self, owner_id: UUID | None = None) -> dict[str, int]:
        counts = {s: 0 for s in CONTENT_STATUSES}
        for item in self.list_content(owner_id=owner_id):
            counts[item.status] += 1
        return counts

    # --- Status moves ---

    def submit_for_review(self, content_id: UUID) -> Content:
        return self._move(content_id, "pending_approval")

    def approve(self, content_id: UUID) -> Content:
        return self._move(content_id, "approved")

    def reject(self, content_id: UUID) -> Content:
        return self._move(content_id, "rejected")

    def return_to_draft(self, content_id: UUID) -> Content:
        return self._move(content_id, "draft")

    def publish_now(self, content_id: UUID) -> Content:
        """
        Publish approved content immediately.
        A pending schedule for it is resolved as published too.
        """
        item = self._move(content_id, "published")

        pending = self.schedule_repo.get_pending_for_content(content_id)
        if pending is not None:
            try:
                self.schedule_repo.update(
                    pending.model_copy(
                        update={"status": "published", "published_at": item.published_at}
                    ),
                    expected_status="pending",
                )
            except Conflict:
                logger.info("Schedule %s resolved concurrently", pending.id)
        return item

    # --- Helpers ---

    def _move(self, content_id: UUID, target: ContentStatus) -> Content:
        item = self.get(content_id)
        moved = transition(item, target, self.clock.now_utc())
        self.content_repo.update(moved, expected_status=item.status)
        logger.info("Content %s: %s -> %s", content_id, item.status, target)
        return self.get(content_id)

    def _validate(self, title: str, type: str, tags: list[str]) -> None:
        if not title:
            raise InvalidContent("Title must not be empty")
        if self.rules is None:
            return
        if not self.rules.title.min <= len(title) <= self.rules.title.max:
            raise InvalidContent(
                f"Title length must be between {self.rules.title.min} and {self.rules.title.max}"
            )
        if type not in self.rules.type_values:
            raise InvalidContent(f"Unsupported content type: {type}")
        if len(set(tags)) > self.rules.max_tags:
            raise InvalidContent(f"At most {self.rules.max_tags} tags allowed")
