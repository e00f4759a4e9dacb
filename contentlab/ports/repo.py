"""
Store ports consumed by the scheduling core.

Both stores are external collaborators. The core only relies on this narrow
surface; status mutations always go through ``update`` with the status the
caller expects to find, and adapters must reject (raise ``Conflict``) rather
than overwrite when the stored status differs.

Adapters raise ``StoreUnavailable`` when the backend cannot be reached.
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Any, Protocol
from uuid import UUID

from contentlab.domain.entities import (
    Content,
    ContentStatus,
    ScheduledPublication,
    ScheduleStatus,
)


class ContentRepoPort(Protocol):
    def add(self, content: Content) -> Content:
        ...

    def get_by_id(self, item_id: UUID) -> Content | None:
        ...

    def update(self, content: Content, expected_status: ContentStatus) -> Content:
        """Write ``content`` only if the stored status equals ``expected_status``."""
        ...

    def list_items(self, filters: dict[str, Any]) -> list[Content]:
        ...

    def delete(self, item_id: UUID) -> None:
        ...


class ScheduleRepoPort(Protocol):
    def add(self, schedule: ScheduledPublication) -> ScheduledPublication:
        ...

    def get_by_id(self, schedule_id: UUID) -> ScheduledPublication | None:
        ...

    def update(
        self,
        schedule: ScheduledPublication,
        expected_status: ScheduleStatus,
    ) -> ScheduledPublication:
        """Write ``schedule`` only if the stored status equals ``expected_status``."""
        ...

    def delete(self, schedule_id: UUID, expected_status: ScheduleStatus = "pending") -> None:
        ...

    def get_pending_for_content(self, content_id: UUID) -> ScheduledPublication | None:
        ...

    def list_due(self, now_utc: datetime, limit: int = 100) -> list[ScheduledPublication]:
        """Pending records with scheduled_at <= now_utc."""
        ...

    def list_for_contents(self, content_ids: Iterable[UUID]) -> list[ScheduledPublication]:
        """All records for the given content ids, ordered by scheduled_at."""
        ...
