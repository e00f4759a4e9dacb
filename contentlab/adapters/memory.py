"""
In-memory store adapters.

Used by tests and `ServiceContext.in_memory`. Records are copied on the way in and on the
way out so callers never share mutable state with the store, the same way a
remote store behaves. A single lock per repo makes each conditional update
atomic with respect to concurrent job runs.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from datetime import datetime
from typing import Any
from uuid import UUID

from contentlab.domain.entities import (
    Content,
    ContentStatus,
    ScheduledPublication,
    ScheduleStatus,
    as_utc,
)
from contentlab.domain.errors import Conflict, NotFound


class InMemoryContentRepo:
    def __init__(self) -> None:
        self._items: dict[UUID, Content] = {}
        self._lock = threading.Lock()

    def add(self, content: Content) -> Content:
        with self._lock:
            if content.id in self._items:
                raise Conflict(f"Content {content.id} already exists")
            self._items[content.id] = content.model_copy(deep=True)
            return content.model_copy(deep=True)

    def get_by_id(self, item_id: UUID) -> Content | None:
        with self._lock:
            item = self._items.get(item_id)
            return item.model_copy(deep=True) if item else None

    def update(self, content: Content, expected_status: ContentStatus) -> Content:
        with self._lock:
            current = self._items.get(content.id)
            if current is None:
                raise NotFound("Content", content.id)
            if current.status != expected_status:
                raise Conflict(
                    f"Content {content.id} is {current.status}, expected {expected_status}"
                )
            self._items[content.id] = content.model_copy(deep=True)
            return content.model_copy(deep=True)

    def list_items(self, filters: dict[str, Any]) -> list[Content]:
        status = filters.get("status")
        owner_id = filters.get("owner_id")
        with self._lock:
            items = [
                i.model_copy(deep=True)
                for i in self._items.values()
                if (status is None or i.status == status)
                and (owner_id is None or i.owner_id == owner_id)
            ]
        items.sort(key=lambda i: i.created_at, reverse=True)
        return items

    def delete(self, item_id: UUID) -> None:
        with self._lock:
            self._items.pop(item_id, None)


class InMemoryScheduleRepo:
    def __init__(self) -> None:
        self._items: dict[UUID, ScheduledPublication] = {}
        self._lock = threading.Lock()

    def add(self, schedule: ScheduledPublication) -> ScheduledPublication:
        with self._lock:
            if schedule.id in self._items:
                raise Conflict(f"Schedule {schedule.id} already exists")
            self._items[schedule.id] = schedule.model_copy(deep=True)
            return schedule.model_copy(deep=True)

    def get_by_id(self, schedule_id: UUID) -> ScheduledPublication | None:
        with self._lock:
            item = self._items.get(schedule_id)
            return item.model_copy(deep=True) if item else None

    def update(
        self,
        schedule: ScheduledPublication,
        expected_status: ScheduleStatus,
    ) -> ScheduledPublication:
        with self._lock:
            current = self._items.get(schedule.id)
            if current is None:
                raise NotFound("ScheduledPublication", schedule.id)
            if current.status != expected_status:
                raise Conflict(
                    f"Schedule {schedule.id} is {current.status}, expected {expected_status}"
                )
            self._items[schedule.id] = schedule.model_copy(deep=True)
            return schedule.model_copy(deep=True)

    def delete(self, schedule_id: UUID, expected_status: ScheduleStatus = "pending") -> None:
        with self._lock:
            current = self._items.get(schedule_id)
            if current is None:
                raise NotFound("ScheduledPublication", schedule_id)
            if current.status != expected_status:
                raise Conflict(
                    f"Schedule {schedule_id} is {current.status}, expected {expected_status}"
                )
            del self._items[schedule_id]

    def get_pending_for_content(self, content_id: UUID) -> ScheduledPublication | None:
        with self._lock:
            for item in self._items.values():
                if item.content_id == content_id and item.status == "pending":
                    return item.model_copy(deep=True)
        return None

    def list_due(self, now_utc: datetime, limit: int = 100) -> list[ScheduledPublication]:
        now_utc = as_utc(now_utc)
        with self._lock:
            due = [i.model_copy(deep=True) for i in self._items.values() if i.is_due(now_utc)]
        due.sort(key=lambda i: i.scheduled_at)
        return due[:limit]

    def list_for_contents(self, content_ids: Iterable[UUID]) -> list[ScheduledPublication]:
        wanted = set(content_ids)
        with self._lock:
            result = [
                i.model_copy(deep=True) for i in self._items.values() if i.content_id in wanted
            ]
        result.sort(key=lambda i: i.scheduled_at)
        return result
