import json
import sqlite3
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
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
from contentlab.domain.errors import Conflict, NotFound, StoreUnavailable


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def to_db_dt(value: datetime | None) -> str | None:
    # Fixed-width UTC ISO strings so that SQL string comparison orders by time.
    if value is None:
        return None
    return as_utc(value).isoformat(timespec="microseconds")


def parse_dt(s: str | None) -> datetime | None:
    return as_utc(datetime.fromisoformat(s)) if s else None


class _SQLiteRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    @contextmanager
    def _conn(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Cannot open {self.db_path}: {e}") from e
        conn.row_factory = dict_factory
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreUnavailable(str(e)) from e
        finally:
            conn.close()


class SQLiteContentRepo(_SQLiteRepo):
    _columns = (
        "id, owner_id, title, description, type, media_json, tags_json, status, "
        "scheduled_at, published_at, view_count, engagement_score, created_at, updated_at"
    )

    def _params(self, item: Content) -> tuple[Any, ...]:
        return (
            str(item.id),
            str(item.owner_id) if item.owner_id else None,
            item.title,
            item.description,
            item.type,
            json.dumps(item.media),
            json.dumps(item.tags),
            item.status,
            to_db_dt(item.scheduled_at),
            to_db_dt(item.published_at),
            item.view_count,
            item.engagement_score,
            to_db_dt(item.created_at),
            to_db_dt(item.updated_at),
        )

    def _map_row(self, row: dict[str, Any]) -> Content:
        return Content(
            id=UUID(row["id"]),
            owner_id=UUID(row["owner_id"]) if row["owner_id"] else None,
            title=row["title"],
            description=row["description"],
            type=row["type"],
            media=json.loads(row["media_json"]),
            tags=json.loads(row["tags_json"]),
            status=row["status"],
            scheduled_at=parse_dt(row["scheduled_at"]),
            published_at=parse_dt(row["published_at"]),
            view_count=row["view_count"],
            engagement_score=row["engagement_score"],
            created_at=parse_dt(row["created_at"]),
            updated_at=parse_dt(row["updated_at"]),
        )

    def add(self, content: Content) -> Content:
        with self._conn() as conn:
            try:
                conn.execute(
                    f"INSERT INTO contents ({self._columns}) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    self._params(content),
                )
            except sqlite3.IntegrityError as e:
                raise Conflict(f"Content {content.id} already exists") from e
        return content

    def get_by_id(self, item_id: UUID) -> Content | None:
        with self._conn() as conn:
            row = conn.execute("SELECT * FROM contents WHERE id = ?", (str(item_id),)).fetchone()
        return self._map_row(row) if row else None

    def update(self, content: Content, expected_status: ContentStatus) -> Content:
        params = self._params(content)
        with self._conn() as conn:
            cursor = conn.execute(
                """
                UPDATE contents SET
                    owner_id = ?, title = ?, description = ?, type = ?,
                    media_json = ?, tags_json = ?, status = ?,
                    scheduled_at = ?, published_at = ?,
                    view_count = ?, engagement_score = ?, updated_at = ?
                WHERE id = ? AND status = ?
                """,
                (*params[1:12], params[13], params[0], expected_status),
            )
            if cursor.rowcount == 0:
                row = conn.execute(
                    "SELECT status FROM contents WHERE id = ?", (str(content.id),)
                ).fetchone()
                if row is None:
                    raise NotFound("Content", content.id)
                raise Conflict(
                    f"Content {content.id} is {row['status']}, expected {expected_status}"
                )
        return content

    def list_items(self, filters: dict[str, Any]) -> list[Content]:
        query = "SELECT * FROM contents WHERE 1=1"
        params: list[Any] = []

        if filters.get("status"):
            query += " AND status = ?"
            params.append(filters["status"])
        if filters.get("owner_id"):
            query += " AND owner_id = ?"
            params.append(str(filters["owner_id"]))

        query += " ORDER BY created_at DESC"

        with self._conn() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._map_row(r) for r in rows]

    def delete(self, item_id: UUID) -> None:
        with self._conn() as conn:
            conn.execute("DELETE FROM contents WHERE id = ?", (str(item_id),))


class SQLiteScheduleRepo(_SQLiteRepo):
    def _map_row(self, row: dict[str, Any]) -> ScheduledPublication:
        return ScheduledPublication(
            id=UUID(row["id"]),
            content_id=UUID(row["content_id"]),
            scheduled_at=parse_dt(row["scheduled_at"]),
            status=row["status"],
            created_at=parse_dt(row["created_at"]),
            published_at=parse_dt(row["published_at"]),
            error_message=row["error_message"],
        )

    def _missing_or_conflict(
        self,
        conn: sqlite3.Connection,
        schedule_id: UUID,
        expected_status: ScheduleStatus,
    ) -> Exception:
        row = conn.execute(
            "SELECT status FROM scheduled_publications WHERE id = ?", (str(schedule_id),)
        ).fetchone()
        if row is None:
            return NotFound("ScheduledPublication", schedule_id)
        return Conflict(f"Schedule {schedule_id} is {row['status']}, expected {expected_status}")

    def add(self, schedule: ScheduledPublication) -> ScheduledPublication:
        with self._conn() as conn:
            try:
                conn.execute(
                    """
                    INSERT INTO scheduled_publications (
                        id, content_id, scheduled_at, status,
                        created_at, published_at, error_message
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        str(schedule.id),
                        str(schedule.content_id),
                        to_db_dt(schedule.scheduled_at),
                        schedule.status,
                        to_db_dt(schedule.created_at),
                        to_db_dt(schedule.published_at),
                        schedule.error_message,
                    ),
                )
            except sqlite3.IntegrityError as e:
                raise Conflict(f"Schedule {schedule.id} already exists") from e
        return schedule

    def get_by_id(self, schedule_id: UUID) -> ScheduledPublication | None:
        with self._conn() as conn:
            row = conn.execute(
                "SELECT * FROM scheduled_publications WHERE id = ?", (str(schedule_id),)
            ).fetchone()
        return self._map_row(row) if row else None

    def update(
        self,
        schedule: ScheduledPublication,
        expected_status: ScheduleStatus,
    ) -> ScheduledPublication:
        with self._conn() as conn:
            cursor = conn.execute(
                """
                UPDATE scheduled_publications SET
                    scheduled_at = ?, status = ?, published_at = ?, error_message = ?
                WHERE id = ? AND status = ?
                """,
                (
                    to_db_dt(schedule.scheduled_at),
                    schedule.status,
                    to_db_dt(schedule.published_at),
                    schedule.error_message,
                    str(schedule.id),
                    expected_status,
                ),
            )
            if cursor.rowcount == 0:
                raise self._missing_or_conflict(conn, schedule.id, expected_status)
        return schedule

    def delete(self, schedule_id: UUID, expected_status: ScheduleStatus = "pending") -> None:
        with self._conn() as conn:
            cursor = conn.execute(
                "DELETE FROM scheduled_publications WHERE id = ? AND status = ?",
                (str(schedule_id), expected_status),
            )
            if cursor.rowcount == 0:
                raise self._missing_or_conflict(conn, schedule_id, expected_status)

    def get_pending_for_content(self, content_id: UUID) -> ScheduledPublication | None:
        with self._conn() as conn:
            row = conn.execute(
                """
                SELECT * FROM scheduled_publications
                WHERE content_id = ? AND status = 'pending'
                LIMIT 1
                """,
                (str(content_id),),
            ).fetchone()
        return self._map_row(row) if row else None

    def list_due(self, now_utc: datetime, limit: int = 100) -> list[ScheduledPublication]:
        with self._conn() as conn:
            rows = conn.execute(
                """
                SELECT * FROM scheduled_publications
                WHERE status = 'pending' AND scheduled_at <= ?
                ORDER BY scheduled_at ASC
                LIMIT ?
                """,
                (to_db_dt(now_utc), limit),
            ).fetchall()
        return [self._map_row(r) for r in rows]

    def list_for_contents(self, content_ids: Iterable[UUID]) -> list[ScheduledPublication]:
        ids = [str(c) for c in content_ids]
        if not ids:
            return []
        placeholders = ", ".join("?" for _ in ids)
        with self._conn() as conn:
            rows = conn.execute(
                f"""
                SELECT * FROM scheduled_publications
                WHERE content_id IN ({placeholders})
                ORDER BY scheduled_at ASC
                """,
                ids,
            ).fetchall()
        return [self._map_row(r) for r in rows]
