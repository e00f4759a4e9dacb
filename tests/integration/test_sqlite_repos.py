from datetime import UTC, datetime, timedelta, timezone
from uuid import uuid4

import pytest

from contentlab.adapters.sqlite.repos import SQLiteContentRepo, SQLiteScheduleRepo
from contentlab.domain.entities import Content, ScheduledPublication
from contentlab.domain.errors import Conflict, NotFound, StoreUnavailable

NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def contents(db_path) -> SQLiteContentRepo:
    return SQLiteContentRepo(db_path)


@pytest.fixture
def schedules(db_path) -> SQLiteScheduleRepo:
    return SQLiteScheduleRepo(db_path)


def test_content_roundtrip(contents):
    owner = uuid4()
    item = Content(
        title="Hello",
        type="carousel",
        media=["a.jpg", "b.jpg"],
        tags=["x"],
        owner_id=owner,
        scheduled_at=NOW,
    )
    contents.add(item)

    fetched = contents.get_by_id(item.id)

    assert fetched == item
    assert fetched.scheduled_at.tzinfo is not None
    assert contents.get_by_id(uuid4()) is None


def test_content_duplicate_add(contents):
    item = contents.add(Content(title="Hello"))
    with pytest.raises(Conflict):
        contents.add(item)


def test_content_conditional_update(contents):
    item = contents.add(Content(title="Hello"))

    contents.update(item.model_copy(update={"status": "pending_approval"}), "draft")

    with pytest.raises(Conflict):
        contents.update(item.model_copy(update={"status": "approved"}), "draft")
    with pytest.raises(NotFound):
        contents.update(Content(title="Ghost"), "draft")
    assert contents.get_by_id(item.id).status == "pending_approval"


def test_content_list_filters(contents):
    owner = uuid4()
    contents.add(Content(title="A", owner_id=owner))
    contents.add(Content(title="B", owner_id=owner, status="approved"))
    contents.add(Content(title="C"))

    assert len(contents.list_items({"owner_id": owner})) == 2
    assert [i.title for i in contents.list_items({"status": "approved"})] == ["B"]
    assert len(contents.list_items({})) == 3


def test_list_due_ordering_and_limit(schedules):
    late = schedules.add(ScheduledPublication(content_id=uuid4(), scheduled_at=NOW))
    early = schedules.add(
        ScheduledPublication(content_id=uuid4(), scheduled_at=NOW - timedelta(hours=1))
    )
    schedules.add(ScheduledPublication(content_id=uuid4(), scheduled_at=NOW + timedelta(seconds=1)))

    assert [s.id for s in schedules.list_due(NOW)] == [early.id, late.id]
    assert [s.id for s in schedules.list_due(NOW, limit=1)] == [early.id]


def test_list_due_compares_instants_across_offsets(schedules):
    record = schedules.add(
        ScheduledPublication(
            content_id=uuid4(),
            scheduled_at=datetime(2024, 1, 1, 13, 59, tzinfo=timezone(timedelta(hours=2))),
        )
    )
    assert [s.id for s in schedules.list_due(NOW)] == [record.id]


def test_one_pending_schedule_per_content(schedules):
    content_id = uuid4()
    schedules.add(ScheduledPublication(content_id=content_id, scheduled_at=NOW))

    with pytest.raises(Conflict):
        schedules.add(ScheduledPublication(content_id=content_id, scheduled_at=NOW))


def test_schedule_conditional_update_and_delete(schedules):
    record = schedules.add(ScheduledPublication(content_id=uuid4(), scheduled_at=NOW))

    schedules.update(record.model_copy(update={"status": "published", "published_at": NOW}), "pending")

    with pytest.raises(Conflict):
        schedules.update(record.model_copy(update={"status": "failed"}), "pending")
    with pytest.raises(Conflict):
        schedules.delete(record.id)
    with pytest.raises(NotFound):
        schedules.delete(uuid4())

    stored = schedules.get_by_id(record.id)
    assert stored.status == "published"
    assert stored.published_at == NOW


def test_pending_for_content_and_list(schedules):
    content_id = uuid4()
    failed = schedules.add(
        ScheduledPublication(content_id=content_id, scheduled_at=NOW, status="failed")
    )
    pending = schedules.add(
        ScheduledPublication(content_id=content_id, scheduled_at=NOW + timedelta(hours=1))
    )

    assert schedules.get_pending_for_content(content_id).id == pending.id
    assert [s.id for s in schedules.list_for_contents([content_id])] == [failed.id, pending.id]
    assert schedules.list_for_contents([]) == []


def test_unreachable_store(tmp_path):
    repo = SQLiteScheduleRepo(str(tmp_path / "missing" / "db.sqlite"))
    with pytest.raises(StoreUnavailable):
        repo.list_due(NOW)
