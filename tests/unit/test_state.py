from datetime import UTC, datetime, timedelta

import pytest

from contentlab.domain.entities import CONTENT_STATUSES, Content
from contentlab.domain.errors import InvalidTransition
from contentlab.domain.state import (
    allowed_targets,
    can_transition,
    is_terminal,
    revert_to_draft,
    transition,
    triggered_by,
)

NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


def make(status: str, **kwargs) -> Content:
    return Content(title="Hello", status=status, **kwargs)


def test_content_defaults():
    item = Content(title="Hello")
    assert item.status == "draft"
    assert item.type == "post"
    assert item.scheduled_at is None
    assert item.published_at is None
    assert item.view_count == 0


def test_tags_are_deduplicated():
    item = Content(title="Hello", tags=["a", "b", "a"])
    assert item.tags == ["a", "b"]


def test_naive_datetimes_are_utc():
    item = Content(title="Hello", scheduled_at=datetime(2024, 1, 1, 9, 0))
    assert item.scheduled_at == datetime(2024, 1, 1, 9, 0, tzinfo=UTC)


@pytest.mark.parametrize(
    "current,new",
    [
        ("draft", "pending_approval"),
        ("pending_approval", "approved"),
        ("pending_approval", "rejected"),
        ("approved", "published"),
        ("rejected", "draft"),
    ],
)
def test_legal_transitions(current, new):
    assert can_transition(current, new) is True
    moved = transition(make(current), new, NOW)
    assert moved.status == new
    assert moved.updated_at == NOW


def test_draft_cannot_publish():
    with pytest.raises(InvalidTransition) as exc:
        transition(make("draft"), "published", NOW)
    assert exc.value.from_status == "draft"
    assert exc.value.to_status == "published"


@pytest.mark.parametrize("target", CONTENT_STATUSES)
def test_published_is_terminal(target):
    item = make("published", published_at=NOW)
    assert is_terminal("published")
    assert allowed_targets("published") == []
    with pytest.raises(InvalidTransition):
        transition(item, target, NOW + timedelta(hours=1))


def test_self_transition_rejected():
    with pytest.raises(InvalidTransition):
        transition(make("approved"), "approved", NOW)


def test_publish_sets_published_at_and_clears_schedule():
    item = make("approved", scheduled_at=NOW - timedelta(minutes=5))
    published = transition(item, "published", NOW)
    assert published.published_at == NOW
    assert published.scheduled_at is None
    # original untouched
    assert item.status == "approved"
    assert item.published_at is None


def test_triggers():
    assert triggered_by("approved", "published") == {"user", "system"}
    assert triggered_by("pending_approval", "approved") == {"reviewer"}
    assert triggered_by("draft", "published") == frozenset()


def test_allowed_targets_from_pending():
    assert sorted(allowed_targets("pending_approval")) == ["approved", "rejected"]


@pytest.mark.parametrize("status", ["draft", "pending_approval", "approved", "rejected"])
def test_revert_to_draft_clears_schedule(status):
    item = make(status, scheduled_at=NOW)
    reverted = revert_to_draft(item, NOW)
    assert reverted.status == "draft"
    assert reverted.scheduled_at is None


def test_revert_to_draft_from_published_fails():
    with pytest.raises(InvalidTransition):
        revert_to_draft(make("published", published_at=NOW), NOW)
