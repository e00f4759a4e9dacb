from datetime import datetime
from typing import Any, Literal

from contentlab.domain.entities import Content, ContentStatus, as_utc
from contentlab.domain.errors import InvalidTransition

Actor = Literal["user", "reviewer", "system"]

# Edge -> actors allowed to trigger it. Anything missing here is illegal.
TRANSITIONS: dict[tuple[ContentStatus, ContentStatus], frozenset[Actor]] = {
    ("draft", "pending_approval"): frozenset({"user"}),
    ("pending_approval", "approved"): frozenset({"reviewer"}),
    ("pending_approval", "rejected"): frozenset({"reviewer"}),
    ("approved", "published"): frozenset({"user", "system"}),
    ("rejected", "draft"): frozenset({"user"}),
}

TERMINAL_STATES: frozenset[ContentStatus] = frozenset({"published"})

# Statuses a pending schedule can be cancelled out of, back to draft.
CANCELLABLE_STATES: frozenset[ContentStatus] = frozenset(
    {"draft", "pending_approval", "approved", "rejected"}
)


def can_transition(current: ContentStatus, new: ContentStatus) -> bool:
    """
    Determine if a state transition is allowed based on the rules.
    """
    return (current, new) in TRANSITIONS


def is_terminal(status: ContentStatus) -> bool:
    return status in TERMINAL_STATES


def allowed_targets(current: ContentStatus) -> list[ContentStatus]:
    return [to for (frm, to) in TRANSITIONS if frm == current]


def triggered_by(current: ContentStatus, new: ContentStatus) -> frozenset[Actor]:
    return TRANSITIONS.get((current, new), frozenset())


def transition(item: Content, new_status: ContentStatus, now: datetime) -> Content:
    """
    Return a NEW Content with the updated status and timestamps.
    Raises InvalidTransition if the move is not in the table.
    """
    if not can_transition(item.status, new_status):
        raise InvalidTransition(item.status, new_status)

    now = as_utc(now)
    updates: dict[str, Any] = {
        "status": new_status,
        "updated_at": now,
    }

    if new_status == "published":
        # published_at is written exactly once, on the move into published.
        updates["published_at"] = now
        updates["scheduled_at"] = None

    return item.model_copy(update=updates)


def revert_to_draft(item: Content, now: datetime) -> Content:
    """
    Undo a schedule: put the content back in draft with no scheduled_at.

    This is the cancel path, not a reviewer move, so it is allowed from any
    non-terminal status.
    """
    if item.status not in CANCELLABLE_STATES:
        raise InvalidTransition(item.status, "draft")

    return item.model_copy(
        update={
            "status": "draft",
            "scheduled_at": None,
            "updated_at": as_utc(now),
        }
    )
