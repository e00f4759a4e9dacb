"""
Error types for the content lifecycle and scheduling core.

Every error carries a stable ``code`` (used by the API layer when building
responses) and a human readable message.
"""

from __future__ import annotations

from uuid import UUID


class LifecycleError(Exception):
    """Base class for all errors raised by the core."""

    code = "lifecycle_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class InvalidTransition(LifecycleError):
    """Attempted a status move that the state machine does not allow."""

    code = "invalid_transition"

    def __init__(self, from_status: str, to_status: str) -> None:
        super().__init__(f"Invalid transition from {from_status} to {to_status}")
        self.from_status = from_status
        self.to_status = to_status


class NotFound(LifecycleError):
    """Referenced record does not exist or is not in the required status."""

    code = "not_found"

    def __init__(self, kind: str, record_id: UUID | str, reason: str | None = None) -> None:
        message = f"{kind} {record_id} not found"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.kind = kind
        self.record_id = record_id


class Conflict(LifecycleError):
    """A conditional write was rejected because the stored status changed."""

    code = "conflict"


class AlreadyScheduled(Conflict):
    code = "already_scheduled"

    def __init__(self, content_id: UUID) -> None:
        super().__init__(f"Content {content_id} already has a pending schedule")
        self.content_id = content_id


class InvalidSchedule(LifecycleError):
    code = "invalid_schedule"


class StoreUnavailable(LifecycleError):
    """The backing store could not be reached or failed mid-operation."""

    code = "store_unavailable"


class InvalidContent(LifecycleError):
    code = "invalid_content"
