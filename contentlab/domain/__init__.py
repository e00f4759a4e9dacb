from contentlab.domain.entities import Content, ScheduledPublication
from contentlab.domain.errors import (
    AlreadyScheduled,
    Conflict,
    InvalidContent,
    InvalidSchedule,
    InvalidTransition,
    LifecycleError,
    NotFound,
    StoreUnavailable,
)

__all__ = [
    "AlreadyScheduled",
    "Conflict",
    "Content",
    "InvalidContent",
    "InvalidSchedule",
    "InvalidTransition",
    "LifecycleError",
    "NotFound",
    "ScheduledPublication",
    "StoreUnavailable",
]
