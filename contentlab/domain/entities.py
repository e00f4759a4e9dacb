from datetime import UTC, datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator

# --- Enums / Literals ---
ContentType = Literal["post", "carousel", "video", "story"]
ContentStatus = Literal["draft", "pending_approval", "approved", "rejected", "published"]
ScheduleStatus = Literal["pending", "published", "failed"]

CONTENT_STATUSES: tuple[ContentStatus, ...] = (
    "draft",
    "pending_approval",
    "approved",
    "rejected",
    "published",
)
CONTENT_TYPES: tuple[ContentType, ...] = ("post", "carousel", "video", "story")


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC; aware ones are converted."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


# --- Content ---

class Content(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    owner_id: UUID | None = None
    title: str = Field(min_length=1)
    description: str = ""
    type: ContentType = "post"
    media: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    status: ContentStatus = "draft"

    scheduled_at: datetime | None = None
    published_at: datetime | None = None

    view_count: int = Field(default=0, ge=0)
    engagement_score: float = Field(default=0.0, ge=0)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, tags: list[str]) -> list[str]:
        # Tags are a set; keep first occurrence order for stable output.
        return list(dict.fromkeys(tags))

    @field_validator("scheduled_at", "published_at", "created_at", "updated_at")
    @classmethod
    def _normalize_tz(cls, value: datetime | None) -> datetime | None:
        return as_utc(value) if value is not None else None


# --- Scheduled publication ---

class ScheduledPublication(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    content_id: UUID
    scheduled_at: datetime
    status: ScheduleStatus = "pending"
    created_at: datetime = Field(default_factory=utcnow)
    published_at: datetime | None = None
    error_message: str | None = None

    @field_validator("scheduled_at", "published_at", "created_at")
    @classmethod
    def _normalize_tz(cls, value: datetime | None) -> datetime | None:
        return as_utc(value) if value is not None else None

    @property
    def is_pending(self) -> bool:
        return self.status == "pending"

    def is_due(self, now: datetime) -> bool:
        return self.is_pending and self.scheduled_at <= as_utc(now)
