from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from contentlab.domain.entities import ContentStatus, ContentType, ScheduleStatus


# --- Content ---
class ContentCreateRequest(BaseModel):
    title: str = Field(min_length=1)
    type: ContentType = "post"
    description: str = ""
    media: list[str] = []
    tags: list[str] = []
    owner_id: UUID | None = None


class ContentResponse(BaseModel):
    id: UUID
    owner_id: UUID | None
    title: str
    description: str
    type: ContentType
    media: list[str]
    tags: list[str]
    status: ContentStatus
    scheduled_at: datetime | None
    published_at: datetime | None
    view_count: int
    engagement_score: float
    created_at: datetime
    updated_at: datetime


class StatusCountsResponse(BaseModel):
    total: int
    counts: dict[str, int]


# --- Scheduling ---
class ScheduleRequest(BaseModel):
    content_id: UUID
    scheduled_at: datetime = Field(..., description="Target publish time (UTC if naive)")


class RescheduleRequest(BaseModel):
    scheduled_at: datetime = Field(..., description="New publish time (UTC if naive)")


class ScheduleResponse(BaseModel):
    id: UUID
    content_id: UUID
    scheduled_at: datetime
    status: ScheduleStatus
    created_at: datetime
    published_at: datetime | None = None
    error_message: str | None = None


class CancelResponse(BaseModel):
    success: bool
    id: UUID


# --- Publisher ---
class PublishResultModel(BaseModel):
    id: UUID
    content_id: UUID
    status: Literal["success", "failed", "skipped"]
    error: str | None = None


class PublishReportResponse(BaseModel):
    processed: int
    results: list[PublishResultModel]
