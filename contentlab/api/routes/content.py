from uuid import UUID

from fastapi import APIRouter, Depends

from contentlab.api.deps import get_lifecycle_service
from contentlab.api.schemas import ContentCreateRequest, ContentResponse, StatusCountsResponse
from contentlab.domain.entities import Content, ContentStatus
from contentlab.services.lifecycle import LifecycleService

router = APIRouter()


def to_response(item: Content) -> ContentResponse:
    return ContentResponse.model_validate(item.model_dump())


@router.post("", response_model=ContentResponse, status_code=201)
def create_content(
    request: ContentCreateRequest,
    service: LifecycleService = Depends(get_lifecycle_service),
) -> ContentResponse:
    """Create a content item in draft."""
    item = service.create_draft(
        title=request.title,
        type=request.type,
        description=request.description,
        media=request.media,
        tags=request.tags,
        owner_id=request.owner_id,
    )
    return to_response(item)


@router.get("", response_model=list[ContentResponse])
def list_content(
    status: ContentStatus | None = None,
    owner_id: UUID | None = None,
    service: LifecycleService = Depends(get_lifecycle_service),
) -> list[ContentResponse]:
    return [to_response(i) for i in service.list_content(status=status, owner_id=owner_id)]


@router.get("/stats", response_model=StatusCountsResponse)
def content_stats(
    owner_id: UUID | None = None,
    service: LifecycleService = Depends(get_lifecycle_service),
) -> StatusCountsResponse:
    """Per-status counts for dashboards."""
    counts = service.status_counts(owner_id=owner_id)
    return StatusCountsResponse(total=sum(counts.values()), counts=counts)


@router.get("/{content_id}", response_model=ContentResponse)
def get_content(
    content_id: UUID,
    service: LifecycleService = Depends(get_lifecycle_service),
) -> ContentResponse:
    return to_response(service.get(content_id))


# --- Status moves ---


@router.post("/{content_id}/submit", response_model=ContentResponse)
def submit_for_review(
    content_id: UUID,
    service: LifecycleService = Depends(get_lifecycle_service),
) -> ContentResponse:
    return to_response(service.submit_for_review(content_id))


@router.post("/{content_id}/approve", response_model=ContentResponse)
def approve(
    content_id: UUID,
    service: LifecycleService = Depends(get_lifecycle_service),
) -> ContentResponse:
    return to_response(service.approve(content_id))


@router.post("/{content_id}/reject", response_model=ContentResponse)
def reject(
    content_id: UUID,
    service: LifecycleService = Depends(get_lifecycle_service),
) -> ContentResponse:
    return to_response(service.reject(content_id))


@router.post("/{content_id}/return-to-draft", response_model=ContentResponse)
def return_to_draft(
    content_id: UUID,
    service: LifecycleService = Depends(get_lifecycle_service),
) -> ContentResponse:
    return to_response(service.return_to_draft(content_id))


@router.post("/{content_id}/publish", response_model=ContentResponse)
def publish_now(
    content_id: UUID,
    service: LifecycleService = Depends(get_lifecycle_service),
) -> ContentResponse:
    """Publish approved content immediately."""
    return to_response(service.publish_now(content_id))
