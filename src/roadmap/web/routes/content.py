"""Content endpoints: subtopic bodies and embedded examples."""

import structlog
from fastapi import APIRouter, HTTPException, Query, status

from roadmap.core.errors import ContentLoadError, ContentNotFound, ProgressStoreError
from roadmap.web.deps import get_roadmap_service
from roadmap.web.schemas import (
    ContentResponse,
    ExampleListResponse,
    example_to_response,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api", tags=["content"])


@router.get("/subtopics/{subtopic_id}/content", response_model=ContentResponse)
async def get_content(
    subtopic_id: str,
    mark_read: bool = Query(False, description="Mark the subtopic complete"),
) -> ContentResponse:
    """Get the markdown body of a subtopic."""
    service = get_roadmap_service()
    try:
        subtopic = service.content.find_subtopic(subtopic_id)
        markdown = service.content.read_content(subtopic_id)
        if mark_read:
            await service.projector.mark_read(subtopic_id)
    except ContentNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ContentLoadError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except ProgressStoreError as e:
        logger.error("mark_read_failed", subtopic_id=subtopic_id, error=str(e))
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    return ContentResponse(subtopic_id=subtopic.id, title=subtopic.title, markdown=markdown)


@router.get("/examples", response_model=ExampleListResponse)
async def list_examples() -> ExampleListResponse:
    """List every example embedded in the roadmap."""
    try:
        examples = get_roadmap_service().content.list_examples()
    except ContentLoadError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))

    return ExampleListResponse(
        examples=[example_to_response(e) for e in examples],
        count=len(examples),
    )
