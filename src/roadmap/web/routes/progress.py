"""Progress endpoints."""

import structlog
from fastapi import APIRouter, HTTPException, status

from roadmap.core.errors import ContentLoadError, ContentNotFound, ProgressStoreError
from roadmap.core.models import ProgressRecord
from roadmap.web.deps import get_roadmap_service
from roadmap.web.schemas import (
    ProgressListResponse,
    ProgressResponse,
    ProgressUpsertRequest,
    ToggleRequest,
    record_to_response,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/progress", tags=["progress"])


def _not_found(e: ContentNotFound) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


def _store_failed(e: ProgressStoreError) -> HTTPException:
    logger.error("progress_store_failed", error=str(e))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.get("", response_model=ProgressListResponse)
async def list_progress() -> ProgressListResponse:
    """List all stored progress records."""
    try:
        records = await get_roadmap_service().store.get_all()
    except ProgressStoreError as e:
        raise _store_failed(e)

    return ProgressListResponse(
        records=[record_to_response(r) for r in records],
        count=len(records),
    )


@router.get("/{subtopic_id}", response_model=ProgressResponse)
async def get_progress(subtopic_id: str) -> ProgressResponse:
    """Get progress for one subtopic (defaults when nothing was stored)."""
    service = get_roadmap_service()
    try:
        service.content.find_subtopic(subtopic_id)
        record = await service.store.get(subtopic_id)
    except ContentNotFound as e:
        raise _not_found(e)
    except ContentLoadError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except ProgressStoreError as e:
        raise _store_failed(e)

    if record is None:
        record = ProgressRecord(subtopic_id=subtopic_id)
    return record_to_response(record)


@router.put("/{subtopic_id}", response_model=ProgressResponse)
async def put_progress(subtopic_id: str, request: ProgressUpsertRequest) -> ProgressResponse:
    """Replace the progress record of one subtopic."""
    service = get_roadmap_service()
    record = ProgressRecord(
        subtopic_id=subtopic_id,
        completed=request.completed,
        last_accessed=request.last_accessed,
        notes=request.notes,
    )
    try:
        service.content.find_subtopic(subtopic_id)
        await service.store.upsert(record)
    except ContentNotFound as e:
        raise _not_found(e)
    except ContentLoadError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except ProgressStoreError as e:
        raise _store_failed(e)

    return record_to_response(record)


@router.post("/{subtopic_id}/toggle", response_model=ProgressResponse)
async def toggle_progress(subtopic_id: str, request: ToggleRequest) -> ProgressResponse:
    """Set the completed flag of one subtopic, keeping its notes."""
    try:
        record = await get_roadmap_service().projector.toggle_completion(
            subtopic_id, request.completed
        )
    except ContentNotFound as e:
        raise _not_found(e)
    except ContentLoadError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except ProgressStoreError as e:
        raise _store_failed(e)

    return record_to_response(record)
