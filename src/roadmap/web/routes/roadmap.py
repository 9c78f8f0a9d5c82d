"""Roadmap endpoints: projected tree, summary and live updates."""

import asyncio
from typing import AsyncGenerator

import structlog
from fastapi import APIRouter, HTTPException, status
from fastapi.responses import StreamingResponse

from roadmap.config.app_config import load_app_config
from roadmap.core.projector import Error, Loading, RoadmapState, Success
from roadmap.core.summary import summarize
from roadmap.web.deps import get_roadmap_service
from roadmap.web.schemas import (
    RoadmapResponse,
    SummaryResponse,
    phases_to_response,
    summary_to_response,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/roadmap", tags=["roadmap"])


def state_to_response(state: RoadmapState) -> RoadmapResponse:
    """Convert a projector state into its API representation."""
    if isinstance(state, Success):
        return RoadmapResponse(status="success", phases=phases_to_response(state.phases))
    if isinstance(state, Error):
        return RoadmapResponse(status="error", error=state.message)
    return RoadmapResponse(status="loading")


def _raise_if_error(state: RoadmapState) -> None:
    if isinstance(state, Error):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=state.message,
        )


@router.get("", response_model=RoadmapResponse)
async def get_roadmap() -> RoadmapResponse:
    """Get the roadmap with progress overlaid."""
    state = get_roadmap_service().projector.state
    _raise_if_error(state)
    return state_to_response(state)


@router.get("/summary", response_model=SummaryResponse)
async def get_summary() -> SummaryResponse:
    """Get completion counts per phase."""
    state = get_roadmap_service().projector.state
    _raise_if_error(state)
    if isinstance(state, Loading):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Roadmap is still loading",
        )
    return summary_to_response(summarize(state.phases))


async def _event_generator(keepalive_seconds: float) -> AsyncGenerator[str, None]:
    """Generate SSE events for every projector state."""
    subscription = get_roadmap_service().projector.subscribe()

    try:
        while True:
            try:
                state = await asyncio.wait_for(subscription.get(), timeout=keepalive_seconds)
            except asyncio.TimeoutError:
                yield "event: keepalive\ndata: ping\n\n"
                continue
            except StopAsyncIteration:
                yield "event: close\ndata: Roadmap stream ended\n\n"
                return

            payload = state_to_response(state).model_dump_json()
            yield f"event: roadmap\ndata: {payload}\n\n"

            # Error is terminal; no further states will follow
            if isinstance(state, Error):
                yield "event: close\ndata: Roadmap failed to load\n\n"
                return
    finally:
        subscription.close()


@router.get("/events")
async def stream_roadmap() -> StreamingResponse:
    """Stream roadmap states using Server-Sent Events.

    Events:
    - roadmap: RoadmapResponse JSON, sent on connect and after every change
    - keepalive: sent when nothing changed for a while
    - close: the service is shutting down, or the roadmap failed to load
    """
    keepalive = load_app_config().web.keepalive_seconds
    logger.info("roadmap_stream_opened")

    return StreamingResponse(
        _event_generator(keepalive),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        },
    )
