"""Pydantic schemas for the Web API.

Serialization models for the roadmap tree, progress records, content and
summaries.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field

from roadmap.core.models import Example, Phase, ProgressRecord, Subtopic
from roadmap.core.summary import RoadmapSummary


# =============================================================================
# ROADMAP SCHEMAS
# =============================================================================


class ExampleResponse(BaseModel):
    """An embedded example."""

    id: str
    title: str
    description: str
    content_key: str


class SubtopicResponse(BaseModel):
    """A subtopic with its overlaid progress."""

    id: str
    title: str
    path: str
    examples: list[ExampleResponse] = Field(default_factory=list)
    completed: bool = False
    last_accessed: datetime | None = None
    notes: str | None = None


class TopicResponse(BaseModel):
    """A topic and its subtopics."""

    id: str
    title: str
    subtopics: list[SubtopicResponse]


class PhaseResponse(BaseModel):
    """A phase and its topics."""

    id: str
    title: str
    order: int
    topics: list[TopicResponse]


class RoadmapResponse(BaseModel):
    """Projected roadmap state.

    status is "loading", "success" or "error"; phases is only filled on
    success and error only on error.
    """

    status: str
    phases: list[PhaseResponse] = Field(default_factory=list)
    error: str | None = None


class PhaseSummaryResponse(BaseModel):
    """Completion counts for one phase."""

    phase_id: str
    title: str
    total: int
    completed: int
    ratio: float


class SummaryResponse(BaseModel):
    """Completion counts for the roadmap."""

    total: int
    completed: int
    ratio: float
    phases: list[PhaseSummaryResponse]


# =============================================================================
# PROGRESS SCHEMAS
# =============================================================================


class ProgressResponse(BaseModel):
    """A stored progress record."""

    subtopic_id: str
    completed: bool
    last_accessed: datetime | None = None
    notes: str | None = None


class ProgressListResponse(BaseModel):
    """All stored progress records."""

    records: list[ProgressResponse]
    count: int


class ProgressUpsertRequest(BaseModel):
    """Full replacement of one progress record."""

    completed: bool
    last_accessed: datetime | None = None
    notes: str | None = Field(default=None, max_length=5000)


class ToggleRequest(BaseModel):
    """Set the completed flag, keeping notes."""

    completed: bool


# =============================================================================
# CONTENT SCHEMAS
# =============================================================================


class ContentResponse(BaseModel):
    """Raw markdown body of a subtopic."""

    subtopic_id: str
    title: str
    markdown: str


class ExampleListResponse(BaseModel):
    """All embedded examples."""

    examples: list[ExampleResponse]
    count: int


# =============================================================================
# HEALTH SCHEMAS
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "0.1.0"
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


# =============================================================================
# CONVERTERS
# =============================================================================


def example_to_response(example: Example) -> ExampleResponse:
    return ExampleResponse(
        id=example.id,
        title=example.title,
        description=example.description,
        content_key=example.content_key,
    )


def subtopic_to_response(subtopic: Subtopic) -> SubtopicResponse:
    return SubtopicResponse(
        id=subtopic.id,
        title=subtopic.title,
        path=subtopic.path,
        examples=[example_to_response(e) for e in subtopic.examples],
        completed=subtopic.completed,
        last_accessed=subtopic.last_accessed,
        notes=subtopic.notes,
    )


def phases_to_response(phases: list[Phase]) -> list[PhaseResponse]:
    return [
        PhaseResponse(
            id=phase.id,
            title=phase.title,
            order=phase.order,
            topics=[
                TopicResponse(
                    id=topic.id,
                    title=topic.title,
                    subtopics=[subtopic_to_response(s) for s in topic.subtopics],
                )
                for topic in phase.topics
            ],
        )
        for phase in phases
    ]


def record_to_response(record: ProgressRecord) -> ProgressResponse:
    return ProgressResponse(
        subtopic_id=record.subtopic_id,
        completed=record.completed,
        last_accessed=record.last_accessed,
        notes=record.notes,
    )


def summary_to_response(summary: RoadmapSummary) -> SummaryResponse:
    return SummaryResponse(
        total=summary.total,
        completed=summary.completed,
        ratio=summary.ratio,
        phases=[
            PhaseSummaryResponse(
                phase_id=p.phase_id,
                title=p.title,
                total=p.total,
                completed=p.completed,
                ratio=p.ratio,
            )
            for p in summary.phases
        ],
    )
