"""Domain models for the roadmap content tree and learner progress.

The tree (Phase -> Topic -> Subtopic) is immutable once loaded. The progress
fields on Subtopic are overlaid at projection time and excluded from equality,
so two subtopics with the same static content compare equal regardless of
progress.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Example:
    """Embedded example attached to a subtopic."""

    id: str
    title: str
    description: str
    content_key: str


@dataclass(frozen=True)
class Subtopic:
    """Leaf content unit of the roadmap."""

    id: str
    title: str
    path: str
    examples: list[Example] = field(default_factory=list)
    # Overlaid from ProgressRecord by the projector
    completed: bool = field(default=False, compare=False)
    last_accessed: datetime | None = field(default=None, compare=False)
    notes: str | None = field(default=None, compare=False)


@dataclass(frozen=True)
class Topic:
    """Mid-level grouping within a phase."""

    id: str
    title: str
    subtopics: list[Subtopic] = field(default_factory=list)


@dataclass(frozen=True)
class Phase:
    """Ordered top-level grouping."""

    id: str
    title: str
    order: int
    topics: list[Topic] = field(default_factory=list)


@dataclass(frozen=True)
class ProgressRecord:
    """Persisted completion state for one subtopic.

    Writes replace the whole record, so callers must carry forward any
    field they want to keep (notes in particular).
    """

    subtopic_id: str
    completed: bool = False
    last_accessed: datetime | None = None
    notes: str | None = None


def iter_subtopics(phases: list[Phase]):
    """Yield every subtopic of the tree in order."""
    for phase in phases:
        for topic in phase.topics:
            yield from topic.subtopics
