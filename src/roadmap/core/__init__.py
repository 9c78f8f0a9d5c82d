"""Core roadmap logic.

Modules:
- models: Phase / Topic / Subtopic tree and ProgressRecord
- content_reader: path -> text readers for bundled content
- content_source: manifest loading, caching and content lookup
- projector: merge of tree and progress, published as RoadmapState
- streams: asyncio broadcast primitives used by store and projector
- summary: completion counts
- service: wiring for CLI and web
"""

from roadmap.core.errors import (
    ContentLoadError,
    ContentNotFound,
    ProgressStoreError,
    RoadmapError,
)

__all__ = [
    "ContentLoadError",
    "ContentNotFound",
    "ProgressStoreError",
    "RoadmapError",
]
