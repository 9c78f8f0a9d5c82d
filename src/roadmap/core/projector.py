"""Progress projector: static roadmap tree merged with live progress.

project_phases() is the pure merge. ProgressProjector runs it on every
snapshot from the progress store and republishes the result as a
RoadmapState (Loading | Success | Error) to its observers.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable, Iterable, Union

import structlog

from roadmap.core.content_source import ContentSource
from roadmap.core.errors import ContentLoadError
from roadmap.core.models import Phase, ProgressRecord, Subtopic, utc_now
from roadmap.core.streams import Broadcaster, Subscription
from roadmap.db.progress_store import ProgressStore

logger = structlog.get_logger(__name__)


# =============================================================================
# STATE
# =============================================================================


@dataclass(frozen=True)
class Loading:
    """Tree not resolved yet."""

    kind: str = field(default="loading", init=False)


@dataclass(frozen=True)
class Success:
    """Merged tree ready for presentation."""

    phases: list[Phase]
    kind: str = field(default="success", init=False)


@dataclass(frozen=True)
class Error:
    """Content could not be loaded; terminal for the projector."""

    message: str
    kind: str = field(default="error", init=False)


RoadmapState = Union[Loading, Success, Error]


# =============================================================================
# PURE MERGE
# =============================================================================


def _overlay(subtopic: Subtopic, record: ProgressRecord | None) -> Subtopic:
    if record is None:
        return replace(subtopic, completed=False, last_accessed=None, notes=None)
    return replace(
        subtopic,
        completed=record.completed,
        last_accessed=record.last_accessed,
        notes=record.notes,
    )


def project_phases(
    phases: list[Phase],
    records: Iterable[ProgressRecord],
) -> list[Phase]:
    """Overlay progress records onto a copy of the tree.

    Structure and order are preserved. Records whose id is not in the tree
    are ignored; subtopics without a record get the defaults.
    """
    by_id = {record.subtopic_id: record for record in records}
    return [
        replace(
            phase,
            topics=[
                replace(
                    topic,
                    subtopics=[_overlay(s, by_id.get(s.id)) for s in topic.subtopics],
                )
                for topic in phase.topics
            ],
        )
        for phase in phases
    ]


# =============================================================================
# PROJECTOR
# =============================================================================


class ProgressProjector:
    """Keeps a merged roadmap view current and publishes it.

    Recomputation happens in a single consumer task, so snapshots are
    applied strictly in the order the store emits them.
    """

    def __init__(
        self,
        content_source: ContentSource,
        progress_store: ProgressStore,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._content = content_source
        self._store = progress_store
        self._clock = clock
        self._state: RoadmapState = Loading()
        self._states: Broadcaster[RoadmapState] = Broadcaster("roadmap.state")
        self._phases: list[Phase] | None = None
        self._progress_sub: Subscription[list[ProgressRecord]] | None = None
        self._task: asyncio.Task | None = None

    @property
    def state(self) -> RoadmapState:
        return self._state

    def subscribe(self) -> Subscription[RoadmapState]:
        """Observe projector states, starting with the current one."""
        return self._states.subscribe(self._state)

    def _publish(self, state: RoadmapState) -> None:
        self._state = state
        self._states.publish(state)

    async def start(self) -> None:
        """Load the tree and begin following the progress store.

        A content load failure leaves the projector in a terminal Error state.
        """
        if self._task is not None or isinstance(self._state, Error):
            return

        try:
            self._phases = self._content.load_tree()
        except ContentLoadError as e:
            logger.error("projector.content_load_failed", error=str(e))
            self._publish(Error(message=f"Failed to load roadmap: {e}"))
            return

        self._progress_sub = self._store.observe_all()
        try:
            initial = self._progress_sub.get_nowait()
        except asyncio.QueueEmpty:
            initial = []
        self.recompute(initial)

        self._task = asyncio.create_task(self._follow(self._progress_sub))
        logger.info("projector.started", phases=len(self._phases))

    async def _follow(self, subscription: Subscription[list[ProgressRecord]]) -> None:
        async for records in subscription:
            self.recompute(records)

    def recompute(self, records: list[ProgressRecord]) -> RoadmapState:
        """Project one progress snapshot and publish the result."""
        if self._phases is None:
            return self._state
        state = Success(phases=project_phases(self._phases, records))
        self._publish(state)
        logger.debug("projector.recomputed", records=len(records))
        return state

    async def toggle_completion(self, subtopic_id: str, completed: bool) -> ProgressRecord:
        """Set a subtopic's completed flag, keeping its notes.

        Notes are read from the store rather than from the projected state,
        so a write before the first projection does not drop them.

        Raises:
            ContentNotFound: If the subtopic is not in the tree
            ProgressStoreError: If the write fails
        """
        self._content.find_subtopic(subtopic_id)

        current = await self._store.get(subtopic_id)
        record = ProgressRecord(
            subtopic_id=subtopic_id,
            completed=completed,
            last_accessed=self._clock(),
            notes=current.notes if current is not None else None,
        )
        await self._store.upsert(record)

        logger.info("progress.toggled", subtopic_id=subtopic_id, completed=completed)
        return record

    async def mark_read(self, subtopic_id: str) -> bool:
        """Mark a subtopic complete once its content has been read.

        Returns:
            True if a write happened, False if it was already complete
        """
        self._content.find_subtopic(subtopic_id)

        current = await self._store.get(subtopic_id)
        if current is not None and current.completed:
            return False
        await self.toggle_completion(subtopic_id, True)
        return True

    async def stop(self) -> None:
        """Stop following the store and close all observers."""
        if self._progress_sub is not None:
            self._progress_sub.close()
            self._progress_sub = None
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self._states.close_all()
        logger.info("projector.stopped")
