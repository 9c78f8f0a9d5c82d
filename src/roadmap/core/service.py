"""Process-scoped wiring of content source, progress store and projector."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Callable

import structlog

from roadmap.config.app_config import AppConfig
from roadmap.core.content_reader import ContentReader, FileContentReader
from roadmap.core.content_source import ContentSource
from roadmap.core.models import utc_now
from roadmap.core.projector import ProgressProjector
from roadmap.db.progress_store import ProgressStore

logger = structlog.get_logger(__name__)


class RoadmapService:
    """Owns one ContentSource, ProgressStore and ProgressProjector."""

    def __init__(
        self,
        reader: ContentReader,
        db_path: Path | str,
        manifest_path: str = "topics_list.json",
        clock: Callable[[], datetime] = utc_now,
    ):
        self.content = ContentSource(reader, manifest_path=manifest_path)
        self.store = ProgressStore(db_path)
        self.projector = ProgressProjector(self.content, self.store, clock=clock)

    @classmethod
    def from_config(cls, config: AppConfig) -> RoadmapService:
        """Build a service from the paths section of the app config."""
        logger.debug(
            "service.configured",
            content_dir=config.paths.content_dir,
            db_path=config.paths.db_path,
        )
        return cls(
            reader=FileContentReader(config.paths.content_dir),
            db_path=Path(config.paths.db_path),
            manifest_path=config.paths.manifest,
        )

    async def start(self) -> None:
        await self.projector.start()

    async def stop(self) -> None:
        await self.projector.stop()
        self.store.close()

    async def __aenter__(self) -> RoadmapService:
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()
