"""Progress store: durable per-subtopic progress records.

One-shot reads (get, get_all) and reactive reads (observe, observe_all).
Reactive reads emit the current value immediately and re-emit after every
committed write, always as full values (never deltas).
"""

from __future__ import annotations

import asyncio
import sqlite3
from datetime import datetime
from pathlib import Path

import structlog

from roadmap.core.errors import ProgressStoreError
from roadmap.core.models import ProgressRecord
from roadmap.core.streams import Broadcaster, Subscription
from roadmap.db.database import get_db, init_db

logger = structlog.get_logger(__name__)


class ProgressStore:
    """SQLite-backed progress records with change notifications."""

    def __init__(self, db_path: Path | str):
        self.db_path = Path(db_path)
        try:
            init_db(self.db_path)
        except sqlite3.Error as e:
            raise ProgressStoreError(f"Cannot open progress database: {self.db_path}") from e

        self._write_lock = asyncio.Lock()
        self._all_stream: Broadcaster[list[ProgressRecord]] = Broadcaster("progress.all")
        self._record_streams: dict[str, Broadcaster[ProgressRecord | None]] = {}

    # -------------------------------------------------------------------------
    # One-shot reads
    # -------------------------------------------------------------------------

    def _read_one(self, subtopic_id: str) -> ProgressRecord | None:
        try:
            with get_db(self.db_path) as conn:
                row = conn.execute(
                    "SELECT * FROM topic_progress WHERE subtopic_id = ?", (subtopic_id,)
                ).fetchone()
        except sqlite3.Error as e:
            raise ProgressStoreError(f"Failed to read progress for {subtopic_id}") from e

        if row is None:
            return None
        return _row_to_record(row)

    def _read_all(self) -> list[ProgressRecord]:
        try:
            with get_db(self.db_path) as conn:
                rows = conn.execute(
                    "SELECT * FROM topic_progress ORDER BY subtopic_id"
                ).fetchall()
        except sqlite3.Error as e:
            raise ProgressStoreError("Failed to read progress records") from e

        return [_row_to_record(row) for row in rows]

    async def get(self, subtopic_id: str) -> ProgressRecord | None:
        """Get the record for one subtopic.

        Returns:
            ProgressRecord if one was ever written, None otherwise
        """
        return self._read_one(subtopic_id)

    async def get_all(self) -> list[ProgressRecord]:
        """Get every stored record, ordered by subtopic id."""
        return self._read_all()

    # -------------------------------------------------------------------------
    # Reactive reads
    # -------------------------------------------------------------------------

    def observe(self, subtopic_id: str) -> Subscription[ProgressRecord | None]:
        """Subscribe to one subtopic's record.

        Emits the current record (or None) immediately, then again on every
        write to that subtopic.
        """
        stream = self._record_streams.get(subtopic_id)
        if stream is None:
            stream = Broadcaster(f"progress.{subtopic_id}")
            self._record_streams[subtopic_id] = stream
        return stream.subscribe(self._read_one(subtopic_id))

    def observe_all(self) -> Subscription[list[ProgressRecord]]:
        """Subscribe to the full record set.

        Emits the current snapshot immediately, then the full snapshot again
        after every write.
        """
        return self._all_stream.subscribe(self._read_all())

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def upsert(self, record: ProgressRecord) -> None:
        """Insert or fully replace the record for record.subtopic_id.

        Observers are notified after the write is committed, so a read issued
        after upsert returns always sees it.

        Raises:
            ProgressStoreError: If the write fails
        """
        async with self._write_lock:
            try:
                with get_db(self.db_path) as conn:
                    conn.execute(
                        """
                        INSERT INTO topic_progress (
                            subtopic_id, is_completed, last_accessed_date, notes
                        ) VALUES (?, ?, ?, ?)
                        ON CONFLICT(subtopic_id) DO UPDATE SET
                            is_completed = excluded.is_completed,
                            last_accessed_date = excluded.last_accessed_date,
                            notes = excluded.notes
                        """,
                        (
                            record.subtopic_id,
                            int(record.completed),
                            record.last_accessed.isoformat() if record.last_accessed else None,
                            record.notes,
                        ),
                    )
            except sqlite3.Error as e:
                logger.error(
                    "progress.upsert_failed",
                    subtopic_id=record.subtopic_id,
                    error=str(e),
                )
                raise ProgressStoreError(f"Failed to save progress for {record.subtopic_id}") from e

            logger.debug(
                "progress.upserted",
                subtopic_id=record.subtopic_id,
                completed=record.completed,
            )
            self._notify(record.subtopic_id)

    def _notify(self, subtopic_id: str) -> None:
        # The write is already committed; a failed re-read must not fail upsert
        try:
            if self._all_stream.observer_count:
                self._all_stream.publish(self._read_all())

            stream = self._record_streams.get(subtopic_id)
            if stream is not None and stream.observer_count:
                stream.publish(self._read_one(subtopic_id))
        except ProgressStoreError as e:
            logger.error(
                "progress.notify_failed",
                subtopic_id=subtopic_id,
                error=str(e),
            )

    def close(self) -> None:
        """Close every open subscription."""
        self._all_stream.close_all()
        for stream in self._record_streams.values():
            stream.close_all()
        self._record_streams.clear()


def _row_to_record(row: sqlite3.Row) -> ProgressRecord:
    """Convert database row to ProgressRecord."""
    last_accessed = row["last_accessed_date"]
    return ProgressRecord(
        subtopic_id=row["subtopic_id"],
        completed=bool(row["is_completed"]),
        last_accessed=datetime.fromisoformat(last_accessed) if last_accessed else None,
        notes=row["notes"],
    )
