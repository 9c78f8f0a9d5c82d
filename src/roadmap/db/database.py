"""SQLite connection and schema management.

Provides connection management and schema initialization for progress
storage. The schema is versioned through PRAGMA user_version; a database
written by a different schema version has its progress table dropped and
recreated (progress is cheap to lose, content is not stored here).
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import structlog

logger = structlog.get_logger(__name__)

# Default database location
DEFAULT_DB_PATH = Path("db/roadmap.db")

SCHEMA_VERSION = 2

PROGRESS_COLUMNS = {"subtopic_id", "is_completed", "last_accessed_date", "notes"}


def init_db(db_path: Path | None = None) -> Path:
    """Initialize database with schema.

    Creates the database file and the progress table if they don't exist,
    recreating the table on a schema version mismatch or when an unversioned
    table lacks the expected columns.

    Args:
        db_path: Path to database file. Defaults to db/roadmap.db

    Returns:
        The database path actually used
    """
    db_path = db_path or DEFAULT_DB_PATH

    with get_db(db_path) as conn:
        current = int(conn.execute("PRAGMA user_version").fetchone()[0])
        if current not in (0, SCHEMA_VERSION) or not _has_progress_columns(conn):
            logger.warning(
                "database.destructive_migration",
                path=str(db_path),
                found_version=current,
                schema_version=SCHEMA_VERSION,
            )
            conn.execute("DROP TABLE IF EXISTS topic_progress")
        _create_schema(conn)
        conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")

    logger.info("database.initialized", path=str(db_path))
    return db_path


@contextmanager
def get_db(db_path: Path | None = None) -> Generator[sqlite3.Connection, None, None]:
    """Get database connection as context manager.

    Commits on success, rolls back on error.

    Yields:
        SQLite connection with row factory set to sqlite3.Row

    Example:
        with get_db(path) as conn:
            rows = conn.execute("SELECT * FROM topic_progress").fetchall()
    """
    db_path = db_path or DEFAULT_DB_PATH

    # Ensure directory exists
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row

    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _has_progress_columns(conn: sqlite3.Connection) -> bool:
    """Check that an existing progress table has the expected columns.

    A missing table counts as compatible; it is created afterwards.
    """
    columns = {row["name"] for row in conn.execute("PRAGMA table_info(topic_progress)")}
    return not columns or PROGRESS_COLUMNS <= columns


def _create_schema(conn: sqlite3.Connection) -> None:
    """Create database schema.

    Uses IF NOT EXISTS for idempotency.
    """
    conn.executescript(
        """
        -- One row per subtopic; written by full replacement
        CREATE TABLE IF NOT EXISTS topic_progress (
            subtopic_id TEXT PRIMARY KEY,
            is_completed INTEGER NOT NULL DEFAULT 0,
            last_accessed_date TEXT,
            notes TEXT
        );
        """
    )
