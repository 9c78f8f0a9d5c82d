"""Database module for SQLite persistence.

Provides:
- Database connection management and schema versioning
- ProgressStore: per-subtopic progress records with change notifications
"""

from roadmap.db.database import get_db, init_db
from roadmap.db.progress_store import ProgressStore

__all__ = ["get_db", "init_db", "ProgressStore"]
