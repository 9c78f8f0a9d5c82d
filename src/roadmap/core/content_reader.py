"""Content readers: resolve a storage-relative path to raw text."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

import structlog

logger = structlog.get_logger(__name__)


class ContentReader(Protocol):
    """Anything that can read a bundled asset by relative path."""

    def read_by_path(self, path: str) -> str:
        """Return the text at path, raising OSError if it cannot be read."""
        ...


class FileContentReader:
    """Read UTF-8 assets from a directory on disk."""

    def __init__(self, root_dir: Path | str):
        self.root_dir = Path(root_dir)

    def read_by_path(self, path: str) -> str:
        """Read a file relative to root_dir.

        Args:
            path: Relative path, e.g. "a_phase/kotlin_syntax.md"

        Returns:
            File content decoded as UTF-8

        Raises:
            FileNotFoundError: If the file doesn't exist or escapes root_dir
        """
        root = self.root_dir.resolve()
        target = (root / path).resolve()
        if root != target and root not in target.parents:
            raise FileNotFoundError(f"Path escapes content root: {path}")

        logger.debug("content.read", path=path)
        return target.read_text(encoding="utf-8")
