"""Roadmap tracker: learning roadmap content with persisted progress."""

__version__ = "0.1.0"
