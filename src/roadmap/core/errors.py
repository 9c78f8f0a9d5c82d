"""Error taxonomy for the roadmap core."""


class RoadmapError(Exception):
    """Base class for roadmap errors."""

    pass


class ContentLoadError(RoadmapError):
    """Manifest missing, unreadable or not matching the expected schema."""

    pass


class ContentNotFound(RoadmapError):
    """Unknown content id, or a content reference that cannot be read."""

    def __init__(self, content_id: str, reason: str | None = None):
        self.content_id = content_id
        self.reason = reason
        message = f"Content not found: {content_id}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ProgressStoreError(RoadmapError):
    """Persistence read or write failure."""

    pass
