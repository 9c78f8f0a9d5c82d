"""Process-wide RoadmapService for the Web API."""

from __future__ import annotations

from roadmap.config.app_config import load_app_config
from roadmap.core.service import RoadmapService

# Global service instance
_roadmap_service: RoadmapService | None = None


def get_roadmap_service() -> RoadmapService:
    """Get the global roadmap service, building it from config on first use."""
    global _roadmap_service
    if _roadmap_service is None:
        _roadmap_service = RoadmapService.from_config(load_app_config())
    return _roadmap_service


def set_roadmap_service(service: RoadmapService | None) -> None:
    """Install a specific service instance (for testing)."""
    global _roadmap_service
    _roadmap_service = service


def reset_roadmap_service() -> None:
    """Reset the roadmap service (for testing)."""
    global _roadmap_service
    _roadmap_service = None
