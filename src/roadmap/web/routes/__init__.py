"""Route handlers for the Web API."""

from roadmap.web.routes.health import router as health_router
from roadmap.web.routes.roadmap import router as roadmap_router
from roadmap.web.routes.progress import router as progress_router
from roadmap.web.routes.content import router as content_router

__all__ = [
    "health_router",
    "roadmap_router",
    "progress_router",
    "content_router",
]
