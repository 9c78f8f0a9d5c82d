"""FastAPI application factory.

Main entry point for the Roadmap Web API.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from roadmap import __version__
from roadmap.web.deps import get_roadmap_service
from roadmap.web.routes import (
    content_router,
    health_router,
    progress_router,
    roadmap_router,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    # Startup
    service = get_roadmap_service()
    await service.start()
    logger.info(
        "api_startup",
        state=service.projector.state.kind,
        db_path=str(service.store.db_path),
    )
    yield
    # Shutdown
    await service.stop()
    logger.info("api_shutdown")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="Roadmap API",
        description="Learning roadmap with persisted progress",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware for web clients
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(health_router)
    app.include_router(roadmap_router)
    app.include_router(progress_router)
    app.include_router(content_router)

    return app


# Default app instance for uvicorn
app = create_app()
