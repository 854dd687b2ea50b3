"""FastAPI application factory.

Main entry point for the Mock Test Web API.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mocktest import __version__
from mocktest.web.routes import (
    catalog_router,
    exams_router,
    health_router,
    results_router,
)
from mocktest.web.service import get_exam_service

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    service = get_exam_service()
    subjects = await service.catalog.list_subjects()
    logger.info(
        "api_startup",
        subjects_found=len(subjects),
        streams=list(service.config.streams),
        free_test_limit=service.config.free_test_limit,
    )
    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="Mock Test API",
        description="Exam assembly and result recording for mock tests",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router)
    app.include_router(catalog_router)
    app.include_router(exams_router)
    app.include_router(results_router)

    return app


# Default app instance for uvicorn
app = create_app()
