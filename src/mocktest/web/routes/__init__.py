"""Route handlers for the Web API."""

from mocktest.web.routes.catalog import router as catalog_router
from mocktest.web.routes.exams import router as exams_router
from mocktest.web.routes.health import router as health_router
from mocktest.web.routes.results import router as results_router

__all__ = [
    "catalog_router",
    "exams_router",
    "health_router",
    "results_router",
]
