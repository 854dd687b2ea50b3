"""Process-wide ExamService used by the route handlers."""

from __future__ import annotations

import structlog

from mocktest.config.app_config import load_app_config
from mocktest.core.exam_service import ExamService
from mocktest.db.store import SqliteStore

logger = structlog.get_logger(__name__)

_exam_service: ExamService | None = None


def get_exam_service() -> ExamService:
    """Get the global exam service, building it from config on first use."""
    global _exam_service
    if _exam_service is None:
        config = load_app_config()
        store = SqliteStore(config.db_path)
        _exam_service = ExamService.from_store(store, config.engine)
        logger.info("exam_service_created", db_path=str(store.db_path))
    return _exam_service


def set_exam_service(service: ExamService | None) -> None:
    """Replace the global exam service (for testing)."""
    global _exam_service
    _exam_service = service


def reset_exam_service() -> None:
    """Reset the exam service (for testing)."""
    set_exam_service(None)
