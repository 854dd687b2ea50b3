"""Database module for SQLite persistence.

Provides:
- Database connection management and schema initialization
- Repository functions for subjects/chapters, questions, learners
  and submissions
- SqliteStore, the async adapter used by the engine
"""

from mocktest.db.database import get_db, init_db

__all__ = ["get_db", "init_db"]
