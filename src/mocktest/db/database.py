"""SQLite database connection and schema management.

Provides connection management and schema initialization for the
question bank, the learner ledger and the submission log.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import structlog

logger = structlog.get_logger(__name__)

# Default database location
DEFAULT_DB_PATH = Path("db/mocktest.db")

# Current database (module-level for simplicity in CLI context)
_db_path: Path | None = None


def init_db(db_path: Path | None = None) -> Path:
    """Initialize database with schema.

    Creates the database file and all required tables if they don't exist.

    Args:
        db_path: Path to database file. Defaults to db/mocktest.db

    Returns:
        The path now in use
    """
    global _db_path
    _db_path = Path(db_path) if db_path else DEFAULT_DB_PATH

    # Ensure directory exists
    _db_path.parent.mkdir(parents=True, exist_ok=True)

    with get_db() as conn:
        _create_schema(conn)

    logger.info("database.initialized", path=str(_db_path))
    return _db_path


def get_db_path() -> Path:
    """Path of the database currently in use."""
    return _db_path or DEFAULT_DB_PATH


@contextmanager
def get_db() -> Generator[sqlite3.Connection, None, None]:
    """Get database connection as context manager.

    The block runs in one transaction: committed on success, rolled
    back on any exception.

    Yields:
        SQLite connection with row factory set to sqlite3.Row

    Example:
        with get_db() as conn:
            rows = conn.execute("SELECT * FROM subjects").fetchall()
    """
    db_path = get_db_path()

    # Ensure directory exists
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path, timeout=30)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")

    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _create_schema(conn: sqlite3.Connection) -> None:
    """Create database schema.

    Uses IF NOT EXISTS for idempotency.
    """
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS subjects (
            subject_id TEXT PRIMARY KEY,
            name TEXT NOT NULL UNIQUE,
            slug TEXT NOT NULL UNIQUE,
            description TEXT NOT NULL DEFAULT '',
            created_at TEXT NOT NULL DEFAULT (datetime('now'))
        );

        CREATE TABLE IF NOT EXISTS subject_streams (
            subject_id TEXT NOT NULL REFERENCES subjects(subject_id) ON DELETE CASCADE,
            stream TEXT NOT NULL,
            PRIMARY KEY (subject_id, stream)
        );

        CREATE TABLE IF NOT EXISTS chapters (
            chapter_id TEXT PRIMARY KEY,
            subject_id TEXT NOT NULL REFERENCES subjects(subject_id) ON DELETE CASCADE,
            name TEXT NOT NULL,
            slug TEXT NOT NULL,
            sort_order INTEGER NOT NULL DEFAULT 0,
            UNIQUE (subject_id, slug)
        );

        -- average_time is a running mean, never a sum
        CREATE TABLE IF NOT EXISTS questions (
            question_id TEXT PRIMARY KEY,
            subject_id TEXT NOT NULL REFERENCES subjects(subject_id) ON DELETE CASCADE,
            chapter_id TEXT REFERENCES chapters(chapter_id) ON DELETE CASCADE,
            text TEXT NOT NULL,
            options TEXT NOT NULL,
            correct_option INTEGER NOT NULL CHECK(correct_option BETWEEN 0 AND 3),
            explanation TEXT,
            difficulty TEXT NOT NULL DEFAULT 'medium' CHECK(difficulty IN ('easy', 'medium', 'hard')),
            average_time REAL NOT NULL DEFAULT 0,
            attempt_count INTEGER NOT NULL DEFAULT 0 CHECK(attempt_count >= 0),
            created_at TEXT NOT NULL DEFAULT (datetime('now'))
        );

        CREATE TABLE IF NOT EXISTS learners (
            learner_id TEXT PRIMARY KEY,
            is_premium INTEGER NOT NULL DEFAULT 0,
            free_tests_taken INTEGER NOT NULL DEFAULT 0 CHECK(free_tests_taken >= 0),
            created_at TEXT NOT NULL DEFAULT (datetime('now'))
        );

        -- question_id is not a foreign key: deleted questions may stay referenced
        CREATE TABLE IF NOT EXISTS learner_attempts (
            learner_id TEXT NOT NULL REFERENCES learners(learner_id) ON DELETE CASCADE,
            question_id TEXT NOT NULL,
            PRIMARY KEY (learner_id, question_id)
        );

        CREATE TABLE IF NOT EXISTS submissions (
            submission_id TEXT PRIMARY KEY,
            learner_id TEXT NOT NULL REFERENCES learners(learner_id) ON DELETE CASCADE,
            subject_id TEXT,
            score INTEGER NOT NULL,
            total_questions INTEGER NOT NULL,
            percentage REAL NOT NULL,
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS submission_questions (
            submission_id TEXT NOT NULL REFERENCES submissions(submission_id) ON DELETE CASCADE,
            position INTEGER NOT NULL,
            question_id TEXT NOT NULL,
            time_taken REAL NOT NULL DEFAULT 0,
            user_choice INTEGER,
            is_correct INTEGER NOT NULL DEFAULT 0,
            PRIMARY KEY (submission_id, position)
        );

        -- Indexes
        CREATE INDEX IF NOT EXISTS idx_questions_subject ON questions(subject_id, difficulty);
        CREATE INDEX IF NOT EXISTS idx_questions_chapter ON questions(chapter_id);
        CREATE INDEX IF NOT EXISTS idx_submissions_learner ON submissions(learner_id);
        CREATE INDEX IF NOT EXISTS idx_submissions_subject ON submissions(subject_id);
        """
    )
