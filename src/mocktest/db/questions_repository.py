"""Repository functions for the questions table.

Provides inserts, lookups, predicate-filtered random sampling and the
per-question response-time statistics.

Id sets (exclusions, restrictions) are passed to SQLite as one JSON array
and expanded with json_each, so arbitrarily large seen-sets do not hit
the bound-parameter limit.
"""

from __future__ import annotations

import json
from typing import Any, Iterable

import structlog

from mocktest.core.models import Question
from mocktest.db.database import get_db

logger = structlog.get_logger(__name__)


def insert_question(question: Question) -> None:
    """Insert a new question.

    Raises:
        sqlite3.IntegrityError: If the id exists or the subject/chapter
            does not
    """
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO questions (
                question_id, subject_id, chapter_id, text, options,
                correct_option, explanation, difficulty,
                average_time, attempt_count
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                question.id,
                question.subject_id,
                question.chapter_id,
                question.text,
                json.dumps(question.options, ensure_ascii=False),
                question.correct_option,
                question.explanation,
                question.difficulty,
                question.average_time,
                question.attempt_count,
            ),
        )

    logger.debug("questions.inserted", question_id=question.id)


def get_question(question_id: str) -> Question | None:
    """Get question by id.

    Returns:
        Question if found, None otherwise
    """
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM questions WHERE question_id = ?", (question_id,)
        ).fetchone()

    if row is None:
        return None
    return _row_to_question(row)


def find_question_id(subject_id: str, chapter_id: str | None, text: str) -> str | None:
    """Id of the question with this exact text in this subject/chapter, if any."""
    with get_db() as conn:
        row = conn.execute(
            """
            SELECT question_id FROM questions
            WHERE subject_id = ? AND chapter_id IS ? AND text = ?
            LIMIT 1
            """,
            (subject_id, chapter_id, text),
        ).fetchone()
    return row["question_id"] if row else None


def delete_question(question_id: str) -> bool:
    """Delete question by id.

    Learner seen-sets keep referencing the id; such entries are inert.

    Returns:
        True if deleted, False if not found
    """
    with get_db() as conn:
        cursor = conn.execute("DELETE FROM questions WHERE question_id = ?", (question_id,))

    deleted = cursor.rowcount > 0
    if deleted:
        logger.debug("questions.deleted", question_id=question_id)
    return deleted


def _pool_filter(
    subject_id: str,
    exclude_ids: Iterable[str] | None,
    within_ids: Iterable[str] | None,
    difficulty: str | None,
    chapter_id: str | None,
) -> tuple[str, list[Any]]:
    """Build the WHERE clause selecting a subject pool."""
    clauses = ["subject_id = ?"]
    params: list[Any] = [subject_id]

    if difficulty is not None:
        clauses.append("difficulty = ?")
        params.append(difficulty)

    if chapter_id is not None:
        clauses.append("chapter_id = ?")
        params.append(chapter_id)

    if exclude_ids is not None:
        excluded = list(exclude_ids)
        if excluded:
            clauses.append("question_id NOT IN (SELECT value FROM json_each(?))")
            params.append(json.dumps(excluded))

    if within_ids is not None:
        clauses.append("question_id IN (SELECT value FROM json_each(?))")
        params.append(json.dumps(list(within_ids)))

    return " AND ".join(clauses), params


def sample_questions(
    subject_id: str,
    size: int,
    exclude_ids: Iterable[str] | None = None,
    within_ids: Iterable[str] | None = None,
    difficulty: str | None = None,
    chapter_id: str | None = None,
) -> list[Question]:
    """Draw up to `size` matching questions uniformly without replacement.

    Args:
        subject_id: Subject whose pool is sampled
        size: Maximum number of questions
        exclude_ids: Ids removed from the pool
        within_ids: If given, the pool is restricted to these ids
        difficulty: Restrict to one difficulty
        chapter_id: Restrict to one chapter

    Returns:
        List of questions in random order
    """
    if size <= 0:
        return []

    where, params = _pool_filter(subject_id, exclude_ids, within_ids, difficulty, chapter_id)
    with get_db() as conn:
        rows = conn.execute(
            f"SELECT * FROM questions WHERE {where} ORDER BY RANDOM() LIMIT ?",
            [*params, size],
        ).fetchall()

    return [_row_to_question(row) for row in rows]


def count_questions(
    subject_id: str,
    exclude_ids: Iterable[str] | None = None,
    difficulty: str | None = None,
    chapter_id: str | None = None,
) -> int:
    """Count questions in a subject pool."""
    where, params = _pool_filter(subject_id, exclude_ids, None, difficulty, chapter_id)
    with get_db() as conn:
        row = conn.execute(f"SELECT COUNT(*) AS n FROM questions WHERE {where}", params).fetchone()
    return row["n"]


def list_questions(subject_id: str) -> list[Question]:
    """Get every question of a subject, oldest first."""
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM questions WHERE subject_id = ? ORDER BY created_at, question_id",
            (subject_id,),
        ).fetchall()
    return [_row_to_question(row) for row in rows]


def fold_response_time(question_id: str, time_taken: float) -> bool:
    """Fold one response time into the question's running mean.

    The read of the old mean/count and the write of the new pair happen in
    a single UPDATE, so concurrent submissions cannot lose an update.

    Returns:
        True if the question exists, False otherwise
    """
    with get_db() as conn:
        cursor = conn.execute(
            """
            UPDATE questions SET
                average_time = (average_time * attempt_count + ?) / (attempt_count + 1),
                attempt_count = attempt_count + 1
            WHERE question_id = ?
            """,
            (float(time_taken), question_id),
        )

    return cursor.rowcount > 0


def _row_to_question(row) -> Question:
    """Convert database row to Question."""
    return Question(
        id=row["question_id"],
        subject_id=row["subject_id"],
        chapter_id=row["chapter_id"],
        text=row["text"],
        options=json.loads(row["options"]),
        correct_option=row["correct_option"],
        explanation=row["explanation"],
        difficulty=row["difficulty"],
        average_time=row["average_time"],
        attempt_count=row["attempt_count"],
    )
