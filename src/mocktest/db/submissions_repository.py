"""Repository functions for the submission log.

Submissions are append-only: one row per submitted exam, plus one row per
answered question in its original order.
"""

from __future__ import annotations

import json
from dataclasses import replace
from datetime import datetime, timezone

import structlog

from mocktest.core.models import QuestionOutcome, Submission
from mocktest.db.database import get_db
from mocktest.utils.validators import new_id

logger = structlog.get_logger(__name__)


def insert_submission(submission: Submission) -> Submission:
    """Persist a submission verbatim.

    Returns:
        Copy of the submission with id and created_at set

    Raises:
        sqlite3.IntegrityError: If the learner does not exist
    """
    saved = replace(
        submission,
        id=submission.id or new_id(),
        created_at=submission.created_at or datetime.now(timezone.utc).isoformat(),
    )

    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO submissions (
                submission_id, learner_id, subject_id, score,
                total_questions, percentage, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                saved.id,
                saved.learner_id,
                saved.subject_id,
                saved.score,
                saved.total_questions,
                saved.percentage,
                saved.created_at,
            ),
        )
        conn.executemany(
            """
            INSERT INTO submission_questions (
                submission_id, position, question_id, time_taken, user_choice, is_correct
            ) VALUES (?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    saved.id,
                    position,
                    q.question_id,
                    q.time_taken,
                    q.user_choice,
                    int(q.is_correct),
                )
                for position, q in enumerate(saved.questions)
            ],
        )

    logger.debug("submissions.inserted", submission_id=saved.id, learner_id=saved.learner_id)
    return saved


def list_submissions(
    learner_id: str | None = None,
    subject_id: str | None = None,
) -> list[Submission]:
    """Get submissions, newest first.

    Args:
        learner_id: Only this learner's submissions
        subject_id: Only submissions for this subject
    """
    clauses = []
    params = []
    if learner_id is not None:
        clauses.append("learner_id = ?")
        params.append(learner_id)
    if subject_id is not None:
        clauses.append("subject_id = ?")
        params.append(subject_id)
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

    with get_db() as conn:
        rows = conn.execute(
            f"SELECT * FROM submissions {where} ORDER BY created_at DESC, rowid DESC",
            params,
        ).fetchall()

        outcomes: dict[str, list[QuestionOutcome]] = {row["submission_id"]: [] for row in rows}
        if outcomes:
            for q in conn.execute(
                """
                SELECT * FROM submission_questions
                WHERE submission_id IN (SELECT value FROM json_each(?))
                ORDER BY submission_id, position
                """,
                (json.dumps(list(outcomes)),),
            ).fetchall():
                outcomes[q["submission_id"]].append(
                    QuestionOutcome(
                        question_id=q["question_id"],
                        time_taken=q["time_taken"],
                        user_choice=q["user_choice"],
                        is_correct=bool(q["is_correct"]),
                    )
                )

    return [
        Submission(
            id=row["submission_id"],
            learner_id=row["learner_id"],
            subject_id=row["subject_id"],
            score=row["score"],
            total_questions=row["total_questions"],
            questions=outcomes[row["submission_id"]],
            created_at=row["created_at"],
        )
        for row in rows
    ]
