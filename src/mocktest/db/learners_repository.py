"""Repository functions for the learner ledger.

Entitlement state lives in `learners`; the seen-set lives in
`learner_attempts`, one row per (learner, question), append-only.
"""

from __future__ import annotations

from typing import Iterable

import structlog

from mocktest.core.models import Learner
from mocktest.db.database import get_db

logger = structlog.get_logger(__name__)


def insert_learner(
    learner_id: str,
    is_premium: bool = False,
    free_tests_taken: int = 0,
) -> Learner:
    """Register a learner.

    Raises:
        sqlite3.IntegrityError: If the learner already exists
    """
    with get_db() as conn:
        conn.execute(
            "INSERT INTO learners (learner_id, is_premium, free_tests_taken) VALUES (?, ?, ?)",
            (learner_id, int(is_premium), free_tests_taken),
        )

    logger.debug("learners.inserted", learner_id=learner_id, is_premium=is_premium)
    return Learner(id=learner_id, is_premium=is_premium, free_tests_taken=free_tests_taken)


def get_learner(learner_id: str) -> Learner | None:
    """Get learner with the full attempted-question set.

    Returns:
        Learner if found, None otherwise
    """
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM learners WHERE learner_id = ?", (learner_id,)
        ).fetchone()
        if row is None:
            return None
        attempted = {
            r["question_id"]
            for r in conn.execute(
                "SELECT question_id FROM learner_attempts WHERE learner_id = ?",
                (learner_id,),
            ).fetchall()
        }

    return Learner(
        id=row["learner_id"],
        is_premium=bool(row["is_premium"]),
        free_tests_taken=row["free_tests_taken"],
        attempted_questions=attempted,
    )


def set_premium(learner_id: str, is_premium: bool) -> None:
    """Change a learner's tier.

    Raises:
        ValueError: If learner_id doesn't exist
    """
    with get_db() as conn:
        cursor = conn.execute(
            "UPDATE learners SET is_premium = ? WHERE learner_id = ?",
            (int(is_premium), learner_id),
        )
        if cursor.rowcount == 0:
            raise ValueError(f"Learner not found: {learner_id}")

    logger.debug("learners.tier_updated", learner_id=learner_id, is_premium=is_premium)


def record_attempt(
    learner_id: str,
    question_ids: Iterable[str],
    count_free_test: bool = True,
) -> None:
    """Union ids into the seen-set and optionally bump the free counter.

    Runs in one transaction: either both mutations apply or neither.
    Ids already present are ignored.

    Raises:
        ValueError: If learner_id doesn't exist
    """
    rows = [(learner_id, qid) for qid in dict.fromkeys(question_ids)]
    with get_db() as conn:
        exists = conn.execute(
            "SELECT 1 FROM learners WHERE learner_id = ?", (learner_id,)
        ).fetchone()
        if exists is None:
            raise ValueError(f"Learner not found: {learner_id}")

        if count_free_test:
            conn.execute(
                "UPDATE learners SET free_tests_taken = free_tests_taken + 1 WHERE learner_id = ?",
                (learner_id,),
            )
        conn.executemany(
            "INSERT OR IGNORE INTO learner_attempts (learner_id, question_id) VALUES (?, ?)",
            rows,
        )

    logger.debug(
        "learners.attempt_recorded",
        learner_id=learner_id,
        questions=len(rows),
        counted=count_free_test,
    )
