"""SQLite-backed implementation of the engine's repository contracts.

Each call runs the blocking repository function in a worker thread, so
every repository access is an await point for the caller.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Iterable

from mocktest.core.models import Chapter, Learner, Question, Subject, Submission
from mocktest.core.repositories import Store
from mocktest.db import (
    learners_repository,
    questions_repository,
    subjects_repository,
    submissions_repository,
)
from mocktest.db.database import init_db


class SqliteStore(Store):
    """Catalog, question bank, ledger and submission log in one SQLite file."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = init_db(db_path)

    # CatalogRepository --------------------------------------------------
    async def get_subject_by_slug(self, slug: str) -> Subject | None:
        return await asyncio.to_thread(subjects_repository.get_subject_by_slug, slug)

    async def get_subjects_by_slugs(self, slugs: Iterable[str]) -> list[Subject]:
        return await asyncio.to_thread(subjects_repository.get_subjects_by_slugs, list(slugs))

    async def get_chapter(self, chapter_id: str) -> Chapter | None:
        return await asyncio.to_thread(subjects_repository.get_chapter, chapter_id)

    async def list_subjects(self) -> list[Subject]:
        return await asyncio.to_thread(subjects_repository.list_subjects)

    async def list_chapters(self, subject_id: str) -> list[Chapter]:
        return await asyncio.to_thread(subjects_repository.list_chapters, subject_id)

    # QuestionRepository -------------------------------------------------
    async def get_question(self, question_id: str) -> Question | None:
        return await asyncio.to_thread(questions_repository.get_question, question_id)

    async def sample_questions(
        self,
        subject_id: str,
        size: int,
        *,
        exclude_ids: Iterable[str] | None = None,
        within_ids: Iterable[str] | None = None,
        difficulty: str | None = None,
        chapter_id: str | None = None,
    ) -> list[Question]:
        return await asyncio.to_thread(
            questions_repository.sample_questions,
            subject_id,
            size,
            exclude_ids=list(exclude_ids) if exclude_ids is not None else None,
            within_ids=list(within_ids) if within_ids is not None else None,
            difficulty=difficulty,
            chapter_id=chapter_id,
        )

    async def count_questions(
        self,
        subject_id: str,
        *,
        exclude_ids: Iterable[str] | None = None,
        difficulty: str | None = None,
        chapter_id: str | None = None,
    ) -> int:
        return await asyncio.to_thread(
            questions_repository.count_questions,
            subject_id,
            exclude_ids=list(exclude_ids) if exclude_ids is not None else None,
            difficulty=difficulty,
            chapter_id=chapter_id,
        )

    async def list_questions(self, subject_id: str) -> list[Question]:
        return await asyncio.to_thread(questions_repository.list_questions, subject_id)

    async def fold_response_time(self, question_id: str, time_taken: float) -> bool:
        return await asyncio.to_thread(
            questions_repository.fold_response_time, question_id, time_taken
        )

    # LearnerLedger ------------------------------------------------------
    async def get_learner(self, learner_id: str) -> Learner | None:
        return await asyncio.to_thread(learners_repository.get_learner, learner_id)

    async def record_attempt(
        self,
        learner_id: str,
        question_ids: Iterable[str],
        count_free_test: bool,
    ) -> None:
        await asyncio.to_thread(
            learners_repository.record_attempt,
            learner_id,
            list(question_ids),
            count_free_test,
        )

    # SubmissionRepository -----------------------------------------------
    async def save_submission(self, submission: Submission) -> Submission:
        return await asyncio.to_thread(submissions_repository.insert_submission, submission)

    async def list_submissions(
        self,
        learner_id: str | None = None,
        subject_id: str | None = None,
    ) -> list[Submission]:
        return await asyncio.to_thread(
            submissions_repository.list_submissions, learner_id, subject_id
        )
