"""Repository interfaces for the engine's persistent state.

Every method is a coroutine: each call is a separate suspension point and
no atomicity is assumed across two calls.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable

from mocktest.core.models import Chapter, Learner, Question, Subject, Submission


class CatalogRepository(ABC):
    """Read access to subjects and chapters."""

    @abstractmethod
    async def get_subject_by_slug(self, slug: str) -> Subject | None:
        """Return the subject with this slug, if any."""

    @abstractmethod
    async def get_subjects_by_slugs(self, slugs: Iterable[str]) -> list[Subject]:
        """Return every subject whose slug is in `slugs` (missing ones omitted)."""

    @abstractmethod
    async def get_chapter(self, chapter_id: str) -> Chapter | None:
        """Return the chapter with this id, if any."""

    @abstractmethod
    async def list_subjects(self) -> list[Subject]:
        """Return all subjects ordered by name."""

    @abstractmethod
    async def list_chapters(self, subject_id: str) -> list[Chapter]:
        """Return the chapters of a subject in display order."""


class QuestionRepository(ABC):
    """Question bank with random sampling and per-item statistics."""

    @abstractmethod
    async def get_question(self, question_id: str) -> Question | None:
        """Exact lookup by id."""

    @abstractmethod
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
        """Draw up to `size` matching questions uniformly without replacement.

        `exclude_ids` removes ids from the pool; `within_ids` restricts the
        pool to those ids.
        """

    @abstractmethod
    async def count_questions(
        self,
        subject_id: str,
        *,
        exclude_ids: Iterable[str] | None = None,
        difficulty: str | None = None,
        chapter_id: str | None = None,
    ) -> int:
        """Count questions matching the predicate."""

    @abstractmethod
    async def list_questions(self, subject_id: str) -> list[Question]:
        """Return every question of a subject."""

    @abstractmethod
    async def fold_response_time(self, question_id: str, time_taken: float) -> bool:
        """Fold one response time into the question's running mean.

        Returns False if the question no longer exists.
        """


class LearnerLedger(ABC):
    """Learner entitlement state and seen-set."""

    @abstractmethod
    async def get_learner(self, learner_id: str) -> Learner | None:
        """Return the learner with the full attempted-question set."""

    @abstractmethod
    async def record_attempt(
        self,
        learner_id: str,
        question_ids: Iterable[str],
        count_free_test: bool,
    ) -> None:
        """Union ids into the seen-set and optionally bump the free counter.

        Both mutations are applied atomically.
        """


class SubmissionRepository(ABC):
    """Append-only store of submitted exams."""

    @abstractmethod
    async def save_submission(self, submission: Submission) -> Submission:
        """Persist and return the submission with id and timestamp set."""

    @abstractmethod
    async def list_submissions(
        self,
        learner_id: str | None = None,
        subject_id: str | None = None,
    ) -> list[Submission]:
        """Return submissions, newest first, optionally filtered."""


class Store(CatalogRepository, QuestionRepository, LearnerLedger, SubmissionRepository):
    """A single backend implementing every repository contract."""


__all__ = [
    "CatalogRepository",
    "QuestionRepository",
    "LearnerLedger",
    "SubmissionRepository",
    "Store",
]
