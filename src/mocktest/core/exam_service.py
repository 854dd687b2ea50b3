"""Exam service: the two request flows of the engine.

assemble_exam: learner -> entitlement gate -> composer -> shuffled paper
submit_result: submission -> statistics updater -> persisted result

Also exposes read-only progress, history and leaderboard views.
"""

from __future__ import annotations

import random
from typing import Any

import structlog

from mocktest.config.app_config import EngineConfig
from mocktest.core.composer import ExamComposer
from mocktest.core.entitlement import EntitlementGate
from mocktest.core.exam_request import ExamRequest
from mocktest.core.models import Chapter, Learner, Question, Subject, Submission
from mocktest.core.progress import (
    ProgressSummary,
    build_history,
    build_leaderboard,
    summarize_progress,
)
from mocktest.core.repositories import (
    CatalogRepository,
    LearnerLedger,
    QuestionRepository,
    Store,
    SubmissionRepository,
)
from mocktest.core.sampler import AntiRepeatSampler
from mocktest.core.statistics import PersistedResult, StatisticsUpdater

logger = structlog.get_logger(__name__)


class LearnerNotFoundError(Exception):
    """Raised when the learner id is not in the ledger."""

    def __init__(self, learner_id: str):
        self.learner_id = learner_id
        super().__init__(f"Learner not found: {learner_id}")


class ExamService:
    """Wires the gate, composer and updater to a set of repositories."""

    def __init__(
        self,
        catalog: CatalogRepository,
        questions: QuestionRepository,
        ledger: LearnerLedger,
        submissions: SubmissionRepository,
        config: EngineConfig,
        rng: random.Random | None = None,
    ):
        self.catalog = catalog
        self._ledger = ledger
        self._submissions = submissions
        self.config = config
        self.gate = EntitlementGate(config)
        self.composer = ExamComposer(catalog, AntiRepeatSampler(questions), config, rng=rng)
        self.updater = StatisticsUpdater(submissions, ledger, questions)

    @classmethod
    def from_store(
        cls, store: Store, config: EngineConfig, rng: random.Random | None = None
    ) -> ExamService:
        return cls(store, store, store, store, config, rng=rng)

    async def _load_learner(self, learner_id: str) -> Learner:
        learner = await self._ledger.get_learner(learner_id)
        if learner is None:
            raise LearnerNotFoundError(learner_id)
        return learner

    async def assemble_exam(self, learner_id: str, request: ExamRequest) -> list[Question]:
        """Check entitlement and compose a paper for the learner.

        Raises:
            LearnerNotFoundError: Unknown learner
            EntitlementDenied: LIMIT_REACHED or PREMIUM_ONLY
            ExamCompositionError: Catalog misconfiguration
        """
        learner = await self._load_learner(learner_id)
        self.gate.require(learner, request)

        paper = await self.composer.compose(request, learner.attempted_questions)
        logger.info(
            "exam.assembled",
            learner_id=learner_id,
            questions=len(paper),
            seen=len(learner.attempted_questions),
        )
        return paper

    async def submit_result(self, submission: Submission) -> PersistedResult:
        """Record a submitted exam for a known learner.

        Raises:
            LearnerNotFoundError: Unknown learner
        """
        learner = await self._load_learner(submission.learner_id)
        return await self.updater.record_submission(submission, learner=learner)

    async def subjects(self) -> list[Subject]:
        return await self.catalog.list_subjects()

    async def chapters(self, subject_id: str) -> list[Chapter]:
        return await self.catalog.list_chapters(subject_id)

    async def progress(self, learner_id: str) -> ProgressSummary:
        submissions = await self._submissions.list_submissions(learner_id=learner_id)
        subjects = await self.catalog.list_subjects()
        return summarize_progress(submissions, subjects)

    async def history(self, learner_id: str) -> list[dict[str, Any]]:
        submissions = await self._submissions.list_submissions(learner_id=learner_id)
        subjects = await self.catalog.list_subjects()
        return build_history(submissions, subjects)

    async def leaderboard(self, subject_id: str | None = None) -> list[dict[str, Any]]:
        if subject_id == "all":
            subject_id = None
        submissions = await self._submissions.list_submissions(subject_id=subject_id)
        return build_leaderboard(submissions)
