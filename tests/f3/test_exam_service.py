"""End-to-end tests for ExamService over SQLite."""

import random

import pytest

from mocktest.config.app_config import EngineConfig
from mocktest.core.entitlement import DenyReason, EntitlementDenied
from mocktest.core.exam_request import ChapterPracticeRequest, SingleSubjectRequest
from mocktest.core.exam_service import ExamService, LearnerNotFoundError
from mocktest.core.models import QuestionOutcome, Submission
from mocktest.db import learners_repository, questions_repository


@pytest.fixture
def service(store):
    config = EngineConfig(single_subject_count=3)
    return ExamService.from_store(store, config, rng=random.Random(42))


@pytest.fixture
def physics_bank(subjects, make_question):
    """Physics Q1..Q5."""
    for i in range(1, 6):
        questions_repository.insert_question(make_question(f"Q{i}", "s-phy"))


def _answers(learner_id, paper, time_taken=30.0):
    return Submission(
        learner_id=learner_id,
        subject_id="s-phy",
        score=len(paper),
        total_questions=len(paper),
        questions=[
            QuestionOutcome(q.id, time_taken=time_taken, user_choice=0, is_correct=True)
            for q in paper
        ],
    )


class TestAssembleAndSubmit:
    """Full assemble / submit cycles."""

    @pytest.mark.asyncio
    async def test_second_paper_prefers_unseen(self, service, physics_bank):
        """Q1..Q5, 3 per paper: the second paper holds both unseen questions."""
        learners_repository.insert_learner("u1")
        request = SingleSubjectRequest(slug="physics-11th-12th")

        first = await service.assemble_exam("u1", request)
        await service.submit_result(_answers("u1", first))
        second = await service.assemble_exam("u1", request)

        first_ids = {q.id for q in first}
        second_ids = {q.id for q in second}
        unseen = {f"Q{i}" for i in range(1, 6)} - first_ids
        assert len(second_ids) == 3
        assert unseen <= second_ids
        assert len(second_ids & first_ids) == 1

    @pytest.mark.asyncio
    async def test_quota_reached_after_fifth_submission(self, service, physics_bank):
        learners_repository.insert_learner("u1", free_tests_taken=4)
        request = SingleSubjectRequest(slug="physics-11th-12th")

        paper = await service.assemble_exam("u1", request)
        await service.submit_result(_answers("u1", paper))

        assert learners_repository.get_learner("u1").free_tests_taken == 5
        with pytest.raises(EntitlementDenied) as exc_info:
            await service.assemble_exam("u1", request)
        assert exc_info.value.reason is DenyReason.LIMIT_REACHED

    @pytest.mark.asyncio
    async def test_abandoned_exam_costs_nothing(self, service, physics_bank):
        learners_repository.insert_learner("u1")
        await service.assemble_exam("u1", SingleSubjectRequest(slug="physics-11th-12th"))
        assert learners_repository.get_learner("u1").free_tests_taken == 0

    @pytest.mark.asyncio
    async def test_chapter_practice_denied_for_free(self, service, physics_bank):
        learners_repository.insert_learner("u1")
        request = ChapterPracticeRequest(subject_slug="physics-11th-12th", chapter_id="x")
        with pytest.raises(EntitlementDenied) as exc_info:
            await service.assemble_exam("u1", request)
        assert exc_info.value.reason is DenyReason.PREMIUM_ONLY

    @pytest.mark.asyncio
    async def test_unknown_learner(self, service, physics_bank):
        with pytest.raises(LearnerNotFoundError):
            await service.assemble_exam("ghost", SingleSubjectRequest(slug="physics-11th-12th"))

    @pytest.mark.asyncio
    async def test_views(self, service, physics_bank):
        learners_repository.insert_learner("u1")
        paper = await service.assemble_exam("u1", SingleSubjectRequest(slug="physics-11th-12th"))
        await service.submit_result(_answers("u1", paper))

        progress = await service.progress("u1")
        assert progress.total_tests == 1
        assert progress.avg_percentage == 100

        [row] = await service.history("u1")
        assert row["subject"] == "Physics"

        assert [r["learner_id"] for r in await service.leaderboard("all")] == ["u1"]
        assert await service.leaderboard("s-chem") == []
