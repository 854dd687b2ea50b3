"""Tests for SqliteStore, the async adapter over the repositories."""

import asyncio

import pytest

from mocktest.core.models import QuestionOutcome, Submission
from mocktest.db import learners_repository, questions_repository


class TestSqliteStore:
    """SqliteStore satisfies the engine's repository contracts."""

    @pytest.mark.asyncio
    async def test_catalog_lookups(self, store, subjects):
        physics = await store.get_subject_by_slug("physics-11th-12th")
        assert physics.id == "s-phy"
        found = await store.get_subjects_by_slugs(iter(["biology", "chemistry"]))
        assert {s.slug for s in found} == {"biology", "chemistry"}
        assert len(await store.list_subjects()) == 4

    @pytest.mark.asyncio
    async def test_sample_accepts_sets(self, store, subjects, make_question):
        for i in range(3):
            questions_repository.insert_question(make_question(f"q{i}", "s-chem"))

        sample = await store.sample_questions("s-chem", 5, exclude_ids={"q0"})
        assert {q.id for q in sample} == {"q1", "q2"}
        assert await store.count_questions("s-chem", exclude_ids=frozenset()) == 3

    @pytest.mark.asyncio
    async def test_concurrent_folds_lose_nothing(self, store, subjects, make_question):
        """Concurrent folds on the same question all land."""
        questions_repository.insert_question(make_question("q-hot", "s-phy"))

        results = await asyncio.gather(
            *(store.fold_response_time("q-hot", 30.0) for _ in range(20))
        )

        assert all(results)
        question = await store.get_question("q-hot")
        assert question.attempt_count == 20
        assert question.average_time == pytest.approx(30.0)

    @pytest.mark.asyncio
    async def test_ledger_and_submissions(self, store, db_path):
        learners_repository.insert_learner("u1")

        saved = await store.save_submission(
            Submission(
                learner_id="u1",
                subject_id=None,
                score=1,
                total_questions=1,
                questions=[QuestionOutcome("q1", 2.0, 0, True)],
            )
        )
        await store.record_attempt("u1", saved.question_ids, count_free_test=True)

        learner = await store.get_learner("u1")
        assert learner.free_tests_taken == 1
        assert learner.attempted_questions == {"q1"}
        assert [s.id for s in await store.list_submissions(learner_id="u1")] == [saved.id]
