"""Anti-repeat question sampler.

Draws questions the learner has not seen yet and tops up with seen ones
when the unseen pool runs short. Freshness is best effort: a learner who
has seen the whole pool still gets a full paper.
"""

from __future__ import annotations

from typing import Iterable

import structlog

from mocktest.core.models import Question, Subject
from mocktest.core.repositories import QuestionRepository

logger = structlog.get_logger(__name__)


class AntiRepeatSampler:
    """Samples one subject's pool, unseen questions first."""

    def __init__(self, questions: QuestionRepository):
        self._questions = questions

    async def sample(
        self,
        subject: Subject,
        count: int,
        exclude_ids: Iterable[str] = (),
        difficulty: str | None = None,
        chapter_id: str | None = None,
    ) -> list[Question]:
        """Draw `count` questions for `subject`.

        Args:
            subject: Subject whose pool is sampled
            count: Target number of questions
            exclude_ids: Ids the learner has already attempted
            difficulty: Restrict the pool to one difficulty (None = all)
            chapter_id: Restrict the pool to one chapter

        Returns:
            Exactly `count` questions when the pool is large enough,
            otherwise the whole pool. Each carries a SubjectRef.
        """
        if count <= 0:
            return []

        excluded = set(exclude_ids)

        fresh = await self._questions.sample_questions(
            subject.id,
            count,
            exclude_ids=excluded,
            difficulty=difficulty,
            chapter_id=chapter_id,
        )

        picked = list(fresh)
        needed = count - len(picked)

        if needed > 0 and excluded:
            repeats = await self._questions.sample_questions(
                subject.id,
                needed,
                within_ids=excluded,
                difficulty=difficulty,
                chapter_id=chapter_id,
            )
            picked.extend(repeats)
            logger.info(
                "sampler.top_up",
                subject=subject.slug,
                requested=count,
                fresh=len(fresh),
                repeated=len(repeats),
            )

        if len(picked) < count:
            logger.warning(
                "sampler.pool_too_small",
                subject=subject.slug,
                requested=count,
                available=len(picked),
            )

        ref = subject.ref()
        return [q.with_subject(ref) for q in picked]
