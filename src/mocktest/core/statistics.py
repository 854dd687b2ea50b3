"""Statistics updater.

Records a submitted exam and folds its outcomes into learner and
question statistics:
1. persist the submission (append-only)
2. union the submitted ids into the learner's seen-set and bump the
   free counter, once, before any per-question update
3. fold each response time into that question's running mean

Steps 2 and 3 are best effort. The submission is the record of the exam
having been taken; telemetry failures are logged and skipped.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from mocktest.core.models import Learner, Submission
from mocktest.core.repositories import LearnerLedger, QuestionRepository, SubmissionRepository

logger = structlog.get_logger(__name__)


def running_mean(old_average: float, old_count: int, sample: float) -> float:
    """Fold one sample into a mean of `old_count` samples."""
    return (old_average * old_count + sample) / (old_count + 1)


@dataclass
class PersistedResult:
    """Result of recording a submission."""

    submission: Submission
    stats_updated: int = 0
    stats_skipped: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        result = self.submission.to_dict()
        result["stats_updated"] = self.stats_updated
        result["warnings"] = list(self.warnings)
        return result


class StatisticsUpdater:
    """Applies a submission to the submission log, the ledger and the bank."""

    def __init__(
        self,
        submissions: SubmissionRepository,
        ledger: LearnerLedger,
        questions: QuestionRepository,
    ):
        self._submissions = submissions
        self._ledger = ledger
        self._questions = questions

    async def record_submission(
        self, submission: Submission, learner: Learner | None = None
    ) -> PersistedResult:
        """Persist `submission` and update statistics.

        Args:
            submission: The exam outcome to record
            learner: Learner state, if already read; fetched otherwise

        Returns:
            PersistedResult with the stored submission and any warnings

        Raises:
            Repository errors from persisting the submission itself.
        """
        saved = await self._submissions.save_submission(submission)
        result = PersistedResult(submission=saved)

        question_ids = saved.question_ids
        if not question_ids:
            logger.info("stats.empty_submission", submission_id=saved.id)

        try:
            if learner is None:
                learner = await self._ledger.get_learner(saved.learner_id)
            count_free_test = not (learner is not None and learner.is_premium)
            await self._ledger.record_attempt(
                saved.learner_id, question_ids, count_free_test=count_free_test
            )
        except Exception as e:
            logger.warning(
                "stats.ledger_update_failed",
                submission_id=saved.id,
                learner_id=saved.learner_id,
                error=str(e),
            )
            result.warnings.append(f"Learner history not updated: {e}")

        for outcome in saved.questions:
            try:
                found = await self._questions.fold_response_time(
                    outcome.question_id, outcome.time_taken
                )
            except Exception as e:
                logger.warning(
                    "stats.fold_failed",
                    question_id=outcome.question_id,
                    error=str(e),
                )
                result.stats_skipped.append(outcome.question_id)
                continue

            if not found:
                logger.info("stats.question_missing", question_id=outcome.question_id)
                result.stats_skipped.append(outcome.question_id)
                continue

            result.stats_updated += 1

        if result.stats_skipped:
            result.warnings.append(
                f"Statistics skipped for {len(result.stats_skipped)} question(s)"
            )

        logger.info(
            "submission.recorded",
            submission_id=saved.id,
            learner_id=saved.learner_id,
            questions=len(question_ids),
            stats_updated=result.stats_updated,
            percentage=round(saved.percentage, 2),
        )
        return result
