"""Progress, history and leaderboard summaries over submissions."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any

from mocktest.core.models import Subject, Submission

TESTS_PER_LEVEL = 5
RECENT_ACTIVITY_SIZE = 5
LEADERBOARD_SIZE = 20


@dataclass
class SubjectProgress:
    """Per-subject mastery numbers."""

    subject_id: str
    name: str
    slug: str
    tests_count: int = 0
    accuracy: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.subject_id,
            "name": self.name,
            "slug": self.slug,
            "tests_count": self.tests_count,
            "accuracy": self.accuracy,
        }


@dataclass
class ProgressSummary:
    """Overall progress of one learner."""

    total_tests: int
    avg_percentage: int
    level: int
    recent_activity: list[dict[str, Any]] = field(default_factory=list)
    subject_progress: list[SubjectProgress] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_tests": self.total_tests,
            "avg_percentage": self.avg_percentage,
            "level": self.level,
            "recent_activity": self.recent_activity,
            "subject_progress": [s.to_dict() for s in self.subject_progress],
        }


def _newest_first(submissions: list[Submission]) -> list[Submission]:
    return sorted(submissions, key=lambda s: s.created_at or "", reverse=True)


def summarize_progress(
    submissions: list[Submission], subjects: list[Subject]
) -> ProgressSummary:
    """Summarize a learner's submissions.

    Level grows by one every five tests. Accuracy figures are rounded
    average percentages.
    """
    total = len(submissions)
    avg = round(sum(s.percentage for s in submissions) / total) if total else 0
    names = {s.id: s.name for s in subjects}

    recent = [
        {
            "id": s.id,
            "subject": names.get(s.subject_id, "Mixed") if s.subject_id else "Mixed",
            "score": f"{s.score}/{s.total_questions}",
            "date": s.created_at,
            "points": f"+{round(s.percentage / 10)}",
        }
        for s in _newest_first(submissions)[:RECENT_ACTIVITY_SIZE]
    ]

    by_subject: dict[str, list[Submission]] = defaultdict(list)
    for s in submissions:
        if s.subject_id:
            by_subject[s.subject_id].append(s)

    mastery = []
    for subject in sorted(subjects, key=lambda s: s.name):
        results = by_subject.get(subject.id, [])
        accuracy = round(sum(r.percentage for r in results) / len(results)) if results else 0
        mastery.append(
            SubjectProgress(
                subject_id=subject.id,
                name=subject.name,
                slug=subject.slug,
                tests_count=len(results),
                accuracy=accuracy,
            )
        )

    return ProgressSummary(
        total_tests=total,
        avg_percentage=avg,
        level=total // TESTS_PER_LEVEL + 1,
        recent_activity=recent,
        subject_progress=mastery,
    )


def build_history(
    submissions: list[Submission], subjects: list[Subject]
) -> list[dict[str, Any]]:
    """Flatten submissions into history rows, newest first."""
    by_id = {s.id: s for s in subjects}
    rows = []
    for s in _newest_first(submissions):
        subject = by_id.get(s.subject_id) if s.subject_id else None
        rows.append(
            {
                "id": s.id,
                "subject": subject.name if subject else "Mixed",
                "slug": subject.slug if subject else "",
                "score": s.score,
                "total_questions": s.total_questions,
                "percentage": round(s.percentage),
                "date": s.created_at,
            }
        )
    return rows


def build_leaderboard(
    submissions: list[Submission], limit: int = LEADERBOARD_SIZE
) -> list[dict[str, Any]]:
    """Rank learners by total score, then by average percentage."""
    totals: dict[str, dict[str, Any]] = {}
    for s in submissions:
        row = totals.setdefault(
            s.learner_id,
            {
                "learner_id": s.learner_id,
                "total_score": 0,
                "total_questions": 0,
                "tests_taken": 0,
                "_percentage_sum": 0.0,
            },
        )
        row["total_score"] += s.score
        row["total_questions"] += s.total_questions
        row["tests_taken"] += 1
        row["_percentage_sum"] += s.percentage

    board = []
    for row in totals.values():
        pct_sum = row.pop("_percentage_sum")
        row["avg_percentage"] = round(pct_sum / row["tests_taken"], 2)
        board.append(row)

    board.sort(key=lambda r: (r["total_score"], r["avg_percentage"]), reverse=True)
    return board[:limit]
