"""Domain models shared by the engine and the repositories.

Question, Subject and Chapter describe the content bank. Learner carries
entitlement state and the seen-set. Submission records one taken exam.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Literal

Difficulty = Literal["easy", "medium", "hard"]

DIFFICULTIES: tuple[str, ...] = ("easy", "medium", "hard")
OPTION_COUNT = 4


@dataclass(frozen=True)
class SubjectRef:
    """Minimal subject projection attached to sampled questions."""

    id: str
    name: str
    slug: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "slug": self.slug}


@dataclass
class Subject:
    """A subject in the catalog."""

    id: str
    name: str
    slug: str
    description: str = ""
    streams: list[str] = field(default_factory=list)

    def ref(self) -> SubjectRef:
        """Project to the (id, name, slug) triple."""
        return SubjectRef(id=self.id, name=self.name, slug=self.slug)


@dataclass
class Chapter:
    """A chapter inside a subject."""

    id: str
    subject_id: str
    name: str
    slug: str
    order: int = 0


@dataclass
class Question:
    """A four-option multiple-choice item.

    `average_time` is a running mean of response seconds and is only
    meaningful when `attempt_count` > 0.
    """

    id: str
    subject_id: str
    text: str
    options: list[str]
    correct_option: int
    difficulty: Difficulty = "medium"
    chapter_id: str | None = None
    explanation: str | None = None
    average_time: float = 0.0
    attempt_count: int = 0
    subject: SubjectRef | None = None

    def __post_init__(self) -> None:
        if len(self.options) != OPTION_COUNT:
            raise ValueError(
                f"Question {self.id} must have exactly {OPTION_COUNT} options, "
                f"got {len(self.options)}"
            )
        if not 0 <= self.correct_option < OPTION_COUNT:
            raise ValueError(
                f"Question {self.id} correct_option out of range: {self.correct_option}"
            )
        if self.difficulty not in DIFFICULTIES:
            raise ValueError(f"Question {self.id} has unknown difficulty: {self.difficulty}")

    def with_subject(self, subject: SubjectRef) -> Question:
        """Copy of this question with the subject projection attached."""
        return replace(self, subject=subject)

    def to_public_dict(self) -> dict[str, Any]:
        """Projection safe to send before submission.

        Never includes the correct option or the explanation.
        """
        return {
            "id": self.id,
            "text": self.text,
            "options": list(self.options),
            "subject": self.subject.to_dict() if self.subject else None,
            "difficulty": self.difficulty,
        }

    def to_dict(self) -> dict[str, Any]:
        """Full record, for persistence and authoring tools."""
        result = self.to_public_dict()
        result.update(
            {
                "subject_id": self.subject_id,
                "chapter_id": self.chapter_id,
                "correct_option": self.correct_option,
                "explanation": self.explanation,
                "average_time": self.average_time,
                "attempt_count": self.attempt_count,
            }
        )
        return result


@dataclass
class Learner:
    """Entitlement state and attempt history of one learner."""

    id: str
    is_premium: bool = False
    free_tests_taken: int = 0
    attempted_questions: set[str] = field(default_factory=set)


@dataclass
class QuestionOutcome:
    """The learner's result on a single question of a submission."""

    question_id: str
    time_taken: float = 0.0
    user_choice: int | None = None
    is_correct: bool = False

    def __post_init__(self) -> None:
        if self.time_taken < 0:
            raise ValueError(f"time_taken must be >= 0, got {self.time_taken}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "question_id": self.question_id,
            "time_taken": self.time_taken,
            "user_choice": self.user_choice,
            "is_correct": self.is_correct,
        }


@dataclass
class Submission:
    """One submitted exam attempt."""

    learner_id: str
    subject_id: str | None
    score: int
    total_questions: int
    questions: list[QuestionOutcome] = field(default_factory=list)
    id: str | None = None
    created_at: str | None = None

    @property
    def percentage(self) -> float:
        """100 * score / total, or 0 for an empty paper."""
        if self.total_questions <= 0:
            return 0.0
        return 100.0 * self.score / self.total_questions

    @property
    def question_ids(self) -> list[str]:
        return [q.question_id for q in self.questions]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "learner_id": self.learner_id,
            "subject_id": self.subject_id,
            "score": self.score,
            "total_questions": self.total_questions,
            "percentage": self.percentage,
            "created_at": self.created_at,
            "questions": [q.to_dict() for q in self.questions],
        }
