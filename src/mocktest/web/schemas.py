"""Pydantic schemas for the Web API.

Serialization models for exam requests, question projections,
submissions and the progress views.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field


# =============================================================================
# EXAM SCHEMAS
# =============================================================================


class ExamAssembleRequest(BaseModel):
    """Request body for assembling an exam.

    Exactly one mode: `stream`, `subject`, or `subject` + `chapter_id`.
    """

    subject: str | None = Field(default=None, min_length=1, max_length=100)
    stream: str | None = Field(default=None, min_length=1, max_length=50)
    chapter_id: str | None = Field(default=None, min_length=1, max_length=64)
    difficulty: Literal["all", "easy", "medium", "hard"] = "all"


class SubjectRefResponse(BaseModel):
    id: str
    name: str
    slug: str


class QuestionResponse(BaseModel):
    """Public projection of a question. No answer, no explanation."""

    id: str
    text: str
    options: list[str]
    subject: SubjectRefResponse | None = None
    difficulty: str


class ExamResponse(BaseModel):
    """Assembled paper."""

    questions: list[QuestionResponse]
    count: int


class EntitlementErrorDetail(BaseModel):
    """Body of a 403 from the entitlement gate."""

    message: str
    code: str
    is_premium: bool = False


# =============================================================================
# CATALOG SCHEMAS
# =============================================================================


class SubjectResponse(BaseModel):
    """A catalog subject."""

    id: str
    name: str
    slug: str
    description: str = ""
    streams: list[str] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class ChapterResponse(BaseModel):
    """A chapter of a subject."""

    id: str
    subject_id: str
    name: str
    slug: str
    order: int = 0

    model_config = {"from_attributes": True}


# =============================================================================
# SUBMISSION SCHEMAS
# =============================================================================


class QuestionOutcomeSchema(BaseModel):
    question_id: str = Field(..., min_length=1)
    time_taken: float = Field(default=0.0, ge=0)
    user_choice: int | None = Field(default=None, ge=0, le=3)
    is_correct: bool = False


class SubmissionCreate(BaseModel):
    """Request body for submitting a taken exam."""

    subject_id: str | None = None
    score: int = Field(..., ge=0)
    total_questions: int = Field(..., gt=0)
    questions: list[QuestionOutcomeSchema] = Field(default_factory=list)


class SubmissionResponse(BaseModel):
    """Persisted submission."""

    id: str
    learner_id: str
    subject_id: str | None
    score: int
    total_questions: int
    percentage: float
    created_at: str
    questions: list[QuestionOutcomeSchema]
    stats_updated: int = 0
    warnings: list[str] = Field(default_factory=list)


# =============================================================================
# PROGRESS SCHEMAS
# =============================================================================


class SubjectProgressResponse(BaseModel):
    id: str
    name: str
    slug: str
    tests_count: int
    accuracy: int


class ProgressResponse(BaseModel):
    total_tests: int
    avg_percentage: int
    level: int
    recent_activity: list[dict[str, Any]]
    subject_progress: list[SubjectProgressResponse]


class HistoryEntry(BaseModel):
    id: str
    subject: str
    slug: str
    score: int
    total_questions: int
    percentage: int
    date: str | None


class LeaderboardEntry(BaseModel):
    learner_id: str
    total_score: int
    total_questions: int
    tests_taken: int
    avg_percentage: float


# =============================================================================
# HEALTH
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "0.1.0"
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
