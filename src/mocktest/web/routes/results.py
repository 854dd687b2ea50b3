"""Result submission and progress endpoints."""

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status

from mocktest.core.exam_service import ExamService, LearnerNotFoundError
from mocktest.core.models import QuestionOutcome, Submission
from mocktest.web.schemas import (
    HistoryEntry,
    LeaderboardEntry,
    ProgressResponse,
    SubmissionCreate,
    SubmissionResponse,
)
from mocktest.web.service import get_exam_service

router = APIRouter(prefix="/api", tags=["results"])


@router.post(
    "/results", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED
)
async def submit_result(
    body: SubmissionCreate,
    learner_id: str = Header(..., alias="X-Learner-Id", min_length=1),
    service: ExamService = Depends(get_exam_service),
) -> SubmissionResponse:
    """Record a taken exam and update attempt statistics."""
    if body.score > body.total_questions:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="score cannot exceed total_questions",
        )

    submission = Submission(
        learner_id=learner_id,
        subject_id=body.subject_id,
        score=body.score,
        total_questions=body.total_questions,
        questions=[QuestionOutcome(**q.model_dump()) for q in body.questions],
    )

    try:
        result = await service.submit_result(submission)
    except LearnerNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return SubmissionResponse(**result.to_dict())


@router.get("/progress", response_model=ProgressResponse)
async def get_progress(
    learner_id: str = Header(..., alias="X-Learner-Id", min_length=1),
    service: ExamService = Depends(get_exam_service),
) -> ProgressResponse:
    """Overall and per-subject progress of the calling learner."""
    summary = await service.progress(learner_id)
    return ProgressResponse(**summary.to_dict())


@router.get("/history", response_model=list[HistoryEntry])
async def get_history(
    learner_id: str = Header(..., alias="X-Learner-Id", min_length=1),
    service: ExamService = Depends(get_exam_service),
) -> list[HistoryEntry]:
    """Submitted exams of the calling learner, newest first."""
    return [HistoryEntry(**row) for row in await service.history(learner_id)]


@router.get("/leaderboard", response_model=list[LeaderboardEntry])
async def get_leaderboard(
    subject_id: str = Query(default="all"),
    service: ExamService = Depends(get_exam_service),
) -> list[LeaderboardEntry]:
    """Top learners by total score, optionally for one subject."""
    return [LeaderboardEntry(**row) for row in await service.leaderboard(subject_id)]
