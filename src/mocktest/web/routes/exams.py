"""Exam assembly endpoint."""

from fastapi import APIRouter, Depends, Header, HTTPException, status

from mocktest.core.composer import (
    ChapterNotFoundError,
    InvalidStreamError,
    SubjectNotFoundError,
    SubjectsIncompleteError,
)
from mocktest.core.entitlement import EntitlementDenied
from mocktest.core.exam_request import build_exam_request
from mocktest.core.exam_service import ExamService, LearnerNotFoundError
from mocktest.web.schemas import (
    EntitlementErrorDetail,
    ExamAssembleRequest,
    ExamResponse,
    QuestionResponse,
)
from mocktest.web.service import get_exam_service

router = APIRouter(prefix="/api/exams", tags=["exams"])


@router.post("", response_model=ExamResponse)
async def assemble_exam(
    body: ExamAssembleRequest,
    learner_id: str = Header(..., alias="X-Learner-Id", min_length=1),
    service: ExamService = Depends(get_exam_service),
) -> ExamResponse:
    """Assemble a shuffled paper for the calling learner."""
    try:
        request = build_exam_request(
            subject=body.subject,
            stream=body.stream,
            chapter_id=body.chapter_id,
            difficulty=body.difficulty,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    try:
        paper = await service.assemble_exam(learner_id, request)
    except EntitlementDenied as e:
        detail = EntitlementErrorDetail(
            message=str(e), code=e.reason.value, is_premium=e.is_premium
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail.model_dump())
    except InvalidStreamError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except (
        LearnerNotFoundError,
        SubjectNotFoundError,
        ChapterNotFoundError,
        SubjectsIncompleteError,
    ) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    questions = [QuestionResponse(**q.to_public_dict()) for q in paper]
    return ExamResponse(questions=questions, count=len(questions))
