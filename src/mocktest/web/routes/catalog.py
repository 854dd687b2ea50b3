"""Catalog endpoints: subjects and their chapters."""

from fastapi import APIRouter, Depends, Query

from mocktest.core.exam_service import ExamService
from mocktest.web.schemas import ChapterResponse, SubjectResponse
from mocktest.web.service import get_exam_service

router = APIRouter(prefix="/api", tags=["catalog"])


@router.get("/subjects", response_model=list[SubjectResponse])
async def list_subjects(
    service: ExamService = Depends(get_exam_service),
) -> list[SubjectResponse]:
    """List all subjects."""
    return [SubjectResponse.model_validate(s) for s in await service.subjects()]


@router.get("/chapters", response_model=list[ChapterResponse])
async def list_chapters(
    subject_id: str = Query(..., min_length=1),
    service: ExamService = Depends(get_exam_service),
) -> list[ChapterResponse]:
    """List the chapters of a subject in display order."""
    return [ChapterResponse.model_validate(c) for c in await service.chapters(subject_id)]
