"""Exam composition.

Turns an exam request into a shuffled paper:
- single subject: one large sample from one subject
- stream: one smaller sample per subject of the stream
- chapter practice: one sample restricted to a chapter

Samples are concatenated and shuffled once, after every per-subject draw
has completed. Callers must not rely on any other ordering.
"""

from __future__ import annotations

import asyncio
import random
from typing import Iterable, MutableSequence, TypeVar

import structlog

from mocktest.config.app_config import EngineConfig
from mocktest.core.exam_request import (
    ChapterPracticeRequest,
    ExamRequest,
    SingleSubjectRequest,
    StreamRequest,
)
from mocktest.core.models import Chapter, Question, Subject
from mocktest.core.repositories import CatalogRepository
from mocktest.core.sampler import AntiRepeatSampler

logger = structlog.get_logger(__name__)

T = TypeVar("T")


# =============================================================================
# ERRORS
# =============================================================================


class ExamCompositionError(Exception):
    """Catalog misconfiguration detected while composing an exam."""

    pass


class SubjectNotFoundError(ExamCompositionError):
    """Raised when a subject slug does not resolve."""

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"Subject not found: {slug}")


class ChapterNotFoundError(ExamCompositionError):
    """Raised when a chapter id does not resolve within its subject."""

    def __init__(self, chapter_id: str):
        self.chapter_id = chapter_id
        super().__init__(f"Chapter not found: {chapter_id}")


class InvalidStreamError(ExamCompositionError):
    """Raised when a stream name is not configured."""

    def __init__(self, stream: str, known: Iterable[str]):
        self.stream = stream
        self.known = sorted(known)
        super().__init__(
            f"Invalid stream '{stream}'. Expected one of: {', '.join(self.known)}"
        )


class SubjectsIncompleteError(ExamCompositionError):
    """Raised when some subjects of a stream are missing from the catalog."""

    def __init__(self, stream: str, missing: list[str]):
        self.stream = stream
        self.missing = missing
        super().__init__(
            f"One or more subjects for stream '{stream}' not found: {', '.join(missing)}"
        )


# =============================================================================
# SHUFFLE
# =============================================================================


def fisher_yates_shuffle(items: MutableSequence[T], rng: random.Random | None = None) -> None:
    """Shuffle in place; every permutation is equally likely."""
    rng = rng or random.Random()
    for i in range(len(items) - 1, 0, -1):
        j = rng.randint(0, i)
        items[i], items[j] = items[j], items[i]


# =============================================================================
# COMPOSER
# =============================================================================


class ExamComposer:
    """Builds exam papers from the catalog and the sampler."""

    def __init__(
        self,
        catalog: CatalogRepository,
        sampler: AntiRepeatSampler,
        config: EngineConfig,
        rng: random.Random | None = None,
    ):
        self._catalog = catalog
        self._sampler = sampler
        self._config = config
        self._rng = rng or random.Random()

    async def compose(
        self, request: ExamRequest, exclude_ids: Iterable[str] = ()
    ) -> list[Question]:
        """Assemble the paper for `request`.

        Args:
            request: One of the ExamRequest variants
            exclude_ids: The learner's full seen-set

        Returns:
            Shuffled list of questions, each with its SubjectRef

        Raises:
            SubjectNotFoundError, ChapterNotFoundError, InvalidStreamError,
            SubjectsIncompleteError: catalog misconfiguration
        """
        excluded = frozenset(exclude_ids)

        if isinstance(request, StreamRequest):
            subjects = await self._resolve_stream(request.name)
            count = self._config.stream_subject_count
            chapter_id = None
        elif isinstance(request, ChapterPracticeRequest):
            subject = await self._resolve_subject(request.subject_slug)
            chapter = await self._resolve_chapter(subject, request.chapter_id)
            subjects = [subject]
            count = self._config.chapter_practice_count
            chapter_id = chapter.id
        elif isinstance(request, SingleSubjectRequest):
            subjects = [await self._resolve_subject(request.slug)]
            count = self._config.single_subject_count
            chapter_id = None
        else:
            raise TypeError(f"Unsupported exam request: {request!r}")

        samples = await asyncio.gather(
            *(
                self._sampler.sample(
                    subject,
                    count,
                    excluded,
                    difficulty=request.difficulty,
                    chapter_id=chapter_id,
                )
                for subject in subjects
            )
        )

        paper: list[Question] = [q for sample in samples for q in sample]
        fisher_yates_shuffle(paper, self._rng)

        logger.info(
            "exam.composed",
            mode=type(request).__name__,
            subjects=[s.slug for s in subjects],
            per_subject=count,
            total=len(paper),
        )
        return paper

    async def _resolve_subject(self, slug: str) -> Subject:
        subject = await self._catalog.get_subject_by_slug(slug)
        if subject is None:
            raise SubjectNotFoundError(slug)
        return subject

    async def _resolve_stream(self, stream: str) -> list[Subject]:
        slugs = self._config.stream_subjects(stream)
        if slugs is None:
            raise InvalidStreamError(stream, self._config.streams.keys())

        found = {s.slug: s for s in await self._catalog.get_subjects_by_slugs(slugs)}
        missing = [slug for slug in slugs if slug not in found]
        if missing:
            logger.error("exam.stream_incomplete", stream=stream, missing=missing)
            raise SubjectsIncompleteError(stream, missing)

        # Keep the configured subject order
        return [found[slug] for slug in slugs]

    async def _resolve_chapter(self, subject: Subject, chapter_ref: str) -> Chapter:
        """Resolve a chapter id, or a chapter slug within `subject`."""
        chapter = await self._catalog.get_chapter(chapter_ref)
        if chapter is not None and chapter.subject_id == subject.id:
            return chapter

        for candidate in await self._catalog.list_chapters(subject.id):
            if candidate.slug == chapter_ref:
                return candidate
        raise ChapterNotFoundError(chapter_ref)
