"""Exam request variants.

An exam request names exactly one assembly mode. The HTTP and CLI
boundaries parse loose input into one of these before it reaches the
gate or the composer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from mocktest.core.models import DIFFICULTIES

ALL_DIFFICULTIES = "all"


def normalize_difficulty(value: str | None) -> str | None:
    """Map "all"/None to None, validate everything else.

    Raises:
        ValueError: If the difficulty is not one of all/easy/medium/hard.
    """
    if value is None or value == ALL_DIFFICULTIES:
        return None
    if value not in DIFFICULTIES:
        raise ValueError(f"Unknown difficulty: {value}")
    return value


@dataclass(frozen=True)
class SingleSubjectRequest:
    """Full mock paper for one subject."""

    slug: str
    difficulty: str | None = None

    premium_only = False


@dataclass(frozen=True)
class StreamRequest:
    """Combined paper over the fixed subjects of a stream."""

    name: str
    difficulty: str | None = None

    premium_only = False


@dataclass(frozen=True)
class ChapterPracticeRequest:
    """Practice set restricted to one chapter. Premium only."""

    subject_slug: str
    chapter_id: str
    difficulty: str | None = None

    premium_only = True


ExamRequest = Union[SingleSubjectRequest, StreamRequest, ChapterPracticeRequest]


def build_exam_request(
    subject: str | None = None,
    stream: str | None = None,
    chapter_id: str | None = None,
    difficulty: str | None = None,
) -> ExamRequest:
    """Build the request variant from loose optional fields.

    Args:
        subject: Subject slug (single-subject or chapter practice)
        stream: Stream name (multi-subject mode)
        chapter_id: Chapter id or slug, requires `subject`
        difficulty: all | easy | medium | hard

    Raises:
        ValueError: If the combination of fields names no mode or several.
    """
    level = normalize_difficulty(difficulty)

    if stream and (subject or chapter_id):
        raise ValueError("Provide either a stream or a subject, not both")
    if stream:
        return StreamRequest(name=stream, difficulty=level)
    if chapter_id:
        if not subject:
            raise ValueError("Chapter practice requires a subject")
        return ChapterPracticeRequest(
            subject_slug=subject, chapter_id=chapter_id, difficulty=level
        )
    if subject:
        return SingleSubjectRequest(slug=subject, difficulty=level)
    raise ValueError("Valid stream or subject is required")
