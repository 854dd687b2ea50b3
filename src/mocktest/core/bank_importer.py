"""Question bank import.

Responsibilities:
- Parse a YAML (or JSON) bank file describing subjects, chapters and
  questions
- Validate every question (4 options, correct index, difficulty)
- Register subjects/chapters that don't exist yet, reuse those that do
- Insert questions with fresh ids and zeroed statistics, skipping those
  whose text already exists in the same subject/chapter
- Report bad subjects, chapters and questions as warnings

Bank file structure:

    subjects:
      - name: Physics
        slug: physics            # optional, derived from name
        streams: [PCM, PCB]
        chapters:
          - name: Mechanics
            questions: [...]
        questions: [...]         # questions without a chapter

    question:
      text: "..."
      options: [a, b, c, d]
      correct_option: 0
      difficulty: easy | medium | hard
      explanation: "..."
"""

from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

from mocktest.core.models import Chapter, Question, Subject
from mocktest.db import questions_repository, subjects_repository
from mocktest.utils.validators import is_slug, new_id, slugify

logger = structlog.get_logger(__name__)


@dataclass
class BankImportResult:
    """Result of a bank import."""

    success: bool
    message: str
    subjects_created: int = 0
    chapters_created: int = 0
    questions_created: int = 0
    questions_existing: int = 0
    warnings: list[str] = field(default_factory=list)


class BankImportError(Exception):
    """Raised when the bank file cannot be read or is malformed."""

    pass


def load_bank_file(path: Path) -> dict[str, Any]:
    """Read a bank file (YAML or JSON).

    Raises:
        BankImportError: If the file is missing or unparseable
    """
    if not path.exists():
        raise BankImportError(f"Bank file not found: {path}")

    try:
        text = path.read_text(encoding="utf-8")
        data = json.loads(text) if path.suffix == ".json" else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError, OSError) as e:
        raise BankImportError(f"Cannot read bank file {path}: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("subjects"), list):
        raise BankImportError(f"Bank file {path} must define a 'subjects' list")
    return data


def _build_question(raw: dict[str, Any], subject_id: str, chapter_id: str | None) -> Question:
    return Question(
        id=new_id(),
        subject_id=subject_id,
        chapter_id=chapter_id,
        text=str(raw["text"]).strip(),
        options=[str(o) for o in raw["options"]],
        correct_option=int(raw["correct_option"]),
        difficulty=raw.get("difficulty", "medium"),
        explanation=raw.get("explanation"),
    )


def _slug_for(raw: dict[str, Any]) -> str:
    slug = raw.get("slug") or slugify(raw["name"])
    if not is_slug(slug):
        raise ValueError(f"Invalid slug '{slug}'")
    return slug


def _ensure_subject(raw: dict[str, Any], result: BankImportResult) -> Subject:
    """Reuse the subject with this slug, or register it.

    Raises:
        ValueError: If no valid slug can be derived
        sqlite3.IntegrityError: If the name belongs to another subject
    """
    slug = _slug_for(raw)
    existing = subjects_repository.get_subject_by_slug(slug)
    if existing is not None:
        return existing

    subject = subjects_repository.insert_subject(
        subject_id=new_id(),
        name=raw["name"],
        slug=slug,
        description=raw.get("description", ""),
        streams=raw.get("streams") or [],
    )
    result.subjects_created += 1
    return subject


def _ensure_chapter(
    subject: Subject, raw: dict[str, Any], order: int, result: BankImportResult
) -> Chapter:
    slug = _slug_for(raw)
    for chapter in subjects_repository.list_chapters(subject.id):
        if chapter.slug == slug:
            return chapter

    chapter = subjects_repository.insert_chapter(
        chapter_id=new_id(),
        subject_id=subject.id,
        name=raw["name"],
        slug=slug,
        order=raw.get("order", order),
    )
    result.chapters_created += 1
    return chapter


def _import_questions(
    raws: list[dict[str, Any]],
    subject: Subject,
    chapter: Chapter | None,
    result: BankImportResult,
) -> None:
    chapter_id = chapter.id if chapter else None
    for index, raw in enumerate(raws or []):
        where = f"{subject.slug}{'/' + chapter.slug if chapter else ''}#{index + 1}"
        try:
            question = _build_question(raw, subject.id, chapter_id)
        except (KeyError, TypeError, ValueError) as e:
            result.warnings.append(f"Skipped question {where}: {e}")
            logger.warning("bank_import.question_skipped", location=where, error=str(e))
            continue

        # Same text in the same subject/chapter is the same question
        if questions_repository.find_question_id(subject.id, chapter_id, question.text):
            result.questions_existing += 1
            continue

        questions_repository.insert_question(question)
        result.questions_created += 1


def _skip_entry(result: BankImportResult, kind: str, name: Any, error: Exception) -> None:
    result.warnings.append(f"Skipped {kind} {name!r}: {error}")
    logger.warning("bank_import.entry_skipped", kind=kind, name=str(name), error=str(error))


def import_bank(path: Path) -> BankImportResult:
    """Import a question bank file into the current database.

    The database must already be initialized (see `init_db`). Importing
    the same file again adds nothing: subjects and chapters are matched by
    slug, questions by text within their subject and chapter.

    Args:
        path: Path to the YAML/JSON bank file

    Returns:
        BankImportResult with counts and per-entry warnings

    Raises:
        BankImportError: If the file cannot be read
    """
    data = load_bank_file(path)
    result = BankImportResult(success=True, message="")

    for raw_subject in data["subjects"]:
        if not isinstance(raw_subject, dict) or "name" not in raw_subject:
            result.warnings.append(f"Skipped subject entry without a name: {raw_subject!r}")
            continue

        try:
            subject = _ensure_subject(raw_subject, result)
        except (sqlite3.IntegrityError, ValueError) as e:
            _skip_entry(result, "subject", raw_subject["name"], e)
            continue

        _import_questions(raw_subject.get("questions") or [], subject, None, result)

        for order, raw_chapter in enumerate(raw_subject.get("chapters") or []):
            if not isinstance(raw_chapter, dict) or "name" not in raw_chapter:
                result.warnings.append(f"Skipped chapter without a name in {subject.slug}")
                continue
            try:
                chapter = _ensure_chapter(subject, raw_chapter, order, result)
            except (sqlite3.IntegrityError, ValueError) as e:
                _skip_entry(result, "chapter", f"{subject.slug}/{raw_chapter['name']}", e)
                continue
            _import_questions(raw_chapter.get("questions") or [], subject, chapter, result)

    result.message = (
        f"Imported {result.questions_created} questions "
        f"({result.subjects_created} new subjects, {result.chapters_created} new chapters, "
        f"{result.questions_existing} already present)"
    )
    logger.info(
        "bank_imported",
        source=str(path),
        subjects=result.subjects_created,
        chapters=result.chapters_created,
        questions=result.questions_created,
        existing=result.questions_existing,
        warnings=len(result.warnings),
    )
    return result
