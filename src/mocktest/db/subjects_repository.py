"""Repository functions for subjects and chapters.

Provides create and lookup operations for the catalog tables.
"""

from __future__ import annotations

import sqlite3
from typing import Iterable

import structlog

from mocktest.core.models import Chapter, Subject
from mocktest.db.database import get_db

logger = structlog.get_logger(__name__)


def insert_subject(
    subject_id: str,
    name: str,
    slug: str,
    description: str = "",
    streams: Iterable[str] = (),
) -> Subject:
    """Insert a new subject.

    Args:
        subject_id: Entity id
        name: Display name (unique)
        slug: URL slug (unique)
        description: Free text
        streams: Stream names this subject belongs to

    Raises:
        sqlite3.IntegrityError: If name or slug already exists
    """
    streams = list(dict.fromkeys(streams))
    with get_db() as conn:
        conn.execute(
            "INSERT INTO subjects (subject_id, name, slug, description) VALUES (?, ?, ?, ?)",
            (subject_id, name, slug, description),
        )
        conn.executemany(
            "INSERT INTO subject_streams (subject_id, stream) VALUES (?, ?)",
            [(subject_id, stream) for stream in streams],
        )

    logger.debug("subjects.inserted", subject_id=subject_id, slug=slug)
    return Subject(id=subject_id, name=name, slug=slug, description=description, streams=streams)


def get_subject_by_slug(slug: str) -> Subject | None:
    """Get subject by slug.

    Returns:
        Subject if found, None otherwise
    """
    with get_db() as conn:
        row = conn.execute("SELECT * FROM subjects WHERE slug = ?", (slug,)).fetchone()
        if row is None:
            return None
        return _row_to_subject(conn, row)


def get_subject_by_id(subject_id: str) -> Subject | None:
    """Get subject by id."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM subjects WHERE subject_id = ?", (subject_id,)
        ).fetchone()
        if row is None:
            return None
        return _row_to_subject(conn, row)


def get_subjects_by_slugs(slugs: Iterable[str]) -> list[Subject]:
    """Get every subject whose slug is in `slugs`. Unknown slugs are omitted."""
    slugs = list(slugs)
    if not slugs:
        return []
    placeholders = ", ".join("?" for _ in slugs)
    with get_db() as conn:
        rows = conn.execute(
            f"SELECT * FROM subjects WHERE slug IN ({placeholders}) ORDER BY name",
            slugs,
        ).fetchall()
        return [_row_to_subject(conn, row) for row in rows]


def list_subjects() -> list[Subject]:
    """Get all subjects ordered by name."""
    with get_db() as conn:
        rows = conn.execute("SELECT * FROM subjects ORDER BY name").fetchall()
        return [_row_to_subject(conn, row) for row in rows]


def insert_chapter(
    chapter_id: str,
    subject_id: str,
    name: str,
    slug: str,
    order: int = 0,
) -> Chapter:
    """Insert a chapter.

    Raises:
        sqlite3.IntegrityError: If the slug already exists in the subject
            or the subject does not exist
    """
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO chapters (chapter_id, subject_id, name, slug, sort_order)
            VALUES (?, ?, ?, ?, ?)
            """,
            (chapter_id, subject_id, name, slug, order),
        )

    logger.debug("chapters.inserted", chapter_id=chapter_id, subject_id=subject_id)
    return Chapter(id=chapter_id, subject_id=subject_id, name=name, slug=slug, order=order)


def get_chapter(chapter_id: str) -> Chapter | None:
    """Get chapter by id."""
    with get_db() as conn:
        row = conn.execute(
            "SELECT * FROM chapters WHERE chapter_id = ?", (chapter_id,)
        ).fetchone()

    if row is None:
        return None
    return _row_to_chapter(row)


def list_chapters(subject_id: str) -> list[Chapter]:
    """Get chapters of a subject by display order, then name."""
    with get_db() as conn:
        rows = conn.execute(
            "SELECT * FROM chapters WHERE subject_id = ? ORDER BY sort_order, name",
            (subject_id,),
        ).fetchall()
    return [_row_to_chapter(row) for row in rows]


def _row_to_subject(conn: sqlite3.Connection, row) -> Subject:
    """Convert database row to Subject, loading its streams."""
    streams = [
        r["stream"]
        for r in conn.execute(
            "SELECT stream FROM subject_streams WHERE subject_id = ? ORDER BY stream",
            (row["subject_id"],),
        ).fetchall()
    ]
    return Subject(
        id=row["subject_id"],
        name=row["name"],
        slug=row["slug"],
        description=row["description"] or "",
        streams=streams,
    )


def _row_to_chapter(row) -> Chapter:
    """Convert database row to Chapter."""
    return Chapter(
        id=row["chapter_id"],
        subject_id=row["subject_id"],
        name=row["name"],
        slug=row["slug"],
        order=row["sort_order"],
    )
