"""Identifier helpers.

ID conventions:
- Entity ids (subjects, chapters, questions, submissions): 24 hex chars
- Slugs: lowercase, hyphen-separated, ascii only ("physics-11th-12th")

Functions:
- new_id() -> str: Fresh random entity id
- slugify(name) -> str: Normalize a display name into a slug
- is_slug(value) -> bool: Check slug format
"""

import re
import unicodedata
import uuid

_SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def new_id() -> str:
    """Generate a new entity id."""
    return uuid.uuid4().hex[:24]


def slugify(name: str) -> str:
    """Normalize a display name into a slug.

    Examples:
        "Physics (11th & 12th)" -> "physics-11th-12th"
        "Química Orgánica" -> "quimica-organica"

    Raises:
        ValueError: If nothing usable remains after normalization
    """
    ascii_name = (
        unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    )
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_name.lower()).strip("-")
    if not slug:
        raise ValueError(f"Cannot build a slug from '{name}'")
    return slug


def is_slug(value: str) -> bool:
    """True if `value` is already a well-formed slug."""
    return bool(_SLUG_RE.match(value))
