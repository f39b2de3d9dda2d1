from __future__ import annotations

import re

from unidecode import unidecode

MAX_PROJECT_NAME_LEN = 30
MIN_SLUG_LEN = 5

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9-]+")
_REPEATED_HYPHENS = re.compile(r"-{2,}")


def to_slug(value: str, max_len: int = 0) -> str:
    """Lower-case ASCII slug, transliterating non-Latin scripts."""

    ascii_only = unidecode(value).lower()
    slug = _NON_SLUG_CHARS.sub("-", ascii_only)
    slug = _REPEATED_HYPHENS.sub("-", slug).strip("-")
    if max_len > 0 and len(slug) > max_len:
        slug = slug[:max_len].rstrip("-")
    return slug


def generate_project_name(user_id: str, title: str) -> str:
    """Build the collaborative project name for a workspace owned by ``user_id``."""

    user_part = user_id[: MAX_PROJECT_NAME_LEN // 2]
    max_slug_len = max(MAX_PROJECT_NAME_LEN - len(user_part) - 1, MIN_SLUG_LEN)
    slug = to_slug(title, max_slug_len)
    return f"{user_part}-{slug}" if slug else user_part
