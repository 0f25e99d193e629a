"""Text normalization helpers used during note extraction and import."""

from __future__ import annotations

import re

_WHITESPACE_RE = re.compile(r"\s+")
_LINE_ENDING_RE = re.compile(r"\r\n?")
_BLANK_RUN_RE = re.compile(r"\n{3,}")


def normalize_whitespace(text: str) -> str:
    """Collapse repeated whitespace and trim boundaries."""

    return _WHITESPACE_RE.sub(" ", text).strip()


def format_note_content(text: str) -> str:
    """Unify line endings to LF, keep at most one blank line in a row, and trim."""

    unified = _LINE_ENDING_RE.sub("\n", text)
    return _BLANK_RUN_RE.sub("\n\n", unified).strip()


def truncate(text: str, limit: int) -> str:
    """Cap text to at most ``limit`` characters."""

    if limit < 0:
        raise ValueError("limit cannot be negative")
    return text[:limit]
