"""Canonical data structures shared by the Takeout scanner and note extractor."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class CandidateEntry:
    """Archive member that passed the note path filter, decoded as text."""

    path: str
    text: str


@dataclass(frozen=True, slots=True)
class ParsedNote:
    """Normalized note recovered from one Keep HTML document.

    Instances are never built with empty content; the extractor returns
    ``None`` instead. Persistence-side capping builds a separate record.
    """

    title: str
    content: str
    created_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class StructuredSource:
    """Decoded JSON-LD payload describing the note."""

    data: Any


@dataclass(frozen=True, slots=True)
class MarkupSource:
    """Parsed HTML tree used when no usable JSON-LD block exists."""

    soup: Any


NoteSource = StructuredSource | MarkupSource
