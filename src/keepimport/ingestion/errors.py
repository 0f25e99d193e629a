"""Domain errors raised by the Takeout import pipeline."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class KeepImportError(Exception):
    """Base error for failures that reject a whole Takeout import."""

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True)
class MalformedArchiveError(KeepImportError):
    """The uploaded buffer is not a readable zip archive."""
