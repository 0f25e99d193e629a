"""Takeout import orchestration: parse, apply policy, persist."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
import logging

from keepimport.ingestion.errors import KeepImportError
from keepimport.ingestion.models import ParsedNote
from keepimport.ingestion.normalization import format_note_content, truncate
from keepimport.ingestion.takeout import parse_keep_takeout
from keepimport.storage.repository import NoteRecord, NoteRepository

logger = logging.getLogger(__name__)

DEFAULT_MAX_NOTES = 5000
MAX_TITLE_LENGTH = 255
MAX_CONTENT_LENGTH = 65535
DEFAULT_NOTE_TITLE = "Imported Keep Note"


@dataclass(slots=True)
class ImportRejectedError(KeepImportError):
    """The archive parsed, but its note count violates import policy."""

    note_count: int = 0


@dataclass(frozen=True, slots=True)
class ImportResult:
    user_id: str
    imported: int
    user_created: bool


def build_note_record(note: ParsedNote, user_id: str, *, imported_at: datetime) -> NoteRecord:
    """Derive a capped persistence record from a parsed note without mutating it."""

    title = truncate(note.title, MAX_TITLE_LENGTH) if note.title else DEFAULT_NOTE_TITLE
    content = truncate(format_note_content(note.content), MAX_CONTENT_LENGTH)
    return NoteRecord(
        user_id=user_id,
        title=title,
        content=content,
        created_at=note.created_at or imported_at,
    )


def check_note_count(notes: list[ParsedNote], *, max_notes: int) -> None:
    if not notes:
        raise ImportRejectedError("No valid Google Keep notes found in the Takeout ZIP file", note_count=0)
    if len(notes) > max_notes:
        raise ImportRejectedError(
            f"Too many notes: {len(notes)}. Maximum allowed: {max_notes}",
            note_count=len(notes),
        )


class KeepImportService:
    """Import Takeout archives into a user's note collection."""

    def __init__(self, repository: NoteRepository, *, max_notes: int = DEFAULT_MAX_NOTES) -> None:
        if max_notes < 1:
            raise ValueError("max_notes must be positive")
        self._repository = repository
        self._max_notes = max_notes

    @property
    def max_notes(self) -> int:
        return self._max_notes

    def _store(self, notes: list[ParsedNote], user_id: str, user_created: bool) -> ImportResult:
        check_note_count(notes, max_notes=self._max_notes)

        imported_at = datetime.now(timezone.utc)
        records = [build_note_record(note, user_id, imported_at=imported_at) for note in notes]
        imported = self._repository.insert_notes(records)
        logger.info("Imported %s Keep notes for user %s", imported, user_id)
        return ImportResult(user_id=user_id, imported=imported, user_created=user_created)

    def import_takeout(self, payload: bytes, user_id: str) -> ImportResult:
        """Synchronous import used by the CLI."""

        user_created = self._repository.ensure_user(user_id)
        notes = parse_keep_takeout(payload)
        return self._store(notes, user_id, user_created)

    async def import_takeout_async(self, payload: bytes, user_id: str) -> ImportResult:
        """Import with archive parsing offloaded to a worker thread.

        Repository calls stay on the calling thread, which owns the SQLite
        connection.
        """

        user_created = self._repository.ensure_user(user_id)
        notes = await asyncio.to_thread(parse_keep_takeout, payload)
        return self._store(notes, user_id, user_created)
