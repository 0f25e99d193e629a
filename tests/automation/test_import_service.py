"""Tests for Takeout import orchestration, policy checks, and record building."""

from __future__ import annotations

from datetime import datetime, timezone
from io import BytesIO
import json
from pathlib import Path
from zipfile import ZipFile

import pytest

from keepimport.automation.import_service import (
    DEFAULT_NOTE_TITLE,
    MAX_CONTENT_LENGTH,
    MAX_TITLE_LENGTH,
    ImportRejectedError,
    KeepImportService,
    build_note_record,
)
from keepimport.ingestion.errors import KeepImportError, MalformedArchiveError
from keepimport.ingestion.models import ParsedNote
from keepimport.storage.repository import NoteRepository

IMPORTED_AT = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def _takeout_with_notes(count: int) -> bytes:
    buffer = BytesIO()
    with ZipFile(buffer, "w") as archive:
        for index in range(count):
            payload = json.dumps({"name": f"Note {index}", "text": f"body {index}"})
            archive.writestr(
                f"Takeout/Keep/note-{index}.html",
                f'<html><head><script type="application/ld+json">{payload}</script></head></html>',
            )
        archive.writestr("Takeout/Keep/Labels/ignored.html", "<p>label</p>")
    return buffer.getvalue()


def test_build_note_record_substitutes_placeholder_title() -> None:
    note = ParsedNote(title="", content="body")

    record = build_note_record(note, "u1", imported_at=IMPORTED_AT)

    assert record.title == DEFAULT_NOTE_TITLE
    assert record.created_at == IMPORTED_AT
    assert record.user_id == "u1"


def test_build_note_record_caps_fields_without_mutating_note() -> None:
    created = datetime(2020, 1, 1, tzinfo=timezone.utc)
    note = ParsedNote(title="t" * 300, content="c" * (MAX_CONTENT_LENGTH + 10), created_at=created)

    record = build_note_record(note, "u1", imported_at=IMPORTED_AT)

    assert len(record.title) == MAX_TITLE_LENGTH
    assert len(record.content) == MAX_CONTENT_LENGTH
    assert record.created_at == created
    assert len(note.title) == 300
    assert len(note.content) == MAX_CONTENT_LENGTH + 10


def test_build_note_record_normalizes_line_endings() -> None:
    note = ParsedNote(title="Lines", content="a\r\nb\r\n\r\n\r\n\r\nc")

    record = build_note_record(note, "u1", imported_at=IMPORTED_AT)

    assert record.content == "a\nb\n\nc"


def test_import_takeout_persists_notes_and_creates_user(tmp_path: Path) -> None:
    with NoteRepository(tmp_path / "notes.db") as repository:
        service = KeepImportService(repository)

        result = service.import_takeout(_takeout_with_notes(3), "carol")

        assert result.imported == 3
        assert result.user_created is True
        assert [note.title for note in repository.list_notes("carol")] == ["Note 0", "Note 1", "Note 2"]


def test_import_takeout_rejects_archive_without_notes(tmp_path: Path) -> None:
    with NoteRepository(tmp_path / "notes.db") as repository:
        service = KeepImportService(repository)

        with pytest.raises(ImportRejectedError, match="No valid Google Keep notes found") as excinfo:
            service.import_takeout(_takeout_with_notes(0), "dave")

        assert excinfo.value.note_count == 0
        # The owner is created before parsing, as in a real upload.
        assert repository.user_exists("dave")
        assert repository.count_notes("dave") == 0


def test_import_takeout_rejects_too_many_notes(tmp_path: Path) -> None:
    with NoteRepository(tmp_path / "notes.db") as repository:
        service = KeepImportService(repository, max_notes=2)

        with pytest.raises(ImportRejectedError, match="Too many notes: 3. Maximum allowed: 2") as excinfo:
            service.import_takeout(_takeout_with_notes(3), "erin")

        assert excinfo.value.note_count == 3
        assert repository.count_notes("erin") == 0


def test_import_takeout_propagates_malformed_archive(tmp_path: Path) -> None:
    with NoteRepository(tmp_path / "notes.db") as repository:
        service = KeepImportService(repository)

        with pytest.raises(MalformedArchiveError) as excinfo:
            service.import_takeout(b"garbage", "frank")

        assert isinstance(excinfo.value, KeepImportError)


def test_service_requires_positive_limit(tmp_path: Path) -> None:
    with NoteRepository(tmp_path / "notes.db") as repository:
        with pytest.raises(ValueError):
            KeepImportService(repository, max_notes=0)


@pytest.mark.asyncio
async def test_import_takeout_async_matches_sync_behaviour(tmp_path: Path) -> None:
    with NoteRepository(tmp_path / "notes.db") as repository:
        service = KeepImportService(repository)

        result = await service.import_takeout_async(_takeout_with_notes(2), "gina")

        assert result.imported == 2
        assert repository.count_notes("gina") == 2
