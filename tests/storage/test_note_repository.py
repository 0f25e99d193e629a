from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from keepimport.storage.repository import NoteRecord, NoteRepository


def _record(user_id: str, title: str, content: str) -> NoteRecord:
    return NoteRecord(
        user_id=user_id,
        title=title,
        content=content,
        created_at=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
    )


def test_ensure_user_creates_placeholder_once(tmp_path: Path) -> None:
    with NoteRepository(tmp_path / "notes.db") as repository:
        assert repository.user_exists("alice") is False
        assert repository.ensure_user("alice") is True
        assert repository.ensure_user("alice") is False

        row = repository.connection.execute("SELECT email, name FROM users WHERE id = ?", ("alice",)).fetchone()

    assert row["email"] == "alice@placeholder.local"
    assert row["name"] == "Imported User"


def test_ensure_user_rejects_empty_identifier(tmp_path: Path) -> None:
    with NoteRepository(tmp_path / "notes.db") as repository:
        with pytest.raises(ValueError):
            repository.ensure_user("")


def test_insert_notes_returns_count_and_preserves_order(tmp_path: Path) -> None:
    with NoteRepository(tmp_path / "notes.db") as repository:
        repository.ensure_user("bob")
        inserted = repository.insert_notes(
            [_record("bob", "First", "one"), _record("bob", "Second", "two"), _record("bob", "Third", "three")]
        )

        notes = repository.list_notes("bob", limit=2, offset=1)
        total = repository.count_notes("bob")

    assert inserted == 3
    assert total == 3
    assert [note.title for note in notes] == ["Second", "Third"]
    assert notes[0].created_at == "2024-01-02T03:04:05+00:00"


def test_insert_notes_with_no_records_is_a_no_op(tmp_path: Path) -> None:
    with NoteRepository(tmp_path / "notes.db") as repository:
        assert repository.insert_notes([]) == 0


def test_notes_are_partitioned_by_user(tmp_path: Path) -> None:
    with NoteRepository(tmp_path / "notes.db") as repository:
        repository.ensure_user("a")
        repository.ensure_user("b")
        repository.insert_notes([_record("a", "A1", "x")])
        repository.insert_notes([_record("b", "B1", "y"), _record("b", "B2", "z")])

        assert repository.count_notes("a") == 1
        assert repository.count_notes("b") == 2
        assert [note.title for note in repository.list_notes("a")] == ["A1"]


def test_insert_for_unknown_user_violates_foreign_key(tmp_path: Path) -> None:
    import sqlite3

    with NoteRepository(tmp_path / "notes.db") as repository:
        with pytest.raises(sqlite3.IntegrityError):
            repository.insert_notes([_record("ghost", "t", "c")])
        assert repository.count_notes("ghost") == 0


def test_list_notes_validates_paging(tmp_path: Path) -> None:
    with NoteRepository(tmp_path / "notes.db") as repository:
        with pytest.raises(ValueError):
            repository.list_notes("a", limit=0)
        with pytest.raises(ValueError):
            repository.list_notes("a", offset=-1)
