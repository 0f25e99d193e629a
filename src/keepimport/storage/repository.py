"""Repository primitives for users and imported notes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
import sqlite3

from keepimport.storage.schema import apply_runtime_pragmas, ensure_schema


PLACEHOLDER_EMAIL_DOMAIN = "placeholder.local"
PLACEHOLDER_USER_NAME = "Imported User"


@dataclass(frozen=True, slots=True)
class NoteRecord:
    """Persistence-ready note, already capped and defaulted."""

    user_id: str
    title: str
    content: str
    created_at: datetime


@dataclass(slots=True)
class StoredNote:
    id: int
    user_id: str
    title: str
    content: str
    created_at: str


class NoteRepository:
    """SQLite-backed storage facade for users and their notes."""

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path)
        self._connection = sqlite3.connect(str(self._db_path))
        self._connection.row_factory = sqlite3.Row
        apply_runtime_pragmas(self._connection)
        ensure_schema(self._connection)

    @property
    def connection(self) -> sqlite3.Connection:
        return self._connection

    def close(self) -> None:
        self._connection.close()

    def __enter__(self) -> "NoteRepository":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def user_exists(self, user_id: str) -> bool:
        row = self._connection.execute("SELECT 1 FROM users WHERE id = ?", (user_id,)).fetchone()
        return row is not None

    def ensure_user(self, user_id: str) -> bool:
        """Create a placeholder user when missing. Returns True if one was created."""

        if not user_id:
            raise ValueError("user_id cannot be empty")

        with self._connection:
            cursor = self._connection.execute(
                """
                INSERT INTO users (id, email, name)
                VALUES (?, ?, ?)
                ON CONFLICT(id) DO NOTHING
                """,
                (user_id, f"{user_id}@{PLACEHOLDER_EMAIL_DOMAIN}", PLACEHOLDER_USER_NAME),
            )
        return cursor.rowcount == 1

    def insert_notes(self, records: list[NoteRecord]) -> int:
        """Insert all records in one transaction and return the inserted count."""

        if not records:
            return 0

        with self._connection:
            cursor = self._connection.executemany(
                """
                INSERT INTO notes (user_id, title, content, created_at)
                VALUES (?, ?, ?, ?)
                """,
                [
                    (record.user_id, record.title, record.content, record.created_at.isoformat())
                    for record in records
                ],
            )
        return int(cursor.rowcount)

    def count_notes(self, user_id: str) -> int:
        row = self._connection.execute(
            "SELECT COUNT(*) AS c FROM notes WHERE user_id = ?",
            (user_id,),
        ).fetchone()
        return int(row["c"])

    def list_notes(self, user_id: str, *, limit: int = 50, offset: int = 0) -> list[StoredNote]:
        if limit <= 0:
            raise ValueError("limit must be positive")
        if offset < 0:
            raise ValueError("offset cannot be negative")

        rows = self._connection.execute(
            """
            SELECT id, user_id, title, content, created_at
            FROM notes
            WHERE user_id = ?
            ORDER BY id ASC
            LIMIT ? OFFSET ?
            """,
            (user_id, limit, offset),
        ).fetchall()
        return [
            StoredNote(
                id=int(row["id"]),
                user_id=row["user_id"],
                title=row["title"],
                content=row["content"],
                created_at=row["created_at"],
            )
            for row in rows
        ]
