"""SQLite persistence for imported notes."""

from keepimport.storage.repository import NoteRecord, NoteRepository, StoredNote

__all__ = ["NoteRecord", "NoteRepository", "StoredNote"]
