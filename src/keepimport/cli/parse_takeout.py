"""CLI command for parsing a Keep Takeout archive, optionally persisting notes."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from keepimport.automation.import_service import DEFAULT_MAX_NOTES, KeepImportService
from keepimport.ingestion.errors import KeepImportError
from keepimport.ingestion.takeout import parse_keep_takeout
from keepimport.storage.repository import NoteRepository


def _summarize(path: Path, payload: bytes) -> dict[str, object]:
    notes = parse_keep_takeout(payload)
    return {
        "path": str(path),
        "processed": len(notes),
        "notes": [
            {
                "title": note.title,
                "content_chars": len(note.content),
                "created_at": note.created_at.isoformat() if note.created_at else None,
            }
            for note in notes
        ],
    }


def _persist(path: Path, payload: bytes, *, db_path: str, user_id: str, max_notes: int) -> dict[str, object]:
    with NoteRepository(db_path) as repository:
        result = KeepImportService(repository, max_notes=max_notes).import_takeout(payload, user_id)
    return {"path": str(path), "user_id": result.user_id, "imported": result.imported}


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Parse a Google Keep Takeout ZIP and report or store its notes")
    parser.add_argument("--path", required=True, help="Takeout ZIP archive")
    parser.add_argument("--db-path", default=None, help="SQLite database path; enables persistence")
    parser.add_argument("--user-id", default=None, help="Owner of the imported notes (required with --db-path)")
    parser.add_argument("--max-notes", type=int, default=DEFAULT_MAX_NOTES, help="Maximum notes per import")
    args = parser.parse_args(argv)

    if args.db_path and not args.user_id:
        parser.error("--user-id is required when --db-path is given")
    if args.max_notes < 1:
        parser.error("--max-notes must be >= 1")

    source_path = Path(args.path)
    try:
        payload = source_path.read_bytes()
    except OSError as exc:
        print(json.dumps({"path": str(source_path), "error": f"Failed to read archive: {exc}"}, ensure_ascii=True))
        return 1

    try:
        if args.db_path:
            report = _persist(
                source_path,
                payload,
                db_path=args.db_path,
                user_id=args.user_id,
                max_notes=args.max_notes,
            )
        else:
            report = _summarize(source_path, payload)
    except KeepImportError as exc:
        print(json.dumps({"path": str(source_path), "error": str(exc)}, ensure_ascii=True, indent=2))
        return 1

    print(json.dumps(report, ensure_ascii=True, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
