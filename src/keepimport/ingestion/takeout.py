"""Archive-to-note pipeline for Google Keep Takeout exports."""

from __future__ import annotations

import logging

from keepimport.ingestion.extractor import extract_note
from keepimport.ingestion.models import ParsedNote
from keepimport.ingestion.scanner import scan_archive

logger = logging.getLogger(__name__)


def parse_keep_takeout(payload: bytes) -> list[ParsedNote]:
    """Return every note recoverable from a Takeout zip, in archive order.

    Raises :class:`~keepimport.ingestion.errors.MalformedArchiveError` when the
    buffer is not a zip. A single entry that fails to parse is logged and
    skipped; documents without usable content are dropped silently.
    """

    notes: list[ParsedNote] = []
    skipped = 0

    for candidate in scan_archive(payload):
        try:
            note = extract_note(candidate.text)
        except Exception:
            skipped += 1
            logger.warning("Failed to parse entry: %s", candidate.path, exc_info=True)
            continue

        if note is not None and note.content.strip():
            notes.append(note)

    logger.info("Parsed %s notes from Takeout archive (%s entries failed)", len(notes), skipped)
    return notes
