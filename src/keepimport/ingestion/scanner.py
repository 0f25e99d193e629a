"""Zip scanner that selects Google Keep note documents from a Takeout export."""

from __future__ import annotations

from collections.abc import Iterator
from io import BytesIO
import logging
from zipfile import BadZipFile, LargeZipFile, ZipFile, ZipInfo
import zlib

from keepimport.ingestion.errors import MalformedArchiveError
from keepimport.ingestion.models import CandidateEntry

logger = logging.getLogger(__name__)

NOTE_TEXT_ENCODING = "utf-8"

# Member-level failures: bad CRC, truncated deflate stream, unsupported compression,
# encrypted members (RuntimeError) and corrupt header offsets (ValueError).
_ENTRY_READ_ERRORS = (
    BadZipFile,
    LargeZipFile,
    zlib.error,
    NotImplementedError,
    EOFError,
    OSError,
    RuntimeError,
    ValueError,
)

# Central-directory failures; UnicodeDecodeError is a ValueError subclass.
_ARCHIVE_OPEN_ERRORS = (BadZipFile, LargeZipFile, NotImplementedError, ValueError, EOFError, OSError)


def is_keep_note_path(path: str) -> bool:
    """Return True for Keep note documents, excluding the labels sub-tree.

    This is a plain substring check, so a folder such as ``Keepsakes/`` or a
    note named ``labelled.html`` is classified by the same rule.
    """

    lowered = path.lower()
    return "keep" in lowered and lowered.endswith(".html") and "label" not in lowered


def _open_archive(payload: bytes) -> ZipFile:
    if not payload:
        raise MalformedArchiveError("Uploaded archive is empty")
    try:
        return ZipFile(BytesIO(payload), "r")
    except _ARCHIVE_OPEN_ERRORS as exc:
        raise MalformedArchiveError(f"Uploaded file is not a valid ZIP archive: {exc}") from exc


def _read_entry(archive: ZipFile, info: ZipInfo) -> str | None:
    try:
        raw = archive.read(info)
    except _ENTRY_READ_ERRORS as exc:
        logger.warning("Skipping unreadable archive entry %s: %s", info.filename, exc)
        return None

    try:
        return raw.decode(NOTE_TEXT_ENCODING)
    except UnicodeDecodeError as exc:
        logger.warning("Skipping archive entry %s: not valid %s (%s)", info.filename, NOTE_TEXT_ENCODING, exc)
        return None


def _iter_candidates(archive: ZipFile) -> Iterator[CandidateEntry]:
    with archive:
        for info in archive.infolist():
            if info.is_dir() or not is_keep_note_path(info.filename):
                continue
            text = _read_entry(archive, info)
            if text is None:
                continue
            yield CandidateEntry(path=info.filename, text=text)


def scan_archive(payload: bytes) -> Iterator[CandidateEntry]:
    """Open ``payload`` as a zip archive and yield decoded note candidates.

    The archive is opened before returning, so a malformed buffer raises
    :class:`MalformedArchiveError` immediately. The returned iterator walks the
    member list once, in archive order.
    """

    archive = _open_archive(payload)
    return _iter_candidates(archive)
