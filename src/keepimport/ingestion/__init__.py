"""Ingestion package interfaces."""

from .errors import KeepImportError, MalformedArchiveError
from .extractor import extract_note, parse_timestamp
from .models import CandidateEntry, ParsedNote
from .normalization import format_note_content
from .scanner import is_keep_note_path, scan_archive
from .takeout import parse_keep_takeout

__all__ = [
    "CandidateEntry",
    "KeepImportError",
    "MalformedArchiveError",
    "ParsedNote",
    "extract_note",
    "format_note_content",
    "is_keep_note_path",
    "parse_keep_takeout",
    "parse_timestamp",
    "scan_archive",
]
