"""Automation services for Takeout import workflows."""

from keepimport.automation.import_service import (
    ImportRejectedError,
    ImportResult,
    KeepImportService,
    build_note_record,
)

__all__ = [
    "ImportRejectedError",
    "ImportResult",
    "KeepImportService",
    "build_note_record",
]
