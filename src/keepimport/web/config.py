"""Runtime configuration for the import HTTP server."""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Mapping


DEFAULT_DB_PATH = ".keepimport.db"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000
DEFAULT_MAX_UPLOAD_BYTES = 200 * 1024 * 1024
DEFAULT_MAX_NOTES = 5000


def _parse_int(*, name: str, raw_value: str, minimum: int = 1, maximum: int | None = None) -> int:
    try:
        value = int(raw_value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer") from exc
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    if maximum is not None and value > maximum:
        raise ValueError(f"{name} must be <= {maximum}")
    return value


@dataclass(frozen=True, slots=True)
class ServerSettings:
    """Validated import server runtime settings."""

    db_path: Path
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    max_notes: int = DEFAULT_MAX_NOTES

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ServerSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        db_path_raw = source.get("KEEPIMPORT_DB_PATH", DEFAULT_DB_PATH).strip()
        host_raw = source.get("KEEPIMPORT_HOST", DEFAULT_HOST).strip()
        port_raw = source.get("PORT", str(DEFAULT_PORT)).strip()
        max_upload_raw = source.get("KEEPIMPORT_MAX_UPLOAD_BYTES", str(DEFAULT_MAX_UPLOAD_BYTES)).strip()
        max_notes_raw = source.get("KEEPIMPORT_MAX_NOTES", str(DEFAULT_MAX_NOTES)).strip()

        if not db_path_raw:
            raise ValueError("KEEPIMPORT_DB_PATH cannot be empty")
        if not host_raw:
            raise ValueError("KEEPIMPORT_HOST cannot be empty")
        if not port_raw:
            raise ValueError("PORT cannot be empty")
        if not max_upload_raw:
            raise ValueError("KEEPIMPORT_MAX_UPLOAD_BYTES cannot be empty")
        if not max_notes_raw:
            raise ValueError("KEEPIMPORT_MAX_NOTES cannot be empty")

        return cls(
            db_path=Path(db_path_raw),
            host=host_raw,
            port=_parse_int(name="PORT", raw_value=port_raw, minimum=1, maximum=65535),
            max_upload_bytes=_parse_int(name="KEEPIMPORT_MAX_UPLOAD_BYTES", raw_value=max_upload_raw),
            max_notes=_parse_int(name="KEEPIMPORT_MAX_NOTES", raw_value=max_notes_raw),
        )
