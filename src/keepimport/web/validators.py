"""Request-level validation for the Takeout upload endpoint."""

from __future__ import annotations

from dataclasses import dataclass

MAX_USER_ID_LENGTH = 255
_MIB = 1024 * 1024


@dataclass(frozen=True, slots=True)
class ValidationResult:
    ok: bool
    value: str | None = None
    error: str | None = None


def format_size_limit(max_bytes: int) -> str:
    if max_bytes % _MIB == 0:
        return f"{max_bytes // _MIB}MB"
    return f"{max_bytes} byte"


def validate_user_id(raw: str | None) -> ValidationResult:
    user_id = (raw or "").strip()
    if not user_id:
        return ValidationResult(ok=False, error="User ID is required")
    if len(user_id) > MAX_USER_ID_LENGTH:
        return ValidationResult(ok=False, error="User ID too long")
    return ValidationResult(ok=True, value=user_id)


def validate_upload(file_name: str, size: int, *, max_bytes: int) -> ValidationResult:
    """Check upload name and size; both size bounds are inclusive."""

    if not file_name.lower().endswith(".zip"):
        return ValidationResult(ok=False, error="File must be a .zip file")
    if size < 1:
        return ValidationResult(ok=False, error="File is empty")
    if size > max_bytes:
        return ValidationResult(ok=False, error=f"File exceeds {format_size_limit(max_bytes)} limit")
    return ValidationResult(ok=True, value=file_name)
