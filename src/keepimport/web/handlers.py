"""aiohttp handlers for Takeout upload and health endpoints."""

from __future__ import annotations

from datetime import datetime, timezone
import logging

from aiohttp import web

from keepimport.automation.import_service import KeepImportService
from keepimport.ingestion.errors import KeepImportError
from keepimport.web.validators import format_size_limit, validate_upload, validate_user_id

logger = logging.getLogger(__name__)

USER_ID_HEADER = "X-User-ID"
UPLOAD_FIELD = "takeout"

IMPORT_SERVICE_KEY = web.AppKey("import_service", KeepImportService)
MAX_UPLOAD_BYTES_KEY = web.AppKey("max_upload_bytes", int)


class ConfigError(RuntimeError):
    """Raised when required application configuration is missing or invalid."""


def resolve_import_service(app: web.Application) -> KeepImportService:
    service = app.get(IMPORT_SERVICE_KEY)
    if service is None:
        raise ConfigError("Import service missing from app[IMPORT_SERVICE_KEY]")
    if not isinstance(service, KeepImportService):
        raise ConfigError("app[IMPORT_SERVICE_KEY] must be a KeepImportService")
    return service


def resolve_max_upload_bytes(app: web.Application) -> int:
    value = app.get(MAX_UPLOAD_BYTES_KEY)
    if value is None:
        raise ConfigError("max_upload_bytes missing from app[MAX_UPLOAD_BYTES_KEY]")
    return int(value)


def _error(message: str, status: int) -> web.Response:
    return web.json_response({"error": message}, status=status)


async def handle_keep_import(request: web.Request) -> web.Response:
    """Validate a multipart Takeout upload and import its notes for the caller."""

    service = resolve_import_service(request.app)
    max_upload_bytes = resolve_max_upload_bytes(request.app)

    user_check = validate_user_id(request.headers.get(USER_ID_HEADER))
    if not user_check.ok or user_check.value is None:
        return _error(f"Unauthorized: {USER_ID_HEADER} header required", 401)
    user_id = user_check.value

    try:
        form = await request.post()
    except web.HTTPRequestEntityTooLarge:
        return _error(f"File exceeds {format_size_limit(max_upload_bytes)} limit", 400)

    upload = form.get(UPLOAD_FIELD)
    if not isinstance(upload, web.FileField):
        return _error(f"Missing takeout ZIP file. Use form field name: {UPLOAD_FIELD}", 400)

    try:
        payload = upload.file.read()
    except OSError:
        logger.exception("Failed to read uploaded file %s", upload.filename)
        return _error("Failed to read uploaded file", 500)
    finally:
        upload.file.close()

    upload_check = validate_upload(upload.filename or "", len(payload), max_bytes=max_upload_bytes)
    if not upload_check.ok:
        return _error(upload_check.error or "Invalid file", 400)

    try:
        result = await service.import_takeout_async(payload, user_id)
    except KeepImportError as exc:
        logger.warning("Import rejected for user %s: %s", user_id, exc)
        return _error(str(exc), 400)

    return web.json_response(
        {
            "success": True,
            "imported": result.imported,
            "message": f"Successfully imported {result.imported} notes",
        }
    )


async def handle_health(request: web.Request) -> web.Response:
    del request
    return web.json_response({"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()})


@web.middleware
async def error_middleware(request: web.Request, handler) -> web.StreamResponse:
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Exception:
        logger.exception("Unhandled error for %s %s", request.method, request.path)
        return _error("Internal server error", 500)
