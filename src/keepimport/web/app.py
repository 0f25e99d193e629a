"""Production HTTP entrypoint with route registration and graceful shutdown."""

from __future__ import annotations

import asyncio
import logging
import sys

from aiohttp import web
from dotenv import load_dotenv

load_dotenv()

from keepimport.automation.import_service import KeepImportService
from keepimport.storage.repository import NoteRepository
from keepimport.web.config import ServerSettings
from keepimport.web.handlers import (
    IMPORT_SERVICE_KEY,
    MAX_UPLOAD_BYTES_KEY,
    error_middleware,
    handle_health,
    handle_keep_import,
)


logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)

# Room for multipart boundaries and headers on top of the file itself.
MULTIPART_OVERHEAD_BYTES = 1024 * 1024

REPOSITORY_KEY = web.AppKey("repository", NoteRepository)


async def _close_repository(app: web.Application) -> None:
    repository = app.get(REPOSITORY_KEY)
    if isinstance(repository, NoteRepository):
        repository.close()
        logger.info("Note repository closed.")


def build_application(settings: ServerSettings, repository: NoteRepository | None = None) -> web.Application:
    """Build the aiohttp application with its routes and shared dependencies."""
    repository = repository or NoteRepository(settings.db_path)

    app = web.Application(
        client_max_size=settings.max_upload_bytes + MULTIPART_OVERHEAD_BYTES,
        middlewares=[error_middleware],
    )

    # Store shared dependencies on the app
    app[REPOSITORY_KEY] = repository
    app[IMPORT_SERVICE_KEY] = KeepImportService(repository, max_notes=settings.max_notes)
    app[MAX_UPLOAD_BYTES_KEY] = settings.max_upload_bytes

    app.router.add_post("/api/keep-import", handle_keep_import)
    app.router.add_get("/api/health", handle_health)

    app.on_cleanup.append(_close_repository)

    logger.info("Registered routes: POST /api/keep-import, GET /api/health")
    return app


async def run_server(settings: ServerSettings) -> None:
    """Serve until interrupted, then shut down cleanly."""
    app = build_application(settings)
    runner = web.AppRunner(app)
    await runner.setup()

    site = web.TCPSite(runner, host=settings.host, port=settings.port)
    await site.start()
    logger.info("Server running on http://%s:%s", settings.host, settings.port)

    try:
        await asyncio.Event().wait()
    except (KeyboardInterrupt, SystemExit, asyncio.CancelledError):
        logger.info("Received stop signal. Shutting down...")
    finally:
        await runner.cleanup()
        logger.info("Server closed.")


def main() -> None:
    """Main entrypoint for the import server."""
    try:
        settings = ServerSettings.from_env()
        logger.info(
            "Loaded server config: db=%s, port=%s, max_upload=%s bytes, max_notes=%s",
            settings.db_path,
            settings.port,
            settings.max_upload_bytes,
            settings.max_notes,
        )
    except ValueError as e:
        logger.error("Configuration error: %s", e)
        sys.exit(1)

    try:
        asyncio.run(run_server(settings))
    except KeyboardInterrupt:
        logger.info("Server interrupted by user.")
        sys.exit(0)


if __name__ == "__main__":
    main()
