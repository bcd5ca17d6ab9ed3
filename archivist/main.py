"""Archivist FastAPI application entry point.

Wires the Wayback adapter, the SQLite record store and the archive
lifecycle service together via dependency injection.  Loads configuration
from ``.env`` and ``config/config.yaml`` and configures structured logging.

``build_archive_service`` is also used by the CLI, which runs outside the
web server.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from archivist import __version__
from archivist.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from archivist.api.routes import router as api_router
from archivist.config.loader import load_config
from archivist.config.settings import Settings
from archivist.providers.archive.wayback_provider import WaybackArchiveProvider
from archivist.providers.archive_store.sqlite_archive_store import SQLiteArchiveStore
from archivist.services.archive_service import ArchiveService
from archivist.utils.logging import configure_logging, get_logger
from archivist.utils.task_executor import AsyncioTaskExecutor

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# DI assembly
# ---------------------------------------------------------------------------


def build_archive_service(
    app_settings: Settings,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    """Construct the archive store, Wayback adapter and lifecycle service.

    Returns a flat dict of named components; the web app stores them on
    ``app.state`` and the CLI uses them directly.  The store still needs
    ``await initialize()`` before first use.
    """
    archiver = WaybackArchiveProvider(
        config=app_settings.wayback_config(),
        http_client=http_client,
    )
    archive_store = SQLiteArchiveStore(db_path=app_settings.archive_db_path)
    executor = AsyncioTaskExecutor()

    archive_service = ArchiveService(
        archive_store=archive_store,
        archiver=archiver,
        executor=executor,
        capture_options=app_settings.capture_options(),
    )

    return {
        "archiver": archiver,
        "archive_store": archive_store,
        "executor": executor,
        "archive_service": archive_service,
        "provider_registry": {
            "archiver": archiver.get_provider_name(),
            "archive_store": archive_store.get_provider_name(),
            "wayback_authenticated": archiver.has_credentials(),
        },
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise the store on startup; drain jobs and close HTTP on shutdown."""
    components = build_archive_service(settings)
    components["config"] = load_config(settings=settings)

    for key, value in components.items():
        setattr(application.state, key, value)

    await components["archive_store"].initialize()

    _logger.info(
        "app_startup",
        version=__version__,
        environment=settings.app_env,
        wayback_authenticated=components["provider_registry"]["wayback_authenticated"],
        db_path=settings.archive_db_path,
    )

    yield

    executor: AsyncioTaskExecutor = components["executor"]
    await executor.drain()
    archiver: WaybackArchiveProvider = components["archiver"]
    await archiver.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="Archivist API",
        version=__version__,
        description=(
            "Request, track and retry Internet Archive captures of the "
            "articles and sources referenced by a publication."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    application.include_router(api_router)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "archivist.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
