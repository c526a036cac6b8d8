"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fixturepool.api.routes import health, pool
from fixturepool.config.logging import configure_logging
from fixturepool.config.settings import get_settings
from fixturepool.core.exceptions import FixturePoolError, LockTimeoutError
from fixturepool.core.pool_manager import ResourcePoolManager
from fixturepool.data.results import ResultLog

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    configure_logging()
    settings = get_settings()

    if getattr(app.state, "pool_manager", None) is None:
        app.state.pool_manager = ResourcePoolManager(settings=settings)
    if getattr(app.state, "result_log", None) is None:
        app.state.result_log = ResultLog(settings.results_path)

    log.info(
        "application_started",
        environment=app.state.pool_manager.environment,
        store=str(app.state.pool_manager.store_path),
    )

    yield

    log.info("application_stopped")


async def _lock_timeout_handler(request: Request, exc: Exception) -> JSONResponse:
    log.warning("request_lock_timeout", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=503, content={"success": False, "error": str(exc)})


async def _pool_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.error("request_failed", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})


def create_app(
    manager: ResourcePoolManager | None = None,
    result_log: ResultLog | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        manager: Pool manager to serve. Built from settings at startup if omitted.
        result_log: Result log to serve. Built from settings at startup if omitted.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Test fixture pool administration",
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.pool_manager = manager
    app.state.result_log = result_log

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(LockTimeoutError, _lock_timeout_handler)
    app.add_exception_handler(FixturePoolError, _pool_error_handler)

    app.include_router(health.router, prefix="/api")
    app.include_router(pool.router, prefix="/api")

    return app
