"""
FastAPI application factory.

``create_app()`` wires middleware, routers, error handlers, and the
lifespan into a single ``FastAPI`` instance. The app owns exactly one
:class:`~taskbatch.service.BatchService`; the lifespan shuts its pool down
once when the server stops.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskbatch.api.errors import taskbatch_error_handler, unhandled_exception_handler
from taskbatch.api.middleware import RequestIDMiddleware, TimingMiddleware
from taskbatch.core.errors import TaskBatchError
from taskbatch.core.health import HealthCheck, create_health_router
from taskbatch.core.logging import configure_logging, get_logger
from taskbatch.core.settings import TaskBatchSettings, get_settings
from taskbatch.service import BatchService

ENDPOINTS = (
    "create-files-with-service-and-download",
    "create-files-with-failure-and-download",
    "future-demo",
    "latch-demo",
    "system-info",
    "health",
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup / shutdown hooks."""
    log = get_logger("taskbatch.api")
    settings: TaskBatchSettings = app.state.settings
    service: BatchService = app.state.service

    log.info(
        "api.starting",
        version=app.version,
        pool_size=service.pool.max_workers,
        endpoints=[f"GET {settings.api_prefix}/{name}" for name in ENDPOINTS],
    )

    yield

    log.info("api.shutting_down")
    service.shutdown()
    log.info("api.shutdown_complete")


def create_app(
    *,
    settings: TaskBatchSettings | None = None,
    service: BatchService | None = None,
    configure_logs: bool = True,
) -> FastAPI:
    """Build and return a fully-configured FastAPI application.

    Parameters
    ----------
    settings : TaskBatchSettings | None
        Override settings (useful for testing). When ``None`` the cached
        singleton from :func:`get_settings` is used.
    service : BatchService | None
        Override the batch service. When ``None`` one is built from
        ``settings``.
    """
    settings = settings or get_settings()
    if configure_logs:
        configure_logging(level=settings.log_level, service="taskbatch")

    service = service or BatchService(settings)

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.service = service

    # ── Middleware (outermost → innermost) ────────────────────────────
    app.add_middleware(TimingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "X-Request-ID", "X-Process-Time-Ms"],
    )

    # ── Exception handlers ───────────────────────────────────────────
    app.add_exception_handler(TaskBatchError, taskbatch_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # ── Routers ──────────────────────────────────────────────────────
    from taskbatch.api.routers import threads

    app.include_router(
        create_health_router(
            "taskbatch",
            version=settings.api_version,
            checks=[HealthCheck("pool", lambda: not service.pool.is_shutdown)],
        ),
        tags=["health"],
    )
    app.include_router(threads.router, prefix=settings.api_prefix, tags=["threads"])

    return app
