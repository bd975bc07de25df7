"""Health check utilities for the taskbatch HTTP service.

Provides:

- **Response models**: ``HealthResponse``, ``CheckResult``, ``LivenessResponse``.
- **``HealthCheck``**: a named, synchronous dependency check with a
  ``required`` flag.
- **``create_health_router()``**: K8s-style ``/health`` and ``/health/live``
  endpoints for any FastAPI app.

Quick start::

    router = create_health_router(
        service_name="taskbatch",
        version="0.1.0",
        checks=[HealthCheck("pool", lambda: not service.pool.is_shutdown)],
    )
    app.include_router(router)
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

# Module-level start time: set when the service first imports this module.
_START_TIME = time.monotonic()

Status = Literal["healthy", "degraded", "unhealthy"]


class CheckResult(BaseModel):
    """Result of a single dependency health check."""

    status: Status
    latency_ms: float | None = None
    error: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    """Standard health response envelope returned from ``GET /health``."""

    status: Status = "healthy"
    service: str = ""
    version: str = ""
    uptime_s: float = Field(default_factory=lambda: round(time.monotonic() - _START_TIME, 1))
    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    checks: dict[str, CheckResult] = Field(default_factory=dict)


class LivenessResponse(BaseModel):
    """Response for liveness probes: always ``{"status": "alive"}``."""

    status: str = "alive"


@dataclass
class HealthCheck:
    """A single dependency check.

    Parameters
    ----------
    name : str
        Dependency name (e.g. ``"pool"``).
    check_fn : () -> bool
        Returns ``True`` when healthy; ``False`` or raising means unhealthy.
    required : bool
        If *True* (default), failure makes the overall status ``unhealthy``.
        If *False*, failure only causes ``degraded``.
    """

    name: str
    check_fn: Callable[[], bool]
    required: bool = True


def run_checks(checks: list[HealthCheck]) -> dict[str, CheckResult]:
    """Execute all checks and return a mapping of name → result."""
    results: dict[str, CheckResult] = {}
    for hc in checks:
        start = time.monotonic()
        try:
            healthy = bool(hc.check_fn())
            error = None if healthy else "check returned false"
        except Exception as exc:  # noqa: BLE001
            healthy, error = False, str(exc)[:200]
        elapsed = round((time.monotonic() - start) * 1000, 2)
        results[hc.name] = CheckResult(
            status="healthy" if healthy else "unhealthy",
            latency_ms=elapsed,
            error=error,
        )
    return results


def compute_status(check_results: dict[str, CheckResult], checks: list[HealthCheck]) -> Status:
    """Derive aggregate status from individual check results."""
    required = {hc.name for hc in checks if hc.required}
    down = {name for name, result in check_results.items() if result.status != "healthy"}
    if down & required:
        return "unhealthy"
    if down:
        return "degraded"
    return "healthy"


def create_health_router(
    service_name: str,
    version: str,
    checks: list[HealthCheck] | None = None,
    prefix: str = "/health",
) -> APIRouter:
    """Create an ``APIRouter`` with ``GET {prefix}`` and ``GET {prefix}/live``."""
    router = APIRouter(tags=["health"])
    _checks: list[HealthCheck] = checks or []

    @router.get(prefix, response_model=HealthResponse)
    def health() -> JSONResponse:
        """Primary health: runs all dependency checks."""
        check_results = run_checks(_checks)
        status = compute_status(check_results, _checks)
        body = HealthResponse(
            status=status,
            service=service_name,
            version=version,
            checks=check_results,
        )
        code = 503 if status == "unhealthy" else 200
        return JSONResponse(content=body.model_dump(), status_code=code)

    @router.get(f"{prefix}/live", response_model=LivenessResponse)
    def liveness() -> LivenessResponse:
        """Liveness probe: always 200 if the process is running."""
        return LivenessResponse()

    return router
