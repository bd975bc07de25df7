"""
Threads router: trigger batches and inspect the host.

Endpoints:
    GET /create-files-with-service-and-download   Five files in parallel → ZIP download
    GET /create-files-with-failure-and-download   Same with task 2 forced to fail
    GET /future-demo                              Future-composition demo batch
    GET /latch-demo                               Countdown-latch demo batch
    GET /system-info                              Host and pool snapshot
    GET /health                                   Liveness probe

The handlers are plain ``def`` functions: they block on the batch, so
FastAPI runs them on its threadpool rather than the event loop.
"""

from __future__ import annotations

import time
from datetime import datetime

from fastapi import APIRouter, Query
from fastapi.responses import Response

from taskbatch.api.deps import Service
from taskbatch.api.schemas import BatchOutcomeSchema, LivenessStatus, SystemInfo
from taskbatch.core.errors import TaskBatchError
from taskbatch.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


def archive_filename(prefix: str, now: datetime | None = None) -> str:
    """``{prefix}_{YYYYmmdd_HHMMSS}.zip``."""
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{stamp}.zip"


def zip_response(data: bytes, filename: str) -> Response:
    return Response(
        content=data,
        media_type="application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/create-files-with-service-and-download", response_class=Response)
def create_files_with_service_and_download(service: Service) -> Response:
    """Generate five files in parallel and download them as one ZIP."""
    start = time.perf_counter()
    try:
        data = service.create_files_and_archive()
    except TaskBatchError as exc:
        exc.message = f"error while generating and archiving files: {exc.message}"
        raise
    filename = archive_filename("service_generated_files")
    logger.info(
        "api.archive.ready",
        filename=filename,
        size=len(data),
        duration_ms=round((time.perf_counter() - start) * 1000, 2),
    )
    return zip_response(data, filename)


@router.get("/create-files-with-failure-and-download", response_class=Response)
def create_files_with_failure_and_download(service: Service) -> Response:
    """Failure scenario: task 2 always fails, so this answers with an error."""
    start = time.perf_counter()
    try:
        data = service.create_files_with_failure_and_archive()
    except TaskBatchError as exc:
        exc.message = f"error during failure scenario: {exc.message}"
        raise
    filename = archive_filename("failure_test_files")
    logger.info(
        "api.archive.ready",
        filename=filename,
        size=len(data),
        duration_ms=round((time.perf_counter() - start) * 1000, 2),
    )
    return zip_response(data, filename)


@router.get("/future-demo", response_model=BatchOutcomeSchema)
def future_demo(
    service: Service,
    fail: list[int] = Query(default=[], description="Task ids (1-5) to force into failure"),
) -> BatchOutcomeSchema:
    """Five sleeping tasks joined with a single timeout; any failure fails the call."""
    outcome = service.run_future_demo(fail_ids=fail)
    return BatchOutcomeSchema(**outcome.to_dict())


@router.get("/latch-demo", response_model=BatchOutcomeSchema)
def latch_demo(
    service: Service,
    fail: list[int] = Query(default=[], description="Task ids (1-5) to force into failure"),
) -> BatchOutcomeSchema:
    """Five sleeping tasks awaited on a countdown latch; returns whatever finished."""
    outcome = service.run_latch_demo(fail_ids=fail)
    return BatchOutcomeSchema(**outcome.to_dict())


@router.get("/system-info", response_model=SystemInfo)
def system_info(service: Service) -> SystemInfo:
    return SystemInfo(**service.system_info())


@router.get("/health", response_model=LivenessStatus)
def health() -> LivenessStatus:
    return LivenessStatus()
