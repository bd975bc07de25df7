"""
API schemas: response envelopes for the batch endpoints.

Successful archive calls return raw ZIP bytes; everything else returns JSON.
Every non-2xx response uses :class:`ErrorResponse`.
"""

from __future__ import annotations

import time
from typing import Any

from pydantic import BaseModel, Field


def now_ms() -> int:
    return int(time.time() * 1000)


class ErrorResponse(BaseModel):
    """Error envelope for failed batches and unexpected errors."""

    status: str = Field(default="error")
    message: str = Field(description="Human-readable error, lists every failed task")
    code: str | None = Field(default=None, description="Machine-readable error code")
    timestamp: int = Field(default_factory=now_ms, description="Epoch milliseconds")


class LivenessStatus(BaseModel):
    status: str = "UP"
    timestamp: str = Field(default_factory=lambda: str(now_ms()))


class TaskResultSchema(BaseModel):
    task_id: int | None
    success: bool
    payload: Any = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    message: str | None = None


class FailureSchema(BaseModel):
    task_id: int | None
    message: str


class BatchOutcomeSchema(BaseModel):
    """A finished demo batch.

    ``results`` is in submission order for the ``futures`` strategy and in
    completion order for ``latch``.
    """

    strategy: str
    submitted: int
    total: int
    succeeded: int
    failed: int
    timed_out: bool
    duration_seconds: float | None = None
    failures: list[FailureSchema] = Field(default_factory=list)
    results: list[TaskResultSchema] = Field(default_factory=list)


class SystemInfo(BaseModel):
    available_processors: int | None
    pool_size: int
    pool_shutdown: bool
    in_flight: int
    batch_timeout: float
    python_version: str
    python_implementation: str
    os_name: str
    platform: str
    hostname: str
    pid: int
    active_threads: int
    executable: str
