"""
Structured error types for the taskbatch engine.

Errors carry a category, a machine-readable code and a free-form context
dict so the HTTP layer can map them to status codes and the logs can carry
them as structured fields.

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────┐
        │                    TaskBatchError                         │
        │        (category, code, context, cause)                   │
        ├──────────────────────────────────────────────────────────┤
        │  UnitFailure        one unit's own error (contained)      │
        │  BatchTimeout       join/wait exceeded its budget         │
        │  AggregateFailure   one or more units failed              │
        │  CleanupFailure     temp-file deletion (logged only)      │
        │  PoolClosedError    submit after shutdown                 │
        └──────────────────────────────────────────────────────────┘

Propagation:
    Unit errors never cross the unit boundary. Only ``AggregateFailure``
    (all failures in one message) and ``BatchTimeout`` reach the caller of a
    future-composition batch. ``CleanupFailure`` is built for the log record
    and never raised.

Usage:
    from taskbatch.core.errors import AggregateFailure

    try:
        outcome = runner.run_batch(units)
    except AggregateFailure as e:
        log.error("batch.failed", **e.to_dict())
"""

from __future__ import annotations

import builtins
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from concurrent.futures import Future

    from taskbatch.execution.models import BatchOutcome, TaskResult


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    TASK = "TASK"                 # A single unit's own failure
    TIMEOUT = "TIMEOUT"           # Batch wait exceeded its budget
    AGGREGATE = "AGGREGATE"       # One or more units in a batch failed
    CLEANUP = "CLEANUP"           # Temp-file removal
    POOL = "POOL"                 # Worker pool lifecycle
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


class TaskBatchError(Exception):
    """Base exception for all taskbatch errors.

    Subclasses set ``default_category`` and ``code``; ``code`` is what the
    HTTP layer keys its status mapping on.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    code: str = "INTERNAL"

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context: dict[str, Any] = dict(context or {})
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> TaskBatchError:
        """Add context to this error (fluent API)."""
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "code": self.code,
        }
        if self.context:
            result["context"] = dict(self.context)
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


class UnitFailure(TaskBatchError):
    """A single task unit's own error.

    Raised by work functions that want to fail "cleanly"; synchronizers
    convert it into a ``Failure`` result at the unit boundary.
    """

    default_category = ErrorCategory.TASK
    code = "UNIT_FAILURE"

    def __init__(self, task_id: int | None, message: str, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.task_id = task_id
        self.context.setdefault("task_id", task_id)


class BatchTimeout(TaskBatchError, builtins.TimeoutError):
    """The join over a batch exceeded its fixed budget.

    Inherits from the built-in ``TimeoutError`` for broad exception handling.

    Attributes:
        timeout: The budget that was exceeded, in seconds
        resolved: Results of handles that did resolve before the deadline
        pending: Handles still running; they keep running in the background
    """

    default_category = ErrorCategory.TIMEOUT
    code = "BATCH_TIMEOUT"

    def __init__(
        self,
        timeout: float,
        *,
        resolved: list[TaskResult] | None = None,
        pending: list[Future] | None = None,
        **kwargs: Any,
    ):
        self.timeout = timeout
        self.resolved = list(resolved or [])
        self.pending = list(pending or [])
        super().__init__(
            f"batch did not complete within {timeout}s "
            f"({len(self.pending)} task(s) still running)",
            **kwargs,
        )
        self.context.setdefault("timeout", timeout)
        self.context.setdefault("pending", len(self.pending))


class AggregateFailure(TaskBatchError):
    """One or more units of a batch failed.

    ``message`` enumerates every failed unit; ``outcome`` keeps the full
    batch so callers can release whatever the successful units produced.
    """

    default_category = ErrorCategory.AGGREGATE
    code = "AGGREGATE_FAILURE"

    def __init__(
        self,
        message: str,
        *,
        failures: list[tuple[int | None, str]] | None = None,
        outcome: BatchOutcome | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.failures = list(failures or [])
        self.outcome = outcome
        self.context.setdefault("failed_ids", [task_id for task_id, _ in self.failures])


class CleanupFailure(TaskBatchError):
    """A temporary file could not be removed. Logged, never raised."""

    default_category = ErrorCategory.CLEANUP
    code = "CLEANUP_FAILURE"

    def __init__(self, path: str, cause: Exception | None = None, **kwargs: Any):
        super().__init__(f"failed to delete temp file {path}: {cause}", cause=cause, **kwargs)
        self.path = path
        self.context.setdefault("path", path)


class PoolClosedError(TaskBatchError):
    """Work was submitted to a pool that has been shut down.

    ``pending`` holds the handles a batch had already submitted before the
    pool refused the next unit; they keep running in the background.
    """

    default_category = ErrorCategory.POOL
    code = "POOL_CLOSED"

    def __init__(self, message: str, *, pending: list[Future] | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.pending = list(pending or [])


__all__ = [
    "ErrorCategory",
    "TaskBatchError",
    "UnitFailure",
    "BatchTimeout",
    "AggregateFailure",
    "CleanupFailure",
    "PoolClosedError",
]
