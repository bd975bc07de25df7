"""
taskbatch: run a small batch of independent tasks on a bounded thread pool.

Two completion strategies (future-composition and countdown-latch) share a
single :class:`~taskbatch.execution.pool.WorkerPool`; failures are
aggregated into one message, and the file-producing flow bundles its
per-task files into a ZIP.

Example::

    from taskbatch import BatchService

    service = BatchService()
    try:
        zip_bytes = service.create_files_and_archive()
    finally:
        service.shutdown()
"""

from taskbatch.core.errors import (
    AggregateFailure,
    BatchTimeout,
    CleanupFailure,
    PoolClosedError,
    TaskBatchError,
    UnitFailure,
)
from taskbatch.execution import (
    BatchOutcome,
    FutureBatchRunner,
    LatchBatchRunner,
    TaskResult,
    TaskUnit,
    WorkerPool,
    aggregate,
)
from taskbatch.service import BatchService

__version__ = "0.1.0"

__all__ = [
    "AggregateFailure",
    "BatchOutcome",
    "BatchService",
    "BatchTimeout",
    "CleanupFailure",
    "FutureBatchRunner",
    "LatchBatchRunner",
    "PoolClosedError",
    "TaskBatchError",
    "TaskResult",
    "TaskUnit",
    "UnitFailure",
    "WorkerPool",
    "__version__",
    "aggregate",
]
