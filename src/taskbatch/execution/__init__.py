"""Parallel task-batch execution engine.

Two interchangeable strategies share one bounded pool:

- :class:`FutureBatchRunner`: ordered results; a timeout or any failed
  unit fails the whole batch.
- :class:`LatchBatchRunner`: completion-ordered results; a timeout
  returns whatever finished.
"""

from taskbatch.execution.aggregate import Aggregation, aggregate, raise_for_failures
from taskbatch.execution.futures import FutureBatchRunner
from taskbatch.execution.latch import CountDownLatch, LatchBatchRunner
from taskbatch.execution.models import BatchOutcome, FileHandle, TaskResult, TaskUnit
from taskbatch.execution.pool import WorkerPool, default_pool_size
from taskbatch.execution.runner import BatchRunner, run_unit

__all__ = [
    "Aggregation",
    "BatchOutcome",
    "BatchRunner",
    "CountDownLatch",
    "FileHandle",
    "FutureBatchRunner",
    "LatchBatchRunner",
    "TaskResult",
    "TaskUnit",
    "WorkerPool",
    "aggregate",
    "default_pool_size",
    "raise_for_failures",
    "run_unit",
]
