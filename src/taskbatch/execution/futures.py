"""Future-composition batch strategy.

Submit every unit, keep one handle per unit in submission order, join them
all under a single timeout, then read the handles back in order. A timeout
is total failure; any failed unit fails the whole batch with one message
that lists every failure.

::

    units ─► pool.submit(run_unit, u) ─► [f1, f2, ... fn]
                                              │
                         wait(ALL_COMPLETED, timeout)
                          │                    │
                     not_done?            all resolved
                          │                    │
                    BatchTimeout     results[i] = f_i.result()
                                               │
                                      raise_for_failures()
"""

from __future__ import annotations

import uuid
from concurrent.futures import ALL_COMPLETED, CancelledError, Future, wait
from datetime import UTC, datetime

from taskbatch.core.errors import AggregateFailure, BatchTimeout, PoolClosedError
from taskbatch.core.logging import LogContext, get_logger
from taskbatch.execution.aggregate import raise_for_failures
from taskbatch.execution.models import BatchOutcome, TaskResult, TaskUnit
from taskbatch.execution.pool import WorkerPool
from taskbatch.execution.runner import DEFAULT_BATCH_TIMEOUT, run_unit

logger = get_logger(__name__)


def collect(future: Future, task_id: int | None = None) -> TaskResult:
    """Read a resolved handle, capturing errors that escaped the unit wrapper.

    A cancelled handle is reported as ``interrupted`` under ``task_id``.
    Errors that escaped the unit wrapper carry ``task_id=None``: the unit
    boundary, which knows the id, did not classify them.
    """
    try:
        return future.result(timeout=0)
    except CancelledError:
        return TaskResult.failed(task_id, "interrupted")
    except Exception as exc:
        logger.exception("task.unexpected_error", error=str(exc))
        return TaskResult.failed(None, f"unexpected error: {type(exc).__name__}: {exc}")


class FutureBatchRunner:
    """Join-all strategy: ordered results, fail-all on timeout or any failure.

    Example:
        >>> runner = FutureBatchRunner(pool, timeout=30.0)
        >>> outcome = runner.run_batch(units)
        >>> [r.task_id for r in outcome.results]
        [1, 2, 3, 4, 5]
    """

    strategy = "futures"

    def __init__(self, pool: WorkerPool, timeout: float = DEFAULT_BATCH_TIMEOUT):
        self._pool = pool
        self._timeout = timeout

    @property
    def timeout(self) -> float:
        return self._timeout

    def submit_all(self, units: list[TaskUnit]) -> list[Future]:
        """Submit every unit, returning handles in submission order.

        Raises:
            PoolClosedError: With ``pending`` set to the handles submitted
                before the pool refused a unit
        """
        handles: list[Future] = []
        try:
            for unit in units:
                handles.append(self._pool.submit(run_unit, unit))
        except PoolClosedError as exc:
            exc.pending = handles
            raise
        return handles

    def run_batch(self, units: list[TaskUnit]) -> BatchOutcome:
        """Run ``units`` and return an outcome index-aligned to ``units``.

        Raises:
            BatchTimeout: If the join does not complete within the timeout
            AggregateFailure: If one or more units failed
            PoolClosedError: If the pool is shut down
        """
        batch_id = uuid.uuid4().hex[:8]
        started_at = datetime.now(UTC)

        with LogContext(batch_id=batch_id, strategy=self.strategy):
            logger.info("batch.start", units=len(units), timeout=self._timeout)

            handles = self.submit_all(units)
            done, not_done = wait(handles, timeout=self._timeout, return_when=ALL_COMPLETED)

            if not_done:
                resolved = [collect(f, u.id) for f, u in zip(handles, units) if f in done]
                logger.error(
                    "batch.timeout",
                    resolved=len(resolved),
                    pending=len(not_done),
                    timeout=self._timeout,
                )
                raise BatchTimeout(
                    self._timeout,
                    resolved=resolved,
                    pending=[f for f in handles if f in not_done],
                ).with_context(batch_id=batch_id)

            outcome = BatchOutcome(
                strategy=self.strategy,
                submitted=len(units),
                results=[collect(f, u.id) for f, u in zip(handles, units)],
                started_at=started_at,
            )
            outcome.completed_at = datetime.now(UTC)

            try:
                raise_for_failures(outcome)
            except AggregateFailure as exc:
                logger.error("batch.failed", failed=outcome.failed, error=str(exc))
                raise

            logger.info("batch.complete", succeeded=outcome.succeeded, duration=outcome.duration_seconds)
            return outcome
