"""Countdown-latch batch strategy.

Every unit is submitted fire-and-forget. Each one appends its own result to
a shared deque and then counts a latch down in a ``finally`` block, so the
decrement runs on every exit path. The initiator blocks on the latch with a
timeout; if the timeout elapses it carries on with whatever has been
appended so far. Units cancelled by a pool shutdown never start; a
done-callback records them as ``interrupted`` and counts down for them.

Differences from :class:`~taskbatch.execution.futures.FutureBatchRunner`:

- results are in *completion* order, not submission order
- a timeout returns partial results (``outcome.timed_out``) instead of raising
- failed units are reported in ``outcome.failures`` but never raised
"""

from __future__ import annotations

import threading
import uuid
from collections import deque
from concurrent.futures import Future
from datetime import UTC, datetime

from taskbatch.core.logging import LogContext, get_logger
from taskbatch.execution.aggregate import aggregate
from taskbatch.execution.models import BatchOutcome, TaskResult, TaskUnit
from taskbatch.execution.pool import WorkerPool
from taskbatch.execution.runner import DEFAULT_BATCH_TIMEOUT, run_unit

logger = get_logger(__name__)


class CountDownLatch:
    """Blocks waiters until ``count_down()`` has been called ``count`` times."""

    def __init__(self, count: int):
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        self._count = count
        self._cond = threading.Condition()

    @property
    def count(self) -> int:
        with self._cond:
            return self._count

    def count_down(self) -> None:
        with self._cond:
            if self._count == 0:
                return
            self._count -= 1
            if self._count == 0:
                self._cond.notify_all()

    def wait(self, timeout: float | None = None) -> bool:
        """Wait for the count to reach zero. Returns False on timeout."""
        with self._cond:
            return self._cond.wait_for(lambda: self._count == 0, timeout=timeout)


class LatchBatchRunner:
    """Latch strategy: completion-ordered results, partial results on timeout.

    Example:
        >>> runner = LatchBatchRunner(pool, timeout=30.0)
        >>> outcome = runner.run_batch(units)
        >>> outcome.timed_out, outcome.total
        (False, 5)
    """

    strategy = "latch"

    def __init__(self, pool: WorkerPool, timeout: float = DEFAULT_BATCH_TIMEOUT):
        self._pool = pool
        self._timeout = timeout

    @property
    def timeout(self) -> float:
        return self._timeout

    def run_batch(self, units: list[TaskUnit]) -> BatchOutcome:
        """Run ``units`` and return what finished within the timeout.

        Raises:
            PoolClosedError: If the pool is shut down
        """
        batch_id = uuid.uuid4().hex[:8]
        started_at = datetime.now(UTC)
        latch = CountDownLatch(len(units))
        results: deque[TaskResult] = deque()

        def guarded(unit: TaskUnit) -> None:
            try:
                try:
                    result = run_unit(unit)
                except Exception as exc:
                    logger.exception("task.unexpected_error", task_id=unit.id, error=str(exc))
                    result = TaskResult.failed(unit.id, f"unexpected error: {type(exc).__name__}: {exc}")
                results.append(result)
            finally:
                latch.count_down()

        def interrupted(future: Future, unit: TaskUnit) -> None:
            # A unit cancelled before it started never reaches ``guarded``.
            if future.cancelled():
                logger.warning("task.interrupted", task_id=unit.id)
                results.append(TaskResult.failed(unit.id, "interrupted"))
                latch.count_down()

        with LogContext(batch_id=batch_id, strategy=self.strategy):
            logger.info("batch.start", units=len(units), timeout=self._timeout)

            for unit in units:
                future = self._pool.submit(guarded, unit)
                future.add_done_callback(lambda f, unit=unit: interrupted(f, unit))

            completed = latch.wait(self._timeout)
            snapshot = list(results)

            if not completed:
                logger.warning(
                    "batch.timeout.partial",
                    received=len(snapshot),
                    outstanding=latch.count,
                    timeout=self._timeout,
                )

            summary = aggregate(snapshot)
            outcome = BatchOutcome(
                strategy=self.strategy,
                submitted=len(units),
                results=snapshot,
                failures=summary.failures,
                timed_out=not completed,
                started_at=started_at,
                completed_at=datetime.now(UTC),
            )

            if summary.ok:
                logger.info("batch.complete", received=outcome.total, duration=outcome.duration_seconds)
            else:
                logger.warning("batch.complete.with_failures", failures=summary.message)
            return outcome
