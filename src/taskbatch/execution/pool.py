"""Worker Pool: fixed-size ThreadPool shared by every batch.

One ``WorkerPool`` is created at service start, sized to the host core
count, and shut down exactly once at teardown. Both batch strategies submit
into the same pool; concurrent batches interleave without isolation.

ARCHITECTURE
────────────
::

    WorkerPool(max_workers=os.cpu_count())
      ├── .submit(fn, *args)  ─ Future; PoolClosedError after shutdown
      ├── .in_flight          ─ futures not yet resolved
      └── .shutdown(grace)    ─ stop intake → wait grace → cancel queued

Shutdown is idempotent: a lock-guarded check-and-set makes the first call
do the work and every later call a no-op, so it is safe from signal
handlers, lifespan hooks and ``atexit`` alike.

Related modules:
    futures.py - future-composition batch strategy
    latch.py   - countdown-latch batch strategy
"""

from __future__ import annotations

import os
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any

from taskbatch.core.errors import PoolClosedError
from taskbatch.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_GRACE_PERIOD = 60.0


def default_pool_size() -> int:
    """Host parallelism, falling back to 1 when it cannot be determined."""
    return os.cpu_count() or 1


class WorkerPool:
    """Bounded thread pool with an explicit, idempotent lifecycle.

    The internal queue is unbounded, so :meth:`submit` never blocks the
    caller. Work is never dropped silently: a unit either runs, raises
    through its future, or is cancelled during shutdown and reports
    ``CancelledError`` to whoever holds its handle.

    Example:
        >>> pool = WorkerPool(max_workers=4)
        >>> pool.submit(sum, [1, 2, 3]).result()
        6
        >>> pool.shutdown()
        True
        >>> pool.shutdown()
        False
    """

    def __init__(self, max_workers: int | None = None, *, thread_name_prefix: str = "taskbatch"):
        """Initialize with worker pool.

        Args:
            max_workers: ThreadPool size (default: host core count)
            thread_name_prefix: Prefix for worker thread names
        """
        if max_workers is not None and max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self._max_workers = max_workers or default_pool_size()
        self._executor = ThreadPoolExecutor(
            max_workers=self._max_workers,
            thread_name_prefix=thread_name_prefix,
        )
        self._lock = threading.Lock()
        self._closed = False
        self._in_flight: set[Future] = set()

        logger.debug("pool.created", max_workers=self._max_workers)

    @property
    def max_workers(self) -> int:
        return self._max_workers

    @property
    def is_shutdown(self) -> bool:
        return self._closed

    @property
    def in_flight(self) -> int:
        """Number of submitted futures that have not resolved yet."""
        with self._lock:
            return len(self._in_flight)

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Future:
        """Submit work to the pool and return its handle.

        Raises:
            PoolClosedError: If the pool has been shut down
        """
        with self._lock:
            if self._closed:
                raise PoolClosedError("worker pool is shut down; no new work accepted")
            future = self._executor.submit(fn, *args, **kwargs)
            self._in_flight.add(future)
        future.add_done_callback(self._discard)
        return future

    def _discard(self, future: Future) -> None:
        with self._lock:
            self._in_flight.discard(future)

    def shutdown(self, grace_period: float = DEFAULT_GRACE_PERIOD) -> bool:
        """Stop accepting work, drain for ``grace_period`` seconds, cancel stragglers.

        Returns:
            True if this call performed the shutdown, False if the pool was
            already shut down.
        """
        with self._lock:
            if self._closed:
                return False
            self._closed = True
            pending = list(self._in_flight)

        logger.info("pool.shutdown.start", in_flight=len(pending), grace_period=grace_period)

        # Intake is closed above; the executor keeps draining its queue.
        self._executor.shutdown(wait=False)
        _, not_done = wait(pending, timeout=grace_period)

        if not_done:
            cancelled = sum(1 for f in not_done if f.cancel())
            still_running = len(not_done) - cancelled
            logger.warning(
                "pool.shutdown.forced",
                cancelled=cancelled,
                still_running=still_running,
            )
            self._executor.shutdown(wait=False, cancel_futures=True)
        else:
            self._executor.shutdown(wait=True)

        logger.info("pool.shutdown.complete")
        return True

    def __enter__(self) -> WorkerPool:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown()

    def __repr__(self) -> str:
        state = "shutdown" if self._closed else "running"
        return f"WorkerPool(max_workers={self._max_workers}, state={state})"
