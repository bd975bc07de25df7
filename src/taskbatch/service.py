"""
Batch service: the single owner of the worker pool.

``BatchService`` composes the engine with its collaborators: it builds the
five file-generation units, runs them through a batch strategy, hands the
resulting files to the archive assembler, and guarantees that no per-task
temp file outlives the call that created it, on the success path, on an
aggregate failure, on a timeout, and when the pool closes mid-batch (late
files are removed as their units finish).

Flows:
    create_files_and_archive()               ids 1-5, all succeed → ZIP bytes
    create_files_with_failure_and_archive()  id 2 always fails → AggregateFailure
    run_future_demo() / run_latch_demo()     sleeping units, no files
    system_info()                            host + pool snapshot
    shutdown()                               idempotent pool teardown
"""

from __future__ import annotations

import os
import platform
import random
import sys
import threading
import time
from collections.abc import Iterable
from concurrent.futures import Future
from functools import partial
from typing import Any

from taskbatch.core.errors import AggregateFailure, BatchTimeout, PoolClosedError, UnitFailure
from taskbatch.core.logging import get_logger
from taskbatch.core.settings import TaskBatchSettings
from taskbatch.execution.futures import FutureBatchRunner
from taskbatch.execution.latch import LatchBatchRunner
from taskbatch.execution.models import BatchOutcome, FileHandle, TaskResult, TaskUnit
from taskbatch.execution.pool import WorkerPool
from taskbatch.execution.runner import BatchRunner
from taskbatch.files.archive import ArchiveAssembler, cleanup_temp_files
from taskbatch.files.generator import FileGenerator

logger = get_logger(__name__)

#: (task id, generator kind) for the standard five-file batch.
STANDARD_PLAN: tuple[tuple[int, str], ...] = (
    (1, "text"),
    (2, "csv"),
    (3, "json"),
    (4, "log"),
    (5, "markdown"),
)

#: Same batch with task 2 swapped for the generator that always fails.
FAILURE_PLAN: tuple[tuple[int, str], ...] = (
    (1, "text"),
    (2, "failing-csv"),
    (3, "json"),
    (4, "log"),
    (5, "markdown"),
)

DEMO_UNITS = 5


def _file_handles(results: Iterable[TaskResult]) -> list[FileHandle]:
    return [r.payload for r in results if r.success and isinstance(r.payload, FileHandle)]


def _remove_when_done(future: Future) -> None:
    """Done-callback for units abandoned by a timed-out or refused batch."""
    if future.cancelled() or future.exception() is not None:
        return
    handles = _file_handles([future.result()])
    if handles:
        removed = cleanup_temp_files(h.path for h in handles)
        logger.info("batch.late_cleanup", removed=removed)


class BatchService:
    """Runs the task batches and owns the pool they run on.

    Parameters
    ----------
    settings : TaskBatchSettings | None
        Engine configuration; defaults are read from the environment.
    pool : WorkerPool | None
        Inject a pool (tests). When omitted one is created from
        ``settings.pool_size``. Either way the service owns it and shuts
        it down.
    generator : FileGenerator | None
        File-generation collaborator.
    """

    def __init__(
        self,
        settings: TaskBatchSettings | None = None,
        *,
        pool: WorkerPool | None = None,
        generator: FileGenerator | None = None,
        assembler: ArchiveAssembler | None = None,
    ):
        self.settings = settings or TaskBatchSettings()
        self.pool = pool or WorkerPool(self.settings.pool_size)
        self.generator = generator or FileGenerator(self.settings.temp_dir)
        self.assembler = assembler or ArchiveAssembler()
        self.futures = FutureBatchRunner(self.pool, timeout=self.settings.batch_timeout)
        self.latch = LatchBatchRunner(self.pool, timeout=self.settings.batch_timeout)

    def runner(self, strategy: str) -> BatchRunner:
        """Look up a batch strategy by name (``futures`` or ``latch``)."""
        runners: dict[str, BatchRunner] = {"futures": self.futures, "latch": self.latch}
        try:
            return runners[strategy]
        except KeyError:
            raise ValueError(f"Unknown strategy {strategy!r}; expected one of {sorted(runners)}") from None

    # ── File batches ─────────────────────────────────────────────────────

    def file_units(self, plan: Iterable[tuple[int, str]]) -> list[TaskUnit]:
        return [
            TaskUnit(id=task_id, work=partial(self.generator.produce, task_id, kind), name=kind)
            for task_id, kind in plan
        ]

    def create_files_and_archive(self) -> bytes:
        """Generate the five standard files in parallel and return them as a ZIP."""
        logger.info("service.archive_flow.start", plan="standard")
        return self._archive_flow(STANDARD_PLAN)

    def create_files_with_failure_and_archive(self) -> bytes:
        """Same flow with task 2 forced to fail; raises ``AggregateFailure``."""
        logger.info("service.archive_flow.start", plan="failure")
        return self._archive_flow(FAILURE_PLAN)

    def _archive_flow(self, plan: Iterable[tuple[int, str]]) -> bytes:
        units = self.file_units(plan)
        try:
            outcome = self.futures.run_batch(units)
        except AggregateFailure as exc:
            if exc.outcome is not None:
                self._discard(_file_handles(exc.outcome.results))
            raise
        except BatchTimeout as exc:
            self._discard(_file_handles(exc.resolved))
            for future in exc.pending:
                future.add_done_callback(_remove_when_done)
            raise
        except PoolClosedError as exc:
            for future in exc.pending:
                future.add_done_callback(_remove_when_done)
            raise

        handles = _file_handles(outcome.results)
        for handle in handles:
            logger.info("service.file_ready", name=handle.name, size=handle.size)
        return self.assembler.archive(handles)

    def _discard(self, handles: list[FileHandle]) -> None:
        if handles:
            removed = cleanup_temp_files(h.path for h in handles)
            logger.info("service.cleanup_after_failure", removed=removed, requested=len(handles))

    # ── Demo batches ─────────────────────────────────────────────────────

    def demo_units(self, fail_ids: Iterable[int] = ()) -> list[TaskUnit]:
        """Five units that sleep for a random spell in the configured range."""
        failing = set(fail_ids)
        low, high = self.settings.demo_min_sleep, self.settings.demo_max_sleep
        return [
            TaskUnit(
                id=task_id,
                work=partial(_simulated_work, task_id, random.uniform(low, high), task_id in failing),
                name=f"demo-{task_id}",
            )
            for task_id in range(1, DEMO_UNITS + 1)
        ]

    def run_future_demo(self, fail_ids: Iterable[int] = ()) -> BatchOutcome:
        return self.futures.run_batch(self.demo_units(fail_ids))

    def run_latch_demo(self, fail_ids: Iterable[int] = ()) -> BatchOutcome:
        return self.latch.run_batch(self.demo_units(fail_ids))

    # ── Introspection & lifecycle ────────────────────────────────────────

    def system_info(self) -> dict[str, Any]:
        return {
            "available_processors": os.cpu_count(),
            "pool_size": self.pool.max_workers,
            "pool_shutdown": self.pool.is_shutdown,
            "in_flight": self.pool.in_flight,
            "batch_timeout": self.settings.batch_timeout,
            "python_version": platform.python_version(),
            "python_implementation": platform.python_implementation(),
            "os_name": platform.system(),
            "platform": platform.platform(),
            "hostname": platform.node(),
            "pid": os.getpid(),
            "active_threads": threading.active_count(),
            "executable": sys.executable,
        }

    def shutdown(self) -> bool:
        """Shut the pool down. Safe to call more than once."""
        return self.pool.shutdown(self.settings.shutdown_grace_period)


def _simulated_work(task_id: int, seconds: float, fail: bool) -> str:
    time.sleep(seconds)
    if fail:
        raise UnitFailure(task_id, f"simulated failure after {seconds:.2f}s")
    return f"task {task_id} finished on {threading.current_thread().name} after {seconds:.2f}s"
