"""BatchRunner Protocol: the interface both batch strategies share.

ARCHITECTURE
────────────
::

    BatchRunner (Protocol)
      ├── .strategy            ─ "futures" | "latch"
      └── .run_batch(units)    ─ blocking, returns BatchOutcome

    Implementations:
      FutureBatchRunner  ─ join all handles; timeout and failures raise
      LatchBatchRunner   ─ countdown latch; timeout returns partial results

``run_unit`` is the per-unit boundary both strategies wrap around the work
function: it converts the unit's known failure modes into a ``Failure``
result and stamps successful results with thread and timing metadata.
"""

from __future__ import annotations

import threading
import time
from typing import Protocol, runtime_checkable

from taskbatch.core.errors import UnitFailure
from taskbatch.core.logging import get_logger
from taskbatch.execution.models import BatchOutcome, TaskResult, TaskUnit

logger = get_logger(__name__)

DEFAULT_BATCH_TIMEOUT = 30.0

#: Exceptions a unit is expected to raise; anything else is unexpected.
KNOWN_FAILURES: tuple[type[BaseException], ...] = (OSError, UnitFailure)


@runtime_checkable
class BatchRunner(Protocol):
    """Batch synchronizer - how a set of units is awaited."""

    strategy: str

    def run_batch(self, units: list[TaskUnit]) -> BatchOutcome:
        """Run every unit on the pool and block until they resolve."""
        ...


def describe_failure(exc: BaseException) -> str:
    """Human-readable message for a contained unit failure."""
    if isinstance(exc, UnitFailure):
        return exc.message
    if isinstance(exc, OSError):
        return f"file generation error: {exc}"
    return f"{type(exc).__name__}: {exc}"


def run_unit(unit: TaskUnit) -> TaskResult:
    """Execute one unit, containing its known failure modes.

    Unexpected exceptions propagate so the synchronizer can capture them
    one layer up.
    """
    thread = threading.current_thread().name
    start = time.perf_counter()
    try:
        payload = unit.work()
    except KNOWN_FAILURES as exc:
        logger.error("task.failed", task_id=unit.id, unit=unit.label, error=str(exc))
        return TaskResult.failed(unit.id, describe_failure(exc))

    duration = round(time.perf_counter() - start, 4)
    logger.debug("task.completed", task_id=unit.id, unit=unit.label, thread=thread, duration=duration)
    return TaskResult.succeeded(
        unit.id,
        payload,
        metadata={"thread": thread, "duration_seconds": duration, "unit": unit.label},
    )
