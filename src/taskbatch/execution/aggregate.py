"""Failure aggregation: one deterministic message for every failed unit.

Not "first error wins": every failure is listed, in result order, as
``task {id}: {message}`` joined by ``", "``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from taskbatch.core.errors import AggregateFailure
from taskbatch.execution.models import BatchOutcome, TaskResult

SEPARATOR = ", "
UNKNOWN_ID = "unknown"


@dataclass(frozen=True)
class Aggregation:
    ok: bool
    message: str = ""
    failures: list[tuple[int | None, str]] = field(default_factory=list)


def format_failure(task_id: int | None, message: str | None) -> str:
    label = UNKNOWN_ID if task_id is None else task_id
    return f"task {label}: {message or ''}"


def aggregate(results: Iterable[TaskResult]) -> Aggregation:
    """Collect every failure from ``results`` into a single aggregation."""
    failures = [(r.task_id, r.message or "") for r in results if not r.success]
    if not failures:
        return Aggregation(ok=True)
    message = SEPARATOR.join(format_failure(task_id, msg) for task_id, msg in failures)
    return Aggregation(ok=False, message=message, failures=failures)


def raise_for_failures(outcome: BatchOutcome) -> BatchOutcome:
    """Raise :class:`AggregateFailure` if any result in ``outcome`` failed.

    Also records the failures on ``outcome`` so the exception carries a
    complete picture of the batch.
    """
    summary = aggregate(outcome.results)
    outcome.failures = summary.failures
    if not summary.ok:
        raise AggregateFailure(
            f"the following tasks failed: {summary.message}",
            failures=summary.failures,
            outcome=outcome,
        )
    return outcome
