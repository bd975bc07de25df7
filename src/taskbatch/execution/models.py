"""Data model for a batch: units in, results and an outcome out.

``TaskUnit`` is what callers build, ``TaskResult`` is what a unit produces
(exactly one of success/failure, ``success`` is the discriminant) and
``BatchOutcome`` is what a synchronizer hands back.

Example::

    units = [TaskUnit(id=i, work=partial(gen.create_report_file, i)) for i in range(1, 4)]
    outcome = FutureBatchRunner(pool).run_batch(units)
    outcome.payloads()  # [FileHandle(...), FileHandle(...), FileHandle(...)]
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any


@dataclass(frozen=True, slots=True)
class TaskUnit:
    """A unit of work identified by an integer id."""

    id: int
    work: Callable[[], Any]
    name: str = ""

    @property
    def label(self) -> str:
        return self.name or f"task-{self.id}"


@dataclass(frozen=True, slots=True)
class TaskResult:
    """Outcome of one unit: ``Success{task_id, payload, metadata}`` or ``Failure{task_id, message}``.

    Build through :meth:`succeeded` / :meth:`failed` rather than the
    constructor so only one variant is ever populated. ``task_id`` is
    ``None`` for failures captured where the unit id is not known.
    """

    task_id: int | None
    success: bool
    payload: Any = None
    metadata: dict[str, Any] = field(default_factory=dict)
    message: str | None = None

    @classmethod
    def succeeded(
        cls, task_id: int, payload: Any, metadata: dict[str, Any] | None = None
    ) -> TaskResult:
        return cls(task_id=task_id, success=True, payload=payload, metadata=dict(metadata or {}))

    @classmethod
    def failed(cls, task_id: int | None, message: str) -> TaskResult:
        return cls(task_id=task_id, success=False, message=message)

    def to_dict(self) -> dict[str, Any]:
        if not self.success:
            return {"task_id": self.task_id, "success": False, "message": self.message}
        payload = self.payload
        if hasattr(payload, "to_dict"):
            payload = payload.to_dict()
        return {
            "task_id": self.task_id,
            "success": True,
            "payload": payload,
            "metadata": self.metadata,
        }


@dataclass(frozen=True, slots=True)
class FileHandle:
    """A per-task temporary file produced by the file generator.

    ``name`` is the logical file name used inside the archive
    (``report.txt``), ``path`` the actual temp file on disk.
    """

    task_id: int
    name: str
    path: Path
    kind: str
    size: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "task_id": self.task_id,
            "name": self.name,
            "path": str(self.path),
            "kind": self.kind,
            "size": self.size,
        }


@dataclass
class BatchOutcome:
    """Aggregate result of one batch.

    Under the future-composition strategy ``results`` is index-aligned to
    submission order and always has one entry per submitted unit. Under the
    countdown-latch strategy it is in completion order and may be short if
    the wait timed out (``timed_out``).
    """

    strategy: str
    submitted: int
    results: list[TaskResult]
    failures: list[tuple[int | None, str]] = field(default_factory=list)
    timed_out: bool = False
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None

    @property
    def ok(self) -> bool:
        return not self.failures and not self.timed_out

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        """Number of units that completed successfully."""
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        """Number of units that failed."""
        return sum(1 for r in self.results if not r.success)

    @property
    def duration_seconds(self) -> float | None:
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    def payloads(self) -> list[Any]:
        """Payloads of the successful results, in result order."""
        return [r.payload for r in self.results if r.success]

    def to_dict(self) -> dict[str, Any]:
        """Serialise for logging / API responses."""
        return {
            "strategy": self.strategy,
            "submitted": self.submitted,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "timed_out": self.timed_out,
            "duration_seconds": self.duration_seconds,
            "failures": [{"task_id": task_id, "message": msg} for task_id, msg in self.failures],
            "results": [r.to_dict() for r in self.results],
        }
