"""
CLI utility helpers: output formatting and service lifecycle.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from rich.console import Console
from rich.table import Table

from taskbatch.core.logging import configure_logging
from taskbatch.core.settings import TaskBatchSettings, get_settings
from taskbatch.execution.models import BatchOutcome
from taskbatch.service import BatchService

console = Console()
err_console = Console(stderr=True)


@contextmanager
def open_service(settings: TaskBatchSettings | None = None) -> Iterator[BatchService]:
    """Yield a :class:`BatchService` and always shut its pool down afterwards."""
    settings = settings or get_settings()
    configure_logging(level=settings.log_level, json_format=False, cache_loggers=False)
    service = BatchService(settings)
    try:
        yield service
    finally:
        service.shutdown()


def print_outcome(outcome: BatchOutcome) -> None:
    """Render a batch outcome as a Rich table plus a summary line."""
    table = Table(title=f"{outcome.strategy} batch", show_lines=False, pad_edge=False)
    table.add_column("#", justify="right")
    table.add_column("task_id", justify="right")
    table.add_column("status")
    table.add_column("detail", overflow="fold")
    for index, result in enumerate(outcome.results, start=1):
        status = "[green]ok[/green]" if result.success else "[red]failed[/red]"
        detail = str(result.payload) if result.success else (result.message or "")
        table.add_row(str(index), str(result.task_id), status, detail)
    console.print(table)

    summary = (
        f"{outcome.succeeded}/{outcome.submitted} succeeded"
        f" in {outcome.duration_seconds or 0:.2f}s"
    )
    if outcome.timed_out:
        summary += " [yellow](timed out, partial results)[/yellow]"
    console.print(summary)


def print_dict(data: dict[str, Any], *, title: str = "") -> None:
    table = Table(title=title or None, show_header=False, pad_edge=False)
    table.add_column("key", style="bold")
    table.add_column("value", overflow="fold")
    for key, value in data.items():
        table.add_row(key, str(value))
    console.print(table)
