"""File generation: one small temp file per task.

Each ``create_*`` method writes a templated body to a fresh temp file named
``task_{id}_*.{ext}`` and returns a :class:`FileHandle` whose ``name`` is the
fixed logical file name (``report.txt``, ``data.csv`` ...). The failing
variants exist for exercising the partial-failure path and always raise
``OSError``.
"""

from __future__ import annotations

import json
import os
import tempfile
import time
from collections.abc import Callable
from pathlib import Path

from taskbatch.core.logging import get_logger
from taskbatch.execution.models import FileHandle

logger = get_logger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


def create_temp_file(prefix: str, suffix: str, content: str, directory: Path | None = None) -> Path:
    """Create a temp file holding ``content`` (UTF-8) and return its path."""
    fd, name = tempfile.mkstemp(prefix=prefix, suffix=suffix, dir=directory)
    with os.fdopen(fd, "w", encoding="utf-8") as fh:
        fh.write(content)
    return Path(name)


class FileGenerator:
    """Produces the per-task files that end up in the archive."""

    def __init__(self, temp_dir: Path | None = None):
        self._temp_dir = Path(temp_dir) if temp_dir is not None else None
        if self._temp_dir is not None:
            self._temp_dir.mkdir(parents=True, exist_ok=True)
        self._producers: dict[str, Callable[[int], FileHandle]] = {
            "text": self.create_report_file,
            "csv": self.create_csv_file,
            "json": self.create_json_file,
            "log": self.create_log_file,
            "markdown": self.create_markdown_file,
            "failing-text": self.create_failing_report_file,
            "failing-csv": self.create_failing_csv_file,
            "failing-json": self.create_failing_json_file,
        }

    @property
    def kinds(self) -> list[str]:
        return list(self._producers)

    def produce(self, task_id: int, kind: str) -> FileHandle:
        """Dispatch to the producer registered for ``kind``."""
        try:
            producer = self._producers[kind]
        except KeyError:
            raise ValueError(f"Unknown file kind {kind!r}; expected one of {self.kinds}") from None
        return producer(task_id)

    def _write(self, task_id: int, name: str, kind: str, suffix: str, content: str) -> FileHandle:
        logger.info("file.create.start", task_id=task_id, name=name)
        path = create_temp_file(f"task_{task_id}_", suffix, content, self._temp_dir)
        size = path.stat().st_size
        logger.info("file.create.complete", task_id=task_id, name=name, size=size)
        return FileHandle(task_id=task_id, name=name, path=path, kind=kind, size=size)

    def create_report_file(self, task_id: int) -> FileHandle:
        content = f"Report for task {task_id}.\nGenerated at: {_now_ms()}"
        return self._write(task_id, "report.txt", "text", ".txt", content)

    def create_csv_file(self, task_id: int) -> FileHandle:
        content = "ID,Name,Value\n1,Item1,100\n2,Item2,200\n3,Item3,300"
        return self._write(task_id, "data.csv", "csv", ".csv", content)

    def create_json_file(self, task_id: int) -> FileHandle:
        content = json.dumps({"taskId": task_id, "status": "completed", "timestamp": _now_ms()})
        return self._write(task_id, "config.json", "json", ".json", content)

    def create_log_file(self, task_id: int) -> FileHandle:
        content = (
            f"[INFO] task {task_id} started\n"
            f"[INFO] task {task_id} finished\n"
            f"[INFO] timestamp: {_now_ms()}"
        )
        return self._write(task_id, "log.log", "log", ".log", content)

    def create_markdown_file(self, task_id: int) -> FileHandle:
        content = (
            f"# Task {task_id} summary\n\n"
            "- status: completed\n"
            f"- timestamp: {_now_ms()}\n"
            "- generated by: FileGenerator"
        )
        return self._write(task_id, "summary.md", "markdown", ".md", content)

    # ── Deterministic failures ───────────────────────────────────────────

    def create_failing_report_file(self, task_id: int) -> FileHandle:
        logger.info("file.create.start", task_id=task_id, name="report.txt", failing=True)
        raise OSError(f"intentional failure: task {task_id} report generation failed")

    def create_failing_csv_file(self, task_id: int) -> FileHandle:
        logger.info("file.create.start", task_id=task_id, name="data.csv", failing=True)
        raise OSError(f"intentional failure: task {task_id} CSV generation failed")

    def create_failing_json_file(self, task_id: int) -> FileHandle:
        logger.info("file.create.start", task_id=task_id, name="config.json", failing=True)
        raise OSError(f"intentional failure: task {task_id} JSON generation failed")
