"""Tests for the batch data model and the per-unit boundary."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from taskbatch.core.errors import UnitFailure
from taskbatch.execution.models import BatchOutcome, FileHandle, TaskResult, TaskUnit
from taskbatch.execution.runner import describe_failure, run_unit


class TestTaskUnit:
    def test_label_defaults_to_id(self):
        assert TaskUnit(id=3, work=lambda: None).label == "task-3"

    def test_label_uses_name(self):
        assert TaskUnit(id=3, work=lambda: None, name="csv").label == "csv"

    def test_frozen(self):
        unit = TaskUnit(id=1, work=lambda: None)
        with pytest.raises(AttributeError):
            unit.id = 2  # type: ignore[misc]


class TestTaskResult:
    def test_succeeded(self):
        r = TaskResult.succeeded(1, "payload", {"thread": "t-1"})
        assert r.success
        assert r.message is None
        assert r.to_dict() == {
            "task_id": 1,
            "success": True,
            "payload": "payload",
            "metadata": {"thread": "t-1"},
        }

    def test_failed(self):
        r = TaskResult.failed(2, "boom")
        assert not r.success
        assert r.payload is None
        assert r.to_dict() == {"task_id": 2, "success": False, "message": "boom"}

    def test_payload_to_dict_is_used(self, tmp_path):
        handle = FileHandle(task_id=1, name="report.txt", path=tmp_path / "x.txt", kind="text", size=10)
        d = TaskResult.succeeded(1, handle).to_dict()
        assert d["payload"]["name"] == "report.txt"
        assert d["payload"]["path"] == str(tmp_path / "x.txt")


class TestBatchOutcome:
    def test_counts(self):
        outcome = BatchOutcome(
            strategy="latch",
            submitted=3,
            results=[TaskResult.succeeded(1, "a"), TaskResult.failed(2, "b")],
            failures=[(2, "b")],
            timed_out=True,
        )
        assert outcome.total == 2
        assert outcome.succeeded == 1
        assert outcome.failed == 1
        assert not outcome.ok
        assert outcome.payloads() == ["a"]

    def test_duration(self):
        start = datetime(2024, 1, 1, tzinfo=UTC)
        outcome = BatchOutcome(strategy="futures", submitted=0, results=[], started_at=start)
        assert outcome.duration_seconds is None
        outcome.completed_at = start + timedelta(seconds=2.5)
        assert outcome.duration_seconds == 2.5

    def test_to_dict(self):
        outcome = BatchOutcome(
            strategy="futures",
            submitted=1,
            results=[TaskResult.failed(None, "interrupted")],
            failures=[(None, "interrupted")],
        )
        d = outcome.to_dict()
        assert d["failures"] == [{"task_id": None, "message": "interrupted"}]
        assert d["results"][0]["success"] is False
        assert d["timed_out"] is False


class TestRunUnit:
    def test_success(self):
        result = run_unit(TaskUnit(id=1, work=lambda: "ok"))
        assert result.success
        assert result.task_id == 1
        assert set(result.metadata) == {"thread", "duration_seconds", "unit"}

    def test_unit_failure_contained(self):
        def work():
            raise UnitFailure(5, "bad input")

        result = run_unit(TaskUnit(id=5, work=work))
        assert not result.success
        assert result.message == "bad input"

    def test_os_error_contained(self):
        def work():
            raise FileNotFoundError("nowhere")

        result = run_unit(TaskUnit(id=2, work=work))
        assert result.message == "file generation error: nowhere"

    def test_unexpected_error_propagates(self):
        def work():
            raise ValueError("surprise")

        with pytest.raises(ValueError):
            run_unit(TaskUnit(id=1, work=work))


class TestDescribeFailure:
    def test_generic(self):
        assert describe_failure(RuntimeError("x")) == "RuntimeError: x"

    def test_unit_failure_uses_message(self):
        assert describe_failure(UnitFailure(1, "why")) == "why"

    def test_os_error(self):
        assert describe_failure(OSError("io")) == "file generation error: io"


def test_file_handle_to_dict():
    handle = FileHandle(task_id=3, name="config.json", path=Path("/tmp/t.json"), kind="json", size=5)
    assert handle.to_dict() == {
        "task_id": 3,
        "name": "config.json",
        "path": str(Path("/tmp/t.json")),
        "kind": "json",
        "size": 5,
    }
