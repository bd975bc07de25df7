"""Tests for failure aggregation."""

from __future__ import annotations

import pytest

from taskbatch.core.errors import AggregateFailure
from taskbatch.execution.aggregate import aggregate, format_failure, raise_for_failures
from taskbatch.execution.models import BatchOutcome, TaskResult


class TestFormatFailure:
    def test_known_id(self):
        assert format_failure(2, "boom") == "task 2: boom"

    def test_unknown_id(self):
        assert format_failure(None, "interrupted") == "task unknown: interrupted"

    def test_missing_message(self):
        assert format_failure(1, None) == "task 1: "


class TestAggregate:
    def test_all_success(self):
        summary = aggregate([TaskResult.succeeded(1, "x"), TaskResult.succeeded(2, "y")])
        assert summary.ok
        assert summary.message == ""
        assert summary.failures == []

    def test_empty(self):
        assert aggregate([]).ok

    def test_lists_every_failure_in_result_order(self):
        results = [
            TaskResult.failed(4, "d"),
            TaskResult.succeeded(1, "x"),
            TaskResult.failed(2, "b"),
            TaskResult.failed(None, "interrupted"),
        ]
        summary = aggregate(results)
        assert not summary.ok
        assert summary.message == "task 4: d, task 2: b, task unknown: interrupted"
        assert summary.failures == [(4, "d"), (2, "b"), (None, "interrupted")]


class TestRaiseForFailures:
    def test_passes_clean_outcome_through(self):
        outcome = BatchOutcome(strategy="futures", submitted=1, results=[TaskResult.succeeded(1, "x")])
        assert raise_for_failures(outcome) is outcome
        assert outcome.failures == []

    def test_raises_with_prefix_and_outcome(self):
        outcome = BatchOutcome(
            strategy="futures",
            submitted=2,
            results=[TaskResult.succeeded(1, "x"), TaskResult.failed(2, "broke")],
        )
        with pytest.raises(AggregateFailure) as exc_info:
            raise_for_failures(outcome)

        exc = exc_info.value
        assert str(exc) == "the following tasks failed: task 2: broke"
        assert exc.outcome is outcome
        assert outcome.failures == [(2, "broke")]
        assert exc.context["failed_ids"] == [2]
