"""Tests for structured logging configuration."""

from __future__ import annotations

import json

import pytest
import structlog

from taskbatch.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)


@pytest.fixture(autouse=True)
def _restore_logging():
    yield
    clear_context()
    configure_logging(level="WARNING", json_format=True, cache_loggers=False)


def _last_json_line(text: str) -> dict:
    lines = [line for line in text.splitlines() if line.strip()]
    return json.loads(lines[-1])


class TestJsonFormat:
    def test_emits_ecs_fields(self, capsys):
        configure_logging(level="INFO", json_format=True, service="svc-test", cache_loggers=False)
        get_logger("t").info("batch.start", units=5)

        record = _last_json_line(capsys.readouterr().out)
        assert record["event"] == "batch.start"
        assert record["units"] == 5
        assert record["log.level"] == "info"
        assert record["service.name"] == "svc-test"
        assert "@timestamp" in record

    def test_level_filtering(self, capsys):
        configure_logging(level="ERROR", json_format=True, cache_loggers=False)
        get_logger("t").info("quiet")
        assert capsys.readouterr().out == ""


class TestContext:
    def test_log_context_binds_and_unbinds(self, capsys):
        configure_logging(level="INFO", json_format=True, cache_loggers=False)
        log = get_logger("t")

        with LogContext(batch_id="b-1"):
            log.info("inside")
            inside = _last_json_line(capsys.readouterr().out)
        log.info("outside")
        outside = _last_json_line(capsys.readouterr().out)

        assert inside["batch_id"] == "b-1"
        assert "batch_id" not in outside

    def test_clear_context(self):
        bind_context(request_id="r-1")
        clear_context()
        assert structlog.contextvars.get_contextvars() == {}
