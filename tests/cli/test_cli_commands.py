"""Tests for the taskbatch CLI.

Commands run in-process through Typer's CliRunner with the settings
lookup patched to the test settings.
"""

from __future__ import annotations

import io
import json
import zipfile

import pytest
from typer.testing import CliRunner

from taskbatch import __version__
from taskbatch.cli import app
from taskbatch.core.logging import configure_logging

runner = CliRunner()


def _flat(text: str) -> str:
    """Collapse Rich's line wrapping so messages can be matched as one line."""
    return " ".join(text.split())


@pytest.fixture(autouse=True)
def cli_settings(settings, monkeypatch):
    quiet = settings.model_copy(update={"log_level": "WARNING"})
    monkeypatch.setattr("taskbatch.cli.utils.get_settings", lambda: quiet)
    monkeypatch.setattr("taskbatch.cli.serve.get_settings", lambda: quiet)
    yield quiet
    configure_logging(level="WARNING", json_format=True, cache_loggers=False)


class TestRoot:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"taskbatch {__version__}" in result.output

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert "batch" in result.output
        assert "serve" in result.output


class TestBatchRun:
    def test_writes_zip(self, tmp_path, temp_dir):
        target = tmp_path / "out.zip"
        result = runner.invoke(app, ["batch", "run", "--output", str(target)])

        assert result.exit_code == 0, result.output
        with zipfile.ZipFile(io.BytesIO(target.read_bytes())) as zf:
            assert len(zf.namelist()) == 5
        assert list(temp_dir.iterdir()) == []

    def test_failure_exits_1(self, tmp_path):
        target = tmp_path / "out.zip"
        result = runner.invoke(app, ["batch", "run", "--fail", "--output", str(target)])

        assert result.exit_code == 1
        output = _flat(result.output)
        assert "AGGREGATE_FAILURE" in output
        assert "task 2: file generation error" in output
        assert not target.exists()


class TestBatchDemo:
    def test_futures_json(self):
        result = runner.invoke(app, ["batch", "demo", "futures", "--json"])

        assert result.exit_code == 0, result.output
        body = json.loads(result.output)
        assert body["strategy"] == "futures"
        assert [r["task_id"] for r in body["results"]] == [1, 2, 3, 4, 5]

    def test_futures_failure_exits_1(self):
        result = runner.invoke(app, ["batch", "demo", "futures", "-f", "1"])
        assert result.exit_code == 1
        assert "task 1: simulated failure" in _flat(result.output)

    def test_latch_table_reports_failures(self):
        result = runner.invoke(app, ["batch", "demo", "latch", "--fail", "3"])

        assert result.exit_code == 0, result.output
        assert "latch batch" in result.output
        assert "4/5 succeeded" in _flat(result.output)

    def test_unknown_strategy(self):
        result = runner.invoke(app, ["batch", "demo", "threads"])
        assert result.exit_code != 0


class TestBatchInfo:
    def test_json(self):
        result = runner.invoke(app, ["batch", "info", "--json"])
        assert result.exit_code == 0, result.output
        body = json.loads(result.output)
        assert body["pool_size"] == 4
        assert body["pool_shutdown"] is False

    def test_table(self):
        result = runner.invoke(app, ["batch", "info"])
        assert result.exit_code == 0
        assert "System info" in result.output


class TestServe:
    def test_start_runs_uvicorn_factory(self, monkeypatch):
        calls = []
        monkeypatch.setattr("taskbatch.cli.serve.uvicorn.run", lambda *a, **kw: calls.append((a, kw)))

        result = runner.invoke(app, ["serve", "start", "--port", "9001"])

        assert result.exit_code == 0, result.output
        (args, kwargs), = calls
        assert args == ("taskbatch.api:create_app",)
        assert kwargs["factory"] is True
        assert kwargs["port"] == 9001
        assert kwargs["workers"] == 1
