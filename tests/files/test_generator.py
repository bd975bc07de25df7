"""Tests for per-task temp file generation."""

from __future__ import annotations

import json

import pytest

from taskbatch.files.generator import FileGenerator, create_temp_file


@pytest.fixture
def generator(temp_dir):
    return FileGenerator(temp_dir)


class TestCreateTempFile:
    def test_writes_utf8(self, temp_dir):
        path = create_temp_file("task_1_", ".txt", "héllo", temp_dir)
        assert path.parent == temp_dir
        assert path.name.startswith("task_1_")
        assert path.suffix == ".txt"
        assert path.read_text(encoding="utf-8") == "héllo"

    def test_unique_paths(self, temp_dir):
        a = create_temp_file("task_1_", ".txt", "a", temp_dir)
        b = create_temp_file("task_1_", ".txt", "b", temp_dir)
        assert a != b


class TestProducers:
    @pytest.mark.parametrize(
        "kind, name, suffix",
        [
            ("text", "report.txt", ".txt"),
            ("csv", "data.csv", ".csv"),
            ("json", "config.json", ".json"),
            ("log", "log.log", ".log"),
            ("markdown", "summary.md", ".md"),
        ],
    )
    def test_handle_shape(self, generator, temp_dir, kind, name, suffix):
        handle = generator.produce(3, kind)
        assert handle.task_id == 3
        assert handle.name == name
        assert handle.kind == kind
        assert handle.path.exists()
        assert handle.path.parent == temp_dir
        assert handle.path.suffix == suffix
        assert handle.path.name.startswith("task_3_")
        assert handle.size == handle.path.stat().st_size > 0

    def test_report_content(self, generator):
        text = generator.create_report_file(1).path.read_text()
        assert text.startswith("Report for task 1.\nGenerated at: ")

    def test_csv_content(self, generator):
        text = generator.create_csv_file(2).path.read_text()
        assert text == "ID,Name,Value\n1,Item1,100\n2,Item2,200\n3,Item3,300"

    def test_json_content(self, generator):
        data = json.loads(generator.create_json_file(3).path.read_text())
        assert data["taskId"] == 3
        assert data["status"] == "completed"
        assert isinstance(data["timestamp"], int)

    def test_log_and_markdown_mention_task(self, generator):
        assert "[INFO] task 4 started" in generator.create_log_file(4).path.read_text()
        assert generator.create_markdown_file(5).path.read_text().startswith("# Task 5 summary")

    def test_unknown_kind(self, generator):
        with pytest.raises(ValueError, match="Unknown file kind"):
            generator.produce(1, "pdf")

    def test_kinds(self, generator):
        assert {"text", "csv", "json", "log", "markdown", "failing-csv"} <= set(generator.kinds)

    def test_default_temp_dir(self):
        handle = FileGenerator().create_report_file(1)
        try:
            assert handle.path.exists()
        finally:
            handle.path.unlink()


class TestFailingProducers:
    @pytest.mark.parametrize(
        "kind, expected",
        [
            ("failing-text", "intentional failure: task 1 report generation failed"),
            ("failing-csv", "intentional failure: task 1 CSV generation failed"),
            ("failing-json", "intentional failure: task 1 JSON generation failed"),
        ],
    )
    def test_always_raise(self, generator, temp_dir, kind, expected):
        with pytest.raises(OSError) as exc_info:
            generator.produce(1, kind)
        assert str(exc_info.value) == expected
        assert list(temp_dir.iterdir()) == []
