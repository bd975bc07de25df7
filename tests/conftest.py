"""
Shared pytest fixtures and configuration for taskbatch tests.

This module provides:
- Fast engine settings (short demo sleeps, short timeouts)
- A worker pool and batch service that are always shut down
- A per-test temp directory for generated files

Usage:
    Fixtures are auto-discovered by pytest:

    def test_something(service):
        service.create_files_and_archive()
"""

import sys
from collections.abc import Generator
from pathlib import Path

import pytest

# Ensure taskbatch package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from taskbatch.core.logging import configure_logging
from taskbatch.core.settings import TaskBatchSettings
from taskbatch.execution.pool import WorkerPool
from taskbatch.service import BatchService


def pytest_configure(config: pytest.Config) -> None:
    """Quiet, uncached logging so swapped stdout streams never leak between tests."""
    configure_logging(level="WARNING", json_format=True, cache_loggers=False)


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.path).relative_to(Path(__file__).parent)
        if test_path.parts and test_path.parts[0] in {"api", "cli"}:
            item.add_marker(pytest.mark.integration)
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration", "slow"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Engine fixtures
# =============================================================================


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Directory the file generator writes into."""
    directory = tmp_path / "generated"
    directory.mkdir()
    return directory


@pytest.fixture
def settings(temp_dir: Path) -> TaskBatchSettings:
    """Settings with sub-second demo sleeps and a short grace period."""
    return TaskBatchSettings(
        pool_size=4,
        batch_timeout=5.0,
        shutdown_grace_period=2.0,
        demo_min_sleep=0.01,
        demo_max_sleep=0.05,
        temp_dir=temp_dir,
        _env_file=None,
    )


@pytest.fixture
def pool() -> Generator[WorkerPool, None, None]:
    """A four-thread pool, shut down after the test."""
    p = WorkerPool(max_workers=4)
    yield p
    p.shutdown(grace_period=2.0)


@pytest.fixture
def service(settings: TaskBatchSettings) -> Generator[BatchService, None, None]:
    """A batch service over its own pool, shut down after the test."""
    svc = BatchService(settings)
    yield svc
    svc.shutdown()
