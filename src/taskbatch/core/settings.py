"""Settings for the taskbatch service, CLI and engine.

Configuration is explicit, validated, and environment-driven: every field
can be overridden with a ``TASKBATCH_``-prefixed environment variable or a
``.env`` file.

Fields
──────
host / port            : Bind address for the HTTP server
debug / log_level      : Observability knobs
api_prefix             : URL prefix for the batch endpoints
pool_size              : Worker threads (``None`` → host core count)
batch_timeout          : Join/latch wait budget per batch, seconds
shutdown_grace_period  : How long ``shutdown()`` waits for in-flight work
demo_min_sleep/max     : Simulated work duration range of the demo units
temp_dir               : Where per-task temp files are written (``None`` → system default)

Examples:
    >>> from taskbatch.core.settings import TaskBatchSettings
    >>> TaskBatchSettings(pool_size=2, batch_timeout=5).batch_timeout
    5.0
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TaskBatchSettings(BaseSettings):
    """Settings shared by the API, the CLI and the batch service.

    Order of precedence (highest → lowest):
        1. Constructor arguments
        2. Environment variables (``TASKBATCH_POOL_SIZE``, etc.)
        3. ``.env`` file
        4. Defaults below
    """

    model_config = SettingsConfigDict(
        env_prefix="TASKBATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Server ───────────────────────────────────────────────────────────
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8080, description="Bind port")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Log level")

    # ── API ──────────────────────────────────────────────────────────────
    api_prefix: str = Field(default="/api/threads", description="URL prefix for batch endpoints")
    api_title: str = Field(default="taskbatch API", description="OpenAPI title")
    api_version: str = Field(default="0.1.0", description="OpenAPI version string")

    # ── Engine ───────────────────────────────────────────────────────────
    pool_size: int | None = Field(
        default=None, ge=1, description="Worker threads; None uses the host core count"
    )
    batch_timeout: float = Field(default=30.0, gt=0, description="Batch wait budget (seconds)")
    shutdown_grace_period: float = Field(
        default=60.0, ge=0, description="Seconds shutdown waits for in-flight work"
    )

    # ── Demo units ───────────────────────────────────────────────────────
    demo_min_sleep: float = Field(default=1.0, ge=0, description="Shortest simulated task (seconds)")
    demo_max_sleep: float = Field(default=3.0, ge=0, description="Longest simulated task (seconds)")

    # ── Files ────────────────────────────────────────────────────────────
    temp_dir: Path | None = Field(default=None, description="Directory for per-task temp files")

    @model_validator(mode="after")
    def _check_sleep_range(self) -> TaskBatchSettings:
        if self.demo_max_sleep < self.demo_min_sleep:
            raise ValueError(
                f"demo_max_sleep ({self.demo_max_sleep}) must be >= demo_min_sleep ({self.demo_min_sleep})"
            )
        return self


@lru_cache(maxsize=1)
def get_settings() -> TaskBatchSettings:
    """Cached settings: loaded once per process."""
    return TaskBatchSettings()
