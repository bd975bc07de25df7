"""
CLI: ``taskbatch serve``: start the API server.
"""

from __future__ import annotations

import typer
import uvicorn

from taskbatch.cli.utils import console
from taskbatch.core.settings import get_settings

app = typer.Typer(no_args_is_help=True)


@app.command("start")
def start(
    host: str | None = typer.Option(None, "--host", "-h", help="Bind address"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on changes"),
    log_level: str = typer.Option("info", "--log-level"),
) -> None:
    """Start the taskbatch REST API server."""
    settings = get_settings()
    host = host or settings.host
    port = port or settings.port

    console.print(f"[bold green]Starting taskbatch API[/bold green] on {host}:{port}")
    # One worker process: the pool is per-process and owned by the app.
    uvicorn.run(
        "taskbatch.api:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        workers=1,
        log_level=log_level,
    )
