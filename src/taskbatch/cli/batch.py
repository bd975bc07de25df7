"""
CLI: ``taskbatch batch``: run the archive flow, the demos, and host info.
"""

from __future__ import annotations

import json
from datetime import datetime
from enum import Enum
from pathlib import Path

import typer

from taskbatch.cli.utils import console, err_console, open_service, print_dict, print_outcome
from taskbatch.core.errors import TaskBatchError

app = typer.Typer(no_args_is_help=True)


class Strategy(str, Enum):
    futures = "futures"
    latch = "latch"


@app.command("run")
def run(
    fail: bool = typer.Option(False, "--fail", help="Force task 2 to fail"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Where to write the ZIP"),
) -> None:
    """Generate the five files in parallel and write them as one ZIP."""
    with open_service() as service:
        try:
            if fail:
                data = service.create_files_with_failure_and_archive()
            else:
                data = service.create_files_and_archive()
        except TaskBatchError as exc:
            err_console.print(f"[bold red]Error[/bold red] ({exc.code}): {exc.message}")
            raise typer.Exit(code=1) from exc

    prefix = "failure_test_files" if fail else "service_generated_files"
    target = output or Path(f"{prefix}_{datetime.now():%Y%m%d_%H%M%S}.zip")
    target.write_bytes(data)
    console.print(f"[bold green]Wrote[/bold green] {target} ({len(data)} bytes)")


@app.command("demo")
def demo(
    strategy: Strategy = typer.Argument(..., help="Batch strategy to demonstrate"),
    fail: list[int] = typer.Option([], "--fail", "-f", help="Task ids (1-5) to force into failure"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Run five sleeping tasks through the chosen strategy."""
    with open_service() as service:
        try:
            outcome = service.runner(strategy.value).run_batch(service.demo_units(fail))
        except TaskBatchError as exc:
            err_console.print(f"[bold red]Error[/bold red] ({exc.code}): {exc.message}")
            raise typer.Exit(code=1) from exc

    if json_out:
        typer.echo(json.dumps(outcome.to_dict(), indent=2, default=str))
    else:
        print_outcome(outcome)


@app.command("info")
def info(json_out: bool = typer.Option(False, "--json")) -> None:
    """Show host and pool information."""
    with open_service() as service:
        data = service.system_info()

    if json_out:
        typer.echo(json.dumps(data, indent=2, default=str))
    else:
        print_dict(data, title="System info")
