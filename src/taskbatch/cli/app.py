"""
Root Typer application for the taskbatch CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from taskbatch.cli.batch import app as batch_app
from taskbatch.cli.serve import app as serve_app

app = Typer(
    name="taskbatch",
    help="taskbatch: run task batches on a bounded worker pool.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        from taskbatch import __version__

        typer.echo(f"taskbatch {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """taskbatch CLI: run batches, demos, and the API server."""


app.add_typer(batch_app, name="batch", help="Run task batches and demos.")
app.add_typer(serve_app, name="serve", help="Start the API server.")
