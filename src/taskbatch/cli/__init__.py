"""
CLI layer for taskbatch.

A Typer application whose sub-commands call :class:`~taskbatch.service.BatchService`
directly; this package only handles argument parsing and terminal output.

Entry point::

    taskbatch --help
"""

from taskbatch.cli.app import app

__all__ = ["app"]
