"""Archive assembly: bundle a batch's files into one in-memory ZIP.

``ArchiveAssembler.archive()`` owns the per-task temp files for the rest of
the request: whether or not the ZIP is built, every handle it was given is
deleted before it returns. Deletion problems are logged as
``CleanupFailure`` and never replace the batch's own outcome.
"""

from __future__ import annotations

import io
import warnings
import zipfile
from collections.abc import Iterable, Sequence
from pathlib import Path

from taskbatch.core.errors import CleanupFailure
from taskbatch.core.logging import get_logger
from taskbatch.execution.models import FileHandle

logger = get_logger(__name__)

BUFFER_SIZE = 64 * 1024

ArchiveEntry = Path | tuple[str, Path]


def _entry(item: ArchiveEntry) -> tuple[str, Path]:
    if isinstance(item, tuple):
        name, path = item
        return name, Path(path)
    path = Path(item)
    return path.name, path


def create_zip_archive(entries: Iterable[ArchiveEntry]) -> bytes:
    """Build a ZIP in memory from ``entries``.

    Each entry is a path (archived under its base name) or an
    ``(arcname, path)`` pair. Paths that no longer exist are skipped.
    Same-named entries are written as-is; readers keep the last one.
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for item in entries:
            name, path = _entry(item)
            if not path.exists():
                logger.debug("archive.skip_missing", path=str(path))
                continue
            with warnings.catch_warnings():
                warnings.filterwarnings("ignore", message="Duplicate name", category=UserWarning)
                with path.open("rb") as src, zf.open(name, "w") as dst:
                    while chunk := src.read(BUFFER_SIZE):
                        dst.write(chunk)
    return buffer.getvalue()


def cleanup_temp_files(paths: Iterable[Path]) -> int:
    """Delete each path if present. Best-effort; returns how many were removed."""
    removed = 0
    for path in paths:
        try:
            if Path(path).exists():
                Path(path).unlink()
                removed += 1
        except OSError as exc:
            failure = CleanupFailure(str(path), exc)
            logger.warning("archive.cleanup_failed", **failure.to_dict())
    return removed


class ArchiveAssembler:
    """Turns the file handles of a successful batch into ZIP bytes."""

    def archive(self, handles: Sequence[FileHandle]) -> bytes:
        """Archive ``handles`` under their logical names, then delete them all."""
        try:
            data = create_zip_archive((h.name, h.path) for h in handles)
            logger.info("archive.created", entries=len(handles), size=len(data))
            return data
        finally:
            removed = cleanup_temp_files(h.path for h in handles)
            logger.info("archive.cleanup", removed=removed, requested=len(handles))
