"""File collaborators: per-task temp file generation and ZIP assembly."""

from taskbatch.files.archive import ArchiveAssembler, cleanup_temp_files, create_zip_archive
from taskbatch.files.generator import FileGenerator, create_temp_file

__all__ = [
    "ArchiveAssembler",
    "FileGenerator",
    "cleanup_temp_files",
    "create_temp_file",
    "create_zip_archive",
]
