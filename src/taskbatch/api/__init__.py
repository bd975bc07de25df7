"""
HTTP layer for taskbatch.

Thin glue around :class:`~taskbatch.service.BatchService`: routes trigger
batches and translate outcomes and errors into responses.
"""

from taskbatch.api.app import create_app

__all__ = ["create_app"]
