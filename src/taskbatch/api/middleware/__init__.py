"""Starlette middleware for the taskbatch API."""

from taskbatch.api.middleware.request_id import RequestIDMiddleware
from taskbatch.api.middleware.timing import TimingMiddleware

__all__ = ["RequestIDMiddleware", "TimingMiddleware"]
