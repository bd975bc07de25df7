"""
FastAPI dependency injection: the app-owned batch service.

Usage in routers::

    from taskbatch.api.deps import Service

    @router.get("/system-info")
    def system_info(service: Service):
        ...
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from taskbatch.service import BatchService


def get_service(request: Request) -> BatchService:
    """The single :class:`BatchService` created by ``create_app``."""
    return request.app.state.service


Service = Annotated[BatchService, Depends(get_service)]
