"""Dependency injection for API routes.

The MemoryService is created by the application lifespan (or handed to
``create_app`` directly) and kept on ``app.state``; routes receive it through
this dependency, which tests can override.
"""

from typing import Annotated

from fastapi import Depends, Request

from engram.memory.service import MemoryService


def get_memory_service(request: Request) -> MemoryService:
    """Get the MemoryService bound to this application.

    Raises:
        RuntimeError: If the application was started without a service
    """
    service: MemoryService | None = getattr(request.app.state, "memory_service", None)
    if service is None:
        raise RuntimeError("memory service is not initialized")
    return service


MemoryServiceDep = Annotated[MemoryService, Depends(get_memory_service)]
