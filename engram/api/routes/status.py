"""Service status endpoint."""

from fastapi import APIRouter

from engram.api.dependencies import MemoryServiceDep
from engram.api.models.health import StatusResponse

router = APIRouter()


@router.get("/status", response_model=StatusResponse)
async def get_status(service: MemoryServiceDep) -> StatusResponse:
    """Report database readiness and the number of stored episodes."""
    status = await service.status()
    return StatusResponse(**status.model_dump())
