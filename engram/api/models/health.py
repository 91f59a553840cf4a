"""Health and status response models."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Liveness response."""

    status: Literal["healthy"] = "healthy"
    version: str
    timestamp: datetime


class ReadinessResponse(BaseModel):
    """Readiness response; 503 is returned alongside ``ready=False``."""

    ready: bool
    database_ready: bool


class StatusResponse(BaseModel):
    """Service status with the stored episode count."""

    status: str = Field(..., description="'operational' or 'unavailable'")
    episode_count: int
    database_ready: bool
    embedding_provider: str | None = None
