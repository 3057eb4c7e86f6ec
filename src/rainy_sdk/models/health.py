"""Health check models."""
from typing import Optional

from pydantic import BaseModel, Field


class ServiceStatus(BaseModel):
    """Status of backend services."""

    database: bool
    redis: Optional[bool] = None
    providers: bool


class HealthStatus(BaseModel):
    """API health."""

    status: str = Field(description='Overall status, e.g. "healthy" or "degraded"')
    timestamp: str
    uptime: float = Field(description="Uptime in seconds")
    services: Optional[ServiceStatus] = Field(
        None, description="Per-service status, reported by the detailed check"
    )
