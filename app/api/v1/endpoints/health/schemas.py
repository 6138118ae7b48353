"""Health check API schemas."""

from typing import Dict
from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Basic health check response schema."""

    status: str = Field(
        ...,
        description="Service health status",
        examples=["healthy"],
    )
    timestamp: str = Field(
        ...,
        description="Response timestamp",
        examples=["2024-01-01T12:00:00Z"],
    )


class DetailedHealthResponse(BaseModel):
    """Detailed health check response schema."""

    status: str = Field(
        ...,
        description="Overall service health status",
        examples=["healthy"],
    )
    timestamp: str = Field(
        ...,
        description="Response timestamp",
        examples=["2024-01-01T12:00:00Z"],
    )
    services: Dict[str, str] = Field(
        ...,
        description="Status of individual services",
        examples=[{"database": "healthy"}],
    )
    version: str = Field(
        ...,
        description="Application version",
        examples=["1.0.0"],
    )
