"""Pydantic schemas for health check responses."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response body for the health check endpoint."""

    status: Literal["ok"] = Field(default="ok", description="Service status")
    environment: str = Field(description="Current app environment (e.g. dev, prod)")
    database: Literal["connected", "disconnected"] | None = Field(
        default=None,
        description="Database connectivity status when check is performed",
    )
    accounts_loaded: bool = Field(
        default=False,
        description="Whether the in-memory account set has been loaded from the store",
    )
    in_flight: int = Field(
        default=0,
        ge=0,
        description="Number of account transitions currently waiting on the store",
    )
