"""Common schemas and error responses."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Uniform error body."""

    error: str = Field(..., description="Human-readable error message")

    model_config = {"json_schema_extra": {"example": {"error": "Player not found"}}}


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Always 'ok' when the process answers", examples=["ok"])
    ts: datetime = Field(..., description="Server time (UTC)")
