"""
Health check endpoint schemas.

The health endpoint is PUBLIC (no authentication required).
"""

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    """Response model for GET /health, used by load balancers and deploy checks."""

    model_config = ConfigDict(json_schema_extra={"example": {"status": "ok", "storage": "supabase"}})

    status: str = Field(
        default="ok",
        description="Health status of the API (always 'ok' if responding)",
        examples=["ok"],
    )
    storage: str = Field(..., description="Configured storage backend")
