"""
Pydantic schemas for session endpoints.

The refresh token itself never appears in a body: it travels in an
httponly cookie.
"""

from typing import Literal

from pydantic import BaseModel, Field


class AccessTokenResponse(BaseModel):
    """Response for POST /auth/refresh-token."""
    access_token: str = Field(..., description="Short-lived bearer token for the Authorization header")
    token_type: Literal["bearer"] = Field("bearer", description="Always 'bearer'")
    expires_in: int = Field(..., description="Access token lifetime in seconds", examples=[900])
