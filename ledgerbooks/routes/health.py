"""
Health check route.

Public (no Authorization header). Reports which storage backend the
process was started with so deploy checks can catch a service that came up
on the in-memory store by mistake.
"""

from fastapi import APIRouter

from ledgerbooks.config import settings
from ledgerbooks.schemas.health import HealthResponse
from ledgerbooks.utils.logging import get_logger

logger = get_logger(__name__)

# Mounted at root level in main.py
router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health",
    description="Liveness probe for load balancers and deploy checks. Does not query the database.",
)
async def health_check() -> HealthResponse:
    logger.debug(f"Health check (storage={settings.STORAGE_BACKEND})")
    return HealthResponse(status="ok", storage=settings.STORAGE_BACKEND)
