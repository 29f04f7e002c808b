"""Health check router."""

from datetime import datetime, timezone

from fastapi import APIRouter

from billing_bridge import __version__
from billing_bridge.dependencies import AppSettings
from billing_bridge.schemas.tools import HealthResponse

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(settings: AppSettings):
    """Health check endpoint. No authentication required."""
    return HealthResponse(
        status="healthy",
        service=settings.SERVICE_NAME,
        version=__version__,
        timestamp=datetime.now(timezone.utc),
    ).model_dump(mode="json")
