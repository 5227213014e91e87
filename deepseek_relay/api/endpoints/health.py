"""
Health check endpoints.
Simple endpoint for monitoring application health and status.
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from deepseek_relay import __version__
from deepseek_relay.api.dependencies.upstream import get_app_settings
from deepseek_relay.api.models import HealthResponse
from deepseek_relay.config.settings import Settings

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_app_settings)):
    """Basic health check endpoint. Does not call the upstream."""
    return HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        environment=settings.environment,
        upstream_configured=settings.has_credential,
    )
