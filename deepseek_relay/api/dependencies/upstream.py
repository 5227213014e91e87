"""
Dependencies that hand the upstream configuration and clients to endpoints.
The settings and HTTP client are built once at startup and live on app.state.
"""
import logging

import httpx
from fastapi import Depends, Request

from deepseek_relay.config.settings import Settings
from deepseek_relay.exceptions import ConfigurationError
from deepseek_relay.services.deepseek import DeepSeekClient

logger = logging.getLogger(__name__)

MISSING_CREDENTIAL_MESSAGE = "DeepSeek API key is not provided in environment variables."


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Shared HTTP client opened by the application lifespan."""
    return request.app.state.http_client


def require_upstream_credential(settings: Settings = Depends(get_app_settings)) -> Settings:
    """
    Fail fast when no bearer token is configured.

    Runs before the request body is validated, so every call to a guarded
    endpoint is rejected the same way regardless of what it sends.
    """
    if not settings.has_credential:
        logger.error(MISSING_CREDENTIAL_MESSAGE)
        raise ConfigurationError(MISSING_CREDENTIAL_MESSAGE)
    return settings


def get_deepseek_client(
    settings: Settings = Depends(require_upstream_credential),
    http_client: httpx.AsyncClient = Depends(get_http_client),
) -> DeepSeekClient:
    """Dependency injection for DeepSeekClient."""
    return DeepSeekClient(http_client, settings)
