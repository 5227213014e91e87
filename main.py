"""
DeepSeek Chat Relay
FastAPI application relaying chat messages to the DeepSeek chat API.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from deepseek_relay import __version__
from deepseek_relay.api.routers import api_router
from deepseek_relay.config.settings import Settings, get_settings
from deepseek_relay.middleware.error_handling import (
    ErrorHandlingMiddleware,
    request_validation_exception_handler,
)
from deepseek_relay.middleware.request_logging import RequestLoggingMiddleware

API_PREFIX = "/api/v1"

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """Configure root logging from settings."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="[%(asctime)s] %(levelname)s %(name)s - %(message)s",
    )


def build_lifespan(settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
    """Create the lifespan handler owning the shared upstream HTTP client."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger.info(f"Starting {settings.app_name} ({settings.environment})")
        if not settings.has_credential:
            logger.error("DEEPSEEK is not set, every chat request will be rejected")

        timeout = httpx.Timeout(settings.request_timeout_seconds)
        async with httpx.AsyncClient(transport=transport, timeout=timeout) as client:
            app.state.http_client = client
            yield

        # Shutdown
        logger.info("Shutting down...")

    return lifespan


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to run with, loaded from the environment if omitted
        transport: Optional httpx transport for upstream calls (tests use
            httpx.MockTransport)
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Relays chat messages to the DeepSeek chat API",
        version=__version__,
        lifespan=build_lifespan(settings, transport),
        redirect_slashes=False,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(ErrorHandlingMiddleware, is_production=settings.is_production)
    if settings.enable_request_logging:
        app.add_middleware(RequestLoggingMiddleware, is_production=settings.is_production)

    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)

    app.include_router(api_router, prefix=API_PREFIX)

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    logger.info(
        f"Server running on http://{settings.host}:{settings.port}{API_PREFIX}/chat/completions"
    )
    uvicorn.run(app, host=settings.host, port=settings.port)
