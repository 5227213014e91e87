"""
Chat completion endpoints.

Relays one message to DeepSeek and returns the full streamed answer as JSON.
"""
from fastapi import APIRouter, Depends, Request, status

from deepseek_relay.api.dependencies.upstream import (
    get_deepseek_client,
    require_upstream_credential,
)
from deepseek_relay.api.models import ChatRequest, ChatResponse, ErrorResponse
from deepseek_relay.config.settings import Settings
from deepseek_relay.controllers.chat_controller import ChatController
from deepseek_relay.services.deepseek import DeepSeekClient
from deepseek_relay.utils.disconnect import run_until_disconnected

# ============================================================================
# Dependency Injection
# ============================================================================


def get_chat_controller(
    settings: Settings = Depends(require_upstream_credential),
    client: DeepSeekClient = Depends(get_deepseek_client),
) -> ChatController:
    """Dependency injection for ChatController."""
    return ChatController(client, settings)


# ============================================================================
# Router
# ============================================================================

router = APIRouter()


# ============================================================================
# Endpoints
# ============================================================================


@router.post(
    "/chat/completions",
    status_code=status.HTTP_200_OK,
    response_model=ChatResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        500: {"model": ErrorResponse, "description": "Missing credential or upstream failure"},
    },
)
async def chat_completions(
    payload: ChatRequest,
    http_request: Request,
    controller: ChatController = Depends(get_chat_controller),
) -> ChatResponse:
    """
    Chat completion endpoint.

    Clears the DeepSeek conversation context, sends the message, drains the
    streamed answer and returns it as ``{"response": ...}``. Expects the
    DEEPSEEK environment variable to hold the bearer token.
    """
    # Validate BEFORE touching the upstream
    controller._validate_request(payload)

    return await run_until_disconnected(
        http_request,
        controller.complete(payload),
        poll_interval=controller.settings.disconnect_poll_seconds,
    )
