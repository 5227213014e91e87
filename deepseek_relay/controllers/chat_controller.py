"""
Controller for relaying chat completions to DeepSeek.

Sequences one relay: clear the upstream context, send the message, and
return the combined streamed answer.
"""
import asyncio
import logging

from deepseek_relay.api.models.chat import ChatRequest, ChatResponse
from deepseek_relay.config.settings import VALID_MODELS, Settings
from deepseek_relay.exceptions import ChatValidationError, UpstreamTransportError
from deepseek_relay.services.deepseek import DeepSeekClient

logger = logging.getLogger(__name__)


class ChatController:
    """Controller for chat completion operations."""

    def __init__(self, client: DeepSeekClient, settings: Settings):
        self.client = client
        self.settings = settings

    def _validate_request(self, request: ChatRequest) -> None:
        """
        Validate a chat completion request.

        Args:
            request: ChatRequest with the message and optional model

        Raises:
            ChatValidationError: If the message is missing or empty, or the
                model is not one of VALID_MODELS
        """
        if not request.message:
            logger.error("Message is required.")
            raise ChatValidationError("Message is required.")

        if request.model and request.model not in VALID_MODELS:
            valid = ", ".join(VALID_MODELS)
            logger.error(f"Invalid model: {request.model}. Valid models are: {valid}")
            raise ChatValidationError(f"Invalid model. Valid models are: {valid}")

    async def complete(self, request: ChatRequest) -> ChatResponse:
        """
        Run one relay for a validated request.

        NOTE: Validation should be done BEFORE calling this method (in the
        endpoint) so that a bad request never reaches the upstream.

        Raises:
            UpstreamTransportError: If either upstream call fails or the
                configured deadline passes. Nothing partial is returned.
        """
        timeout = self.settings.request_timeout_seconds
        if timeout is None:
            return await self._relay(request)

        try:
            return await asyncio.wait_for(self._relay(request), timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"Relay exceeded the {timeout}s deadline")
            raise UpstreamTransportError(
                f"Upstream request timed out after {timeout} seconds"
            ) from e

    async def _relay(self, request: ChatRequest) -> ChatResponse:
        model = request.model or None

        await self.client.clear_context(model)

        logger.info(f"Request Body: {request.model_dump()}")

        combined = await self.client.send_message(request.message, model)

        logger.info(f"Combined Response: {combined}")
        return ChatResponse(response=combined)
