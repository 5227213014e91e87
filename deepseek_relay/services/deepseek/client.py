"""
Async client for the DeepSeek chat API.

Wraps the two upstream calls the relay makes: resetting the conversation
context of a model class, and streaming a completion for one message.
"""
import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from deepseek_relay.config.settings import Settings
from deepseek_relay.exceptions import UpstreamTransportError
from deepseek_relay.services.deepseek.models import ClearContextPayload, CompletionPayload
from deepseek_relay.services.deepseek.stream import DeltaAccumulator

logger = logging.getLogger(__name__)

CLEAR_CONTEXT_PATH = "clear_context"
COMPLETIONS_PATH = "completions"


def _describe(error: Exception) -> str:
    return str(error) or type(error).__name__


class DeepSeekClient:
    """Client for the DeepSeek clear_context and completions endpoints."""

    def __init__(self, http_client: httpx.AsyncClient, settings: Settings):
        """
        Args:
            http_client: Shared async HTTP client (connection pool)
            settings: Application settings holding the bearer token and base URL
        """
        self.http_client = http_client
        self.settings = settings

    def _url(self, path: str) -> str:
        return f"{self.settings.deepseek_api_url.rstrip('/')}/{path}"

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.settings.deepseek_api_key}",
            "Content-Type": "application/json",
        }

    async def clear_context(self, model_class: Optional[str] = None) -> Any:
        """
        Reset the upstream conversation context for a model class.

        After the upstream acknowledges the reset, waits
        ``settings.context_settle_seconds`` so the reset is applied before
        the next completion call. Each call pays the delay again.

        Args:
            model_class: Model class to reset, defaults to the configured one

        Returns:
            The upstream acknowledgment (decoded JSON, or raw text)

        Raises:
            UpstreamTransportError: On network failure or a non-2xx status
        """
        payload = ClearContextPayload(
            model_class=model_class or self.settings.default_model_class
        )

        try:
            response = await self.http_client.post(
                self._url(CLEAR_CONTEXT_PATH),
                json=payload.model_dump(),
                headers=self._headers(),
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(f"Error clearing chat context: HTTP {status_code}")
            raise UpstreamTransportError(
                f"Request failed with status code {status_code}",
                upstream_status=status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Error clearing chat context: {_describe(e)}")
            raise UpstreamTransportError(_describe(e)) from e

        try:
            ack = response.json()
        except ValueError:
            ack = response.text

        logger.info(f"Chat context cleared: {ack}")

        await asyncio.sleep(self.settings.context_settle_seconds)
        return ack

    async def send_message(self, message: str, model: Optional[str] = None) -> str:
        """
        Send a message and collect the streamed answer.

        The response body is read incrementally; every ``data:`` line whose
        JSON carries ``choices[0].delta.content`` adds its text to the
        answer. Malformed lines are logged and skipped.

        Args:
            message: Message content to send
            model: Model class for the request, defaults to the configured one

        Returns:
            All delta texts concatenated in arrival order

        Raises:
            UpstreamTransportError: On network failure, a non-2xx status, or
                an error while the stream is being read. Partial text is
                discarded.
        """
        payload = CompletionPayload(
            message=message,
            model_class=model or self.settings.default_model_class,
        )
        accumulator = DeltaAccumulator()

        try:
            async with self.http_client.stream(
                "POST",
                self._url(COMPLETIONS_PATH),
                json=payload.model_dump(),
                headers=self._headers(),
            ) as response:
                if response.is_error:
                    await response.aread()
                    logger.error(
                        f"Error sending message: HTTP {response.status_code} {response.text[:500]}"
                    )
                    raise UpstreamTransportError(
                        f"Request failed with status code {response.status_code}",
                        upstream_status=response.status_code,
                    )

                async for chunk in response.aiter_text():
                    accumulator.feed(chunk)
        except httpx.HTTPError as e:
            logger.error(f"Error sending message: {_describe(e)}")
            raise UpstreamTransportError(_describe(e)) from e

        return accumulator.finish()
