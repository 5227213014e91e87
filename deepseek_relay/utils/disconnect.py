"""
Cancellation of in-flight work when the inbound client goes away.
"""
import asyncio
import logging
from typing import Awaitable, TypeVar

from starlette.requests import Request

from deepseek_relay.exceptions import ClientDisconnectedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_until_disconnected(
    request: Request, work: Awaitable[T], poll_interval: float = 0.5
) -> T:
    """
    Await ``work`` while watching the inbound connection.

    If the client disconnects first, the work is cancelled (closing any open
    upstream stream) and ClientDisconnectedError is raised.

    Args:
        request: The inbound request whose connection is watched
        work: Coroutine or future to run
        poll_interval: Seconds between disconnect checks
    """
    task = asyncio.ensure_future(work)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval)
            if task in done:
                return task.result()

            if await request.is_disconnected():
                logger.warning(
                    f"Client disconnected from {request.url.path}, cancelling upstream calls"
                )
                raise ClientDisconnectedError("Client closed the connection.")
    finally:
        if not task.done():
            task.cancel()
            await asyncio.wait({task})
