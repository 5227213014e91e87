"""
Request logging middleware.
Logs one JSON line per relayed request and one per response.
"""
import json
import logging
import time
from typing import Any, Callable, Dict, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

MESSAGE_PREVIEW_CHARS = 80


def summarize_chat_body(body: Any, is_production: bool = False) -> Optional[Dict[str, Any]]:
    """
    Reduce a chat completion body to what is worth logging.

    Keeps the model and the size of ``request.message``. Outside production a
    short preview of the message is added; in production the text is never
    logged.
    """
    if not isinstance(body, dict):
        return None

    wrapper = body.get("request")
    message = wrapper.get("message") if isinstance(wrapper, dict) else None

    summary: Dict[str, Any] = {"model": body.get("model")}
    if isinstance(message, str):
        summary["message_chars"] = len(message)
        if not is_production:
            summary["message_preview"] = message[:MESSAGE_PREVIEW_CHARS]
    else:
        summary["message_chars"] = None

    return summary


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging relay requests and responses."""

    def __init__(self, app, is_production: bool = False, ignore_paths: tuple = ()):
        super().__init__(app)
        self.is_production = is_production
        self.ignore_paths = ignore_paths or (
            "/api/v1/health",
            "/docs",
            "/openapi.json",
            "/redoc",
            "/favicon.ico",
        )

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.ignore_paths:
            return await call_next(request)

        start_time = time.time()

        request_log = {
            "type": "request",
            "method": request.method,
            "path": request.url.path,
            "client_ip": self._get_client_ip(request),
        }
        if request.method == "POST":
            chat = summarize_chat_body(await self._get_request_body(request), self.is_production)
            if chat is not None:
                request_log["chat"] = chat

        logger.info(json.dumps(request_log, ensure_ascii=False))

        response = await call_next(request)

        process_time = time.time() - start_time

        response_log = {
            "type": "response",
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "process_time_ms": round(process_time * 1000, 2),
            "response_bytes": response.headers.get("content-length"),
        }

        # Upstream failures surface as 5xx, bad chat requests as 4xx
        if response.status_code >= 500:
            logger.error(json.dumps(response_log))
        elif response.status_code >= 400:
            logger.warning(json.dumps(response_log))
        else:
            logger.info(json.dumps(response_log))

        response.headers["X-Process-Time"] = str(process_time)

        return response

    def _get_client_ip(self, request: Request) -> str:
        """Extract client IP address, preferring proxy headers."""
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()

        if request.client:
            return request.client.host

        return "unknown"

    async def _get_request_body(self, request: Request) -> Any:
        """Read and decode the JSON body, caching it for the handlers. None if unreadable."""
        try:
            if hasattr(request.state, "body"):
                body_bytes = request.state.body
            else:
                body_bytes = await request.body()
                request.state.body = body_bytes

            if not body_bytes:
                return None

            return json.loads(body_bytes.decode("utf-8"))
        except (UnicodeDecodeError, ValueError, RuntimeError):
            return None
