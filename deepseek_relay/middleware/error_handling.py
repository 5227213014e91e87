"""
Error handling middleware.
Centralizes error handling and response formatting for the relay.
"""
import json
import logging
import traceback
from typing import Callable, Optional

from fastapi import Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from deepseek_relay.api.dependencies.upstream import MISSING_CREDENTIAL_MESSAGE
from deepseek_relay.exceptions import ConfigurationError, RelayError

logger = logging.getLogger(__name__)


async def _get_request_body(request: Request) -> Optional[dict]:
    """
    Safely extract request body for error logging.
    """
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


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        msg = error.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts) or "malformed body"


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Report a body that does not match the request schema as a 400.

    A missing upstream credential still wins over a bad body, including one
    that is not JSON at all and so never reaches the credential dependency.
    """
    if not request.app.state.settings.has_credential:
        error = ConfigurationError(MISSING_CREDENTIAL_MESSAGE)
        logger.error(MISSING_CREDENTIAL_MESSAGE)
        return JSONResponse(
            status_code=error.status_code,
            content={"error": error.to_error_message()},
        )

    logger.warning(
        "Validation error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "errors": exc.errors(),
        },
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": f"Invalid request body: {_describe_validation_errors(exc)}"},
    )


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware for centralized error handling and logging."""

    def __init__(self, app, is_production: bool = False):
        super().__init__(app)
        self.is_production = is_production

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)

        except RelayError as e:
            level = logging.ERROR if e.status_code >= 500 else logging.WARNING
            logger.log(
                level,
                "Relay error",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "error": e.message,
                    "error_type": type(e).__name__,
                    "status_code": e.status_code,
                },
            )
            return JSONResponse(
                status_code=e.status_code,
                content={"error": e.to_error_message()},
            )

        except Exception as e:
            body = await _get_request_body(request)

            logger.error(
                "Unhandled error",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "request_body": body,
                    "traceback": None if self.is_production else traceback.format_exc(),
                },
                exc_info=True,
            )

            # Don't expose internal errors in production
            if self.is_production:
                details = "An internal error occurred."
            else:
                details = f"{type(e).__name__}: {e}"

            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": f"Failed to process the request. Details: {details}"},
            )
