"""
Error taxonomy for the relay.

Every error raised on purpose by the relay derives from RelayError and
carries the HTTP status it should be reported with.
"""
from typing import Optional

from fastapi import status


class RelayError(Exception):
    """Base class for errors that end a relay request."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_error_message(self) -> str:
        """Text placed in the ``error`` field of the JSON response."""
        return self.message


class ConfigurationError(RelayError):
    """The relay is missing configuration it needs to call upstream."""


class ChatValidationError(RelayError):
    """The inbound chat request is malformed."""

    status_code = status.HTTP_400_BAD_REQUEST


class UpstreamTransportError(RelayError):
    """A call to the DeepSeek API failed or returned a non-success status."""

    def __init__(self, message: str, upstream_status: Optional[int] = None):
        super().__init__(message)
        self.upstream_status = upstream_status

    def to_error_message(self) -> str:
        return f"Failed to process the request. Details: {self.message}"


class ClientDisconnectedError(RelayError):
    """The inbound client closed the connection before the relay finished."""

    status_code = 499


class StreamParseError(ValueError):
    """A single event line could not be decoded. Never leaves the stream reader."""

    def __init__(self, line: str, reason: str):
        super().__init__(f"{reason}: {line!r}")
        self.line = line
        self.reason = reason
