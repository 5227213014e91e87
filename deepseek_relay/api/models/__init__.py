from .chat import ChatMessage, ChatRequest, ChatResponse
from .error import ErrorResponse
from .health import HealthResponse

__all__ = [
    "ErrorResponse",
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "HealthResponse",
]
