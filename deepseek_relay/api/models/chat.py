"""
Request and response models for the chat completions endpoint.
"""
from typing import Optional

from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    """The message wrapper nested under ``request``."""

    message: Optional[str] = Field(default=None, description="Text sent to the model")


class ChatRequest(BaseModel):
    """Payload for a chat completion.

    - model: Optional DeepSeek model class (``deepseek_code`` or ``deepseek_chat``)
    - request: Wrapper holding the message to send
    """
    model: Optional[str] = None
    request: Optional[ChatMessage] = None

    @property
    def message(self) -> Optional[str]:
        return self.request.message if self.request else None


class ChatResponse(BaseModel):
    """Combined text of every streamed delta, in arrival order."""

    response: str
