"""
Wire payloads for the DeepSeek chat API.
"""
from typing import Optional

from pydantic import BaseModel


class ClearContextPayload(BaseModel):
    """Body of ``POST /clear_context``."""

    model_class: str
    append_welcome_message: bool = False


class CompletionPayload(BaseModel):
    """Body of ``POST /completions``."""

    message: str
    stream: bool = True
    model_preference: Optional[str] = None
    model_class: str
    temperature: float = 1.0
